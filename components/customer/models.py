"""Customer model for the database."""

import enum

from sqlalchemy import Column, Integer, String, Enum

from components.core.database import Base


class CustomerStatus(str, enum.Enum):
    """Borrowing eligibility of a customer."""
    ACTIVE = "ACTIVE"
    RESTRICTED = "RESTRICTED"


class Customer(Base):
    """Customer model representing a borrowing party."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    rut = Column(String(20), unique=True, nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    status = Column(
        Enum(CustomerStatus, native_enum=False, length=20),
        nullable=False,
        default=CustomerStatus.ACTIVE,
    )
