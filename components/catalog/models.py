"""Tool group, tariff and tool unit models for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Enum
from sqlalchemy.orm import relationship

from components.core.database import Base


class ToolStatus(str, enum.Enum):
    """Lifecycle status of a single tool unit. RETIRED is terminal."""
    AVAILABLE = "AVAILABLE"
    LOANED = "LOANED"
    IN_REPAIR = "IN_REPAIR"
    RETIRED = "RETIRED"


class ToolGroup(Base):
    """Catalog entry for one kind of rentable tool."""
    __tablename__ = "tool_groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    replacement_value = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    created_at = Column(DateTime, nullable=False)
    # Set once by deactivate_group; returned units of the group are retired
    deactivated_at = Column(DateTime, nullable=True)

    # Relationships
    tariff = relationship(
        "Tariff",
        back_populates="tool_group",
        uselist=False,
        lazy="joined",
        cascade="all, delete-orphan",
    )
    units = relationship(
        "ToolUnit",
        back_populates="tool_group",
        lazy="selectin",
        order_by="ToolUnit.id",
    )

    @property
    def is_active(self) -> bool:
        """False once the group has been deactivated."""
        return self.deactivated_at is None


class Tariff(Base):
    """Daily rental and fine rates owned by exactly one tool group."""
    __tablename__ = "tariffs"

    id = Column(Integer, primary_key=True, index=True)
    tool_group_id = Column(Integer, ForeignKey("tool_groups.id"), unique=True, nullable=False)
    daily_rental_rate = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    daily_fine_rate = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    # Relationships
    tool_group = relationship("ToolGroup", back_populates="tariff")


class ToolUnit(Base):
    """One physical, individually tracked instance of a tool group."""
    __tablename__ = "tool_units"

    id = Column(Integer, primary_key=True, index=True)
    tool_group_id = Column(Integer, ForeignKey("tool_groups.id"), nullable=False, index=True)
    status = Column(
        Enum(ToolStatus, native_enum=False, length=20),
        nullable=False,
        default=ToolStatus.AVAILABLE,
        index=True,
    )

    # Relationships
    tool_group = relationship("ToolGroup", back_populates="units")
