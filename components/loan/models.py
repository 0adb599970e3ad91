"""Loan model for the database."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Numeric

from components.core.database import Base


class Loan(Base):
    """One borrowing transaction of a single tool unit. Active while return_date is NULL."""
    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    tool_unit_id = Column(Integer, ForeignKey("tool_units.id"), nullable=False, index=True)
    loan_date = Column(DateTime, nullable=False, index=True)
    due_date = Column(DateTime, nullable=False)
    return_date = Column(DateTime, nullable=True)
    total_cost = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    fine_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    damage_charge = Column(Numeric(12, 2, asdecimal=False), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.return_date is None
