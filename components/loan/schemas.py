"""Pydantic schemas for loan data validation."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class LoanCreate(BaseModel):
    """Schema for loan registration."""
    tool_group_id: int
    customer_id: int
    due_date: datetime


class LoanReturn(BaseModel):
    """Schema for a loan return. The damage charge is optional."""
    damage_charge: Optional[float] = None


class Loan(BaseModel):
    """Schema for loan response."""
    id: int
    customer_id: int
    tool_unit_id: int
    loan_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    total_cost: float
    fine_amount: float
    damage_charge: Optional[float] = None
    is_active: bool

    class Config:
        from_attributes = True
