"""Pydantic schemas for report responses."""

from datetime import datetime
from pydantic import BaseModel


class ActiveLoan(BaseModel):
    """Schema for an active loan row with display names."""
    id: int
    customer_id: int
    customer_name: str
    tool_unit_id: int
    tool_name: str
    loan_date: datetime
    due_date: datetime
    status: str  # ACTIVE or OVERDUE


class ToolLoanCount(BaseModel):
    """Schema for one row of the tool ranking."""
    tool_group_id: int
    tool_name: str
    loan_count: int
