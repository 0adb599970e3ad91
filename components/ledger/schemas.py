"""Pydantic schemas for kardex data."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from components.ledger.models import MovementType


class KardexFilter(BaseModel):
    """Optional filters for listing kardex movements."""
    tool_group_id: Optional[int] = None
    tool_unit_id: Optional[int] = None
    movement_type: Optional[MovementType] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class KardexMovement(BaseModel):
    """Schema for kardex movement response."""
    id: int
    tool_group_id: int
    tool_unit_id: Optional[int] = None
    customer_id: int
    movement_type: MovementType
    created_at: datetime
    details: Optional[str] = None

    class Config:
        from_attributes = True
