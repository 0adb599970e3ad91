"""Pydantic schemas for catalog data validation."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from components.catalog.models import ToolStatus


class ToolGroupCreate(BaseModel):
    """Schema for tool group registration."""
    name: str
    category: str
    replacement_value: Optional[float] = None
    daily_rental_rate: float
    daily_fine_rate: Optional[float] = None
    stock: int = 0


class ReplacementValueUpdate(BaseModel):
    """Schema for a replacement value change."""
    replacement_value: Optional[float] = None


class TariffUpdate(BaseModel):
    """Schema for a tariff change. Missing rates are left as they are."""
    daily_rental_rate: Optional[float] = None
    daily_fine_rate: Optional[float] = None


class StockAdjustment(BaseModel):
    """Schema for adding (positive) or retiring (negative) units."""
    delta: int


class UnitStatusUpdate(BaseModel):
    """Schema for a maintenance status change of one unit."""
    status: ToolStatus


class Tariff(BaseModel):
    """Schema for tariff response."""
    daily_rental_rate: float
    daily_fine_rate: float

    class Config:
        from_attributes = True


class ToolUnit(BaseModel):
    """Schema for tool unit response."""
    id: int
    tool_group_id: int
    status: ToolStatus

    class Config:
        from_attributes = True


class StockSummary(BaseModel):
    """Unit counts per status. Units are never deleted, so total is every unit ever created."""
    available: int = 0
    loaned: int = 0
    in_repair: int = 0
    retired: int = 0
    total: int = 0


class ToolGroup(BaseModel):
    """Schema for tool group response."""
    id: int
    name: str
    category: str
    replacement_value: float
    created_at: datetime
    deactivated_at: Optional[datetime] = None
    is_active: bool = True
    tariff: Tariff

    class Config:
        from_attributes = True


class ToolGroupWithStock(ToolGroup):
    """Schema for tool group response with unit counts."""
    stock: StockSummary = Field(default_factory=StockSummary)


class DeactivationResult(BaseModel):
    """Schema for group deactivation response."""
    tool_group_id: int
    retired_units: int
