"""Pydantic schemas for customer data validation."""

from typing import Optional
from pydantic import BaseModel

from components.customer.models import CustomerStatus


class CustomerBase(BaseModel):
    """Base customer schema."""
    name: str
    rut: str
    phone: str
    email: str


class CustomerCreate(CustomerBase):
    """Schema for customer registration."""
    pass


class CustomerStatusUpdate(BaseModel):
    """Schema for a customer status change."""
    status: Optional[CustomerStatus] = None


class Customer(CustomerBase):
    """Schema for customer response."""
    id: int
    phone: Optional[str] = None
    email: Optional[str] = None
    status: CustomerStatus

    class Config:
        from_attributes = True
