"""Core schemas for the application."""

from pydantic import BaseModel


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    version: str
    status: str
    database: str


class ErrorResponse(BaseModel):
    """Schema for business and storage error responses."""
    detail: str
    error: str
