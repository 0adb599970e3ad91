"""Customer endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.customer.repository import CustomerRepository
from components.customer import schemas
from restapi.endpoints.auth import get_acting_user

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Customer)
async def register_customer(
    customer: schemas.CustomerCreate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Register a new customer in ACTIVE status."""
    repo = CustomerRepository(db)
    return await repo.register(customer.name, customer.rut, customer.phone, customer.email)


@router.get("/", response_model=List[schemas.Customer])
async def read_customers(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Number of records to return"),
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get list of customers."""
    repo = CustomerRepository(db)
    return await repo.get_all(skip=skip, limit=limit)


@router.get("/{customer_id}", response_model=schemas.Customer)
async def read_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get a specific customer by ID."""
    repo = CustomerRepository(db)
    return await repo.require(customer_id)


@router.patch("/{customer_id}/status", response_model=schemas.Customer)
async def change_customer_status(
    customer_id: int,
    update: schemas.CustomerStatusUpdate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Set a customer ACTIVE or RESTRICTED."""
    repo = CustomerRepository(db)
    return await repo.change_status(customer_id, update.status)
