"""Repository for customer operations."""

import logging
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.config import get_settings
from components.core.database import transaction
from components.core.errors import NotFoundError, ValidationError
from components.customer.models import Customer, CustomerStatus

logger = logging.getLogger(__name__)


class CustomerRepository:
    """Repository for customer operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def register(self, name: str, rut: str, phone: str, email: str) -> Customer:
        """
        Register a new customer in ACTIVE status.

        All four fields are required and may not be blank. The e-mail
        format is not checked. Raises ValidationError on a duplicate rut.
        """
        if any(value is None or not str(value).strip() for value in (name, rut, phone, email)):
            raise ValidationError("Name, rut, phone and email are required")

        async with transaction(self.session):
            if await self.get_by_rut(rut) is not None:
                raise ValidationError(f"Customer with rut {rut} already exists")
            customer = Customer(
                name=name,
                rut=rut,
                phone=phone,
                email=email,
                status=CustomerStatus.ACTIVE,
            )
            self.session.add(customer)
            try:
                await self.session.flush()
            except IntegrityError as exc:
                # Unique rut taken by a concurrent registration
                raise ValidationError(f"Customer with rut {rut} already exists") from exc

        logger.info("Registered customer %s (rut %s)", customer.id, customer.rut)
        return customer

    async def get_by_id(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        result = await self.session.execute(
            select(Customer).where(Customer.id == customer_id)
        )
        return result.scalar_one_or_none()

    async def get_by_rut(self, rut: str) -> Optional[Customer]:
        """Get customer by rut."""
        result = await self.session.execute(
            select(Customer).where(Customer.rut == rut)
        )
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Customer]:
        """Get all customers ordered by ID."""
        result = await self.session.execute(
            select(Customer).order_by(Customer.id).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def require(self, customer_id: int) -> Customer:
        """Get customer by ID or raise NotFoundError."""
        customer = await self.get_by_id(customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    async def change_status(self, customer_id: int, new_status: Optional[CustomerStatus]) -> Customer:
        """
        Change the status of a customer.

        Setting the status the customer already has is allowed and simply
        re-persists it. A missing status is rejected.
        """
        if new_status is None:
            raise ValidationError("Customer status is required")

        async with transaction(self.session):
            customer = await self.require(customer_id)
            previous = customer.status
            customer.status = CustomerStatus(new_status)
            await self.session.flush()

        logger.info("Customer %s status %s -> %s", customer_id, previous.value, customer.status.value)
        return customer

    async def find_system_customer(self) -> Optional[Customer]:
        """Get the reserved system customer if it exists."""
        settings = get_settings()
        result = await self.session.execute(
            select(Customer).where(Customer.email == settings.SYSTEM_CUSTOMER_EMAIL)
        )
        return result.scalars().first()

    async def get_or_create_system_customer(self) -> Customer:
        """
        Return the reserved customer that internal ledger events are attributed to.

        Creates it with the configured sentinel values on first use. Only
        flushes; the enclosing transaction decides when it is committed.
        """
        customer = await self.find_system_customer()
        if customer is not None:
            return customer

        settings = get_settings()
        customer = Customer(
            name=settings.SYSTEM_CUSTOMER_NAME,
            rut=settings.SYSTEM_CUSTOMER_RUT,
            email=settings.SYSTEM_CUSTOMER_EMAIL,
            phone=settings.SYSTEM_CUSTOMER_PHONE,
            status=CustomerStatus.ACTIVE,
        )
        self.session.add(customer)
        await self.session.flush()
        logger.info("Created system customer %s", customer.id)
        return customer

    async def ensure_system_customer(self) -> Customer:
        """Create the system customer if missing and commit it."""
        async with transaction(self.session):
            customer = await self.get_or_create_system_customer()
        return customer
