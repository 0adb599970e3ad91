"""Repository for the loan workflow: registering and returning loans."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.catalog.models import ToolStatus
from components.catalog.repository import CatalogRepository
from components.core.database import transaction
from components.core.errors import InvalidStateError, NotFoundError, ValidationError
from components.core.timeutils import Clock, as_naive, days_between, system_clock
from components.customer.models import CustomerStatus
from components.customer.repository import CustomerRepository
from components.ledger.models import MovementType
from components.ledger.repository import LedgerRepository
from components.loan.models import Loan

logger = logging.getLogger(__name__)


def calculate_total_cost(daily_rental_rate: float, loan_date: datetime, due_date: datetime) -> float:
    """Rental cost for whole days until the due date, never less than one day."""
    days = max(1, days_between(loan_date, due_date))
    return daily_rental_rate * days


def calculate_fine(daily_fine_rate: float, due_date: datetime, return_date: datetime) -> float:
    """Late fee: whole days past the due date times the daily fine rate."""
    if return_date <= due_date:
        return 0.0
    return days_between(due_date, return_date) * daily_fine_rate


class LoanRepository:
    """
    Repository for loan operations.

    register_loan and return_loan each run as a single transaction that
    covers the unit status change, the loan row and the kardex movement.
    """

    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock
        self.catalog = CatalogRepository(session, clock=clock)
        self.customers = CustomerRepository(session)
        self.ledger = LedgerRepository(session)

    async def get_by_id(self, loan_id: int) -> Optional[Loan]:
        """Get loan by ID."""
        result = await self.session.execute(
            select(Loan).where(Loan.id == loan_id)
        )
        return result.scalar_one_or_none()

    async def require(self, loan_id: int) -> Loan:
        """Get loan by ID or raise NotFoundError."""
        loan = await self.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")
        return loan

    async def get_by_customer(self, customer_id: int) -> List[Loan]:
        """Get all loans of a customer, oldest first."""
        result = await self.session.execute(
            select(Loan).where(Loan.customer_id == customer_id).order_by(Loan.id)
        )
        return list(result.scalars().all())

    async def register_loan(
        self,
        tool_group_id: int,
        customer_id: int,
        due_date: datetime,
        acting_user: str,
    ) -> Loan:
        """
        Lend one unit of a tool group to a customer.

        - Tool group and customer must exist (NotFoundError)
        - Restricted customers cannot borrow (InvalidStateError)
        - A unit must be available (NoAvailabilityError)
        - Cost is the daily rental rate times whole days until due, minimum one day

        Nothing is persisted when any step fails.
        """
        due_date = as_naive(due_date)

        async with transaction(self.session):
            group = await self.catalog.require_group(tool_group_id)
            customer = await self.customers.require(customer_id)
            if customer.status == CustomerStatus.RESTRICTED:
                raise InvalidStateError(f"Customer {customer_id} is restricted and cannot borrow")

            unit = await self.catalog.allocate_unit(group.id)

            now = self.clock()
            loan = Loan(
                customer_id=customer.id,
                tool_unit_id=unit.id,
                loan_date=now,
                due_date=due_date,
                return_date=None,
                total_cost=calculate_total_cost(group.tariff.daily_rental_rate, now, due_date),
                fine_amount=0.0,
            )
            self.session.add(loan)
            await self.session.flush()

            await self.ledger.append(
                movement_type=MovementType.LOAN,
                tool_group_id=group.id,
                tool_unit_id=unit.id,
                customer_id=customer.id,
                details=f"Loan {loan.id} to customer {customer.id} - user: {acting_user}",
                occurred_at=now,
            )

        logger.info(
            "Registered loan %s: unit %s of group %s to customer %s, cost %s",
            loan.id, unit.id, group.id, customer.id, loan.total_cost,
        )
        return loan

    async def return_loan(
        self,
        loan_id: int,
        acting_user: str,
        damage_charge: Optional[float] = None,
    ) -> Loan:
        """
        Close an active loan and put its unit back to AVAILABLE.

        A late return is fined with the unit's own tariff. The kardex entry is
        attributed to the loan's customer, not to the acting user. Returning
        a loan twice raises InvalidStateError. A unit of a deactivated group
        is retired on return and gets a RETIRE movement after the RETURN.
        """
        if damage_charge is not None and damage_charge < 0:
            raise ValidationError("Damage charge cannot be negative")

        async with transaction(self.session):
            loan = await self.require(loan_id)
            if loan.return_date is not None:
                raise InvalidStateError(f"Loan {loan_id} was already returned")

            now = self.clock()
            unit = await self.catalog.release_unit(loan.tool_unit_id)
            group = await self.catalog.require_group(unit.tool_group_id)
            fine = calculate_fine(group.tariff.daily_fine_rate, loan.due_date, now)

            values = {"return_date": now, "fine_amount": fine}
            if damage_charge is not None:
                values["damage_charge"] = damage_charge
            result = await self.session.execute(
                update(Loan)
                .where(Loan.id == loan.id, Loan.return_date.is_(None))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidStateError(f"Loan {loan_id} was already returned")

            await self.ledger.append(
                movement_type=MovementType.RETURN,
                tool_group_id=group.id,
                tool_unit_id=unit.id,
                customer_id=loan.customer_id,
                details=f"Return of loan {loan.id} - user: {acting_user}",
                occurred_at=now,
            )
            if unit.status == ToolStatus.RETIRED:
                system_customer = await self.customers.get_or_create_system_customer()
                await self.ledger.append(
                    movement_type=MovementType.RETIRE,
                    tool_group_id=group.id,
                    tool_unit_id=unit.id,
                    customer_id=system_customer.id,
                    details=f"Returned unit retired, group {group.id} is deactivated - user: {acting_user}",
                    occurred_at=now,
                )
            loan = await self._refresh(loan.id)

        logger.info("Returned loan %s, fine %s", loan.id, loan.fine_amount)
        return loan

    async def _refresh(self, loan_id: int) -> Loan:
        """Reload a loan, overwriting stale in-session state."""
        result = await self.session.execute(
            select(Loan)
            .where(Loan.id == loan_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
