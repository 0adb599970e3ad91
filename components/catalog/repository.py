"""Repository for catalog operations: tool groups, tariffs and unit status."""

import logging
from typing import Dict, List, Optional, Sequence
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.catalog.models import Tariff, ToolGroup, ToolStatus, ToolUnit
from components.catalog import schemas
from components.core.config import get_settings
from components.core.database import transaction
from components.core.errors import (
    InvalidStateError,
    InvalidTransitionError,
    NoAvailabilityError,
    NotFoundError,
    ValidationError,
)
from components.core.timeutils import Clock, system_clock
from components.customer.repository import CustomerRepository
from components.ledger.models import MovementType
from components.ledger.repository import LedgerRepository

logger = logging.getLogger(__name__)

# Ledger movement written for each maintenance target status. LOANED is only
# reachable through the loan workflow and has no entry.
STATUS_MOVEMENTS: Dict[ToolStatus, MovementType] = {
    ToolStatus.IN_REPAIR: MovementType.REPAIR,
    ToolStatus.RETIRED: MovementType.RETIRE,
    ToolStatus.AVAILABLE: MovementType.RE_ENTRY,
}


class CatalogRepository:
    """
    Repository for the tool catalog.

    The catalog is the only authority on unit availability. Unit status is
    always changed with a conditional UPDATE keyed on the expected current
    status, so two sessions can never both move the same unit.

    Public operations that stand alone (register_group, change_unit_status,
    ...) run in their own transaction. allocate_unit and release_unit only
    flush: they are building blocks for the loan workflow, which commits.
    """

    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock
        self.ledger = LedgerRepository(session)
        self.customers = CustomerRepository(session)

    # -- Tool groups --

    async def register_group(
        self,
        name: str,
        category: str,
        replacement_value: Optional[float],
        daily_rate: Optional[float],
        initial_stock: int,
        acting_user: str,
        daily_fine_rate: Optional[float] = None,
    ) -> ToolGroup:
        """
        Create a tool group with its tariff and `initial_stock` AVAILABLE units.

        The fine rate falls back to the house rate from settings. Writes one
        REGISTRY movement attributed to the system customer unless the
        initial stock is zero.
        """
        if not name or not name.strip() or not category or not category.strip() or replacement_value is None:
            raise ValidationError("Name, category and replacement value are required")
        if initial_stock is None or initial_stock < 0:
            raise ValidationError("Initial stock cannot be negative")

        if daily_fine_rate is None:
            daily_fine_rate = get_settings().HOUSE_DAILY_FINE_RATE

        async with transaction(self.session):
            group = ToolGroup(
                name=name,
                category=category,
                replacement_value=replacement_value,
                created_at=self.clock(),
                tariff=Tariff(
                    daily_rental_rate=daily_rate if daily_rate is not None else 0.0,
                    daily_fine_rate=daily_fine_rate,
                ),
                units=[ToolUnit(status=ToolStatus.AVAILABLE) for _ in range(initial_stock)],
            )
            self.session.add(group)
            await self.session.flush()

            if initial_stock > 0:
                system_customer = await self.customers.get_or_create_system_customer()
                await self.ledger.append(
                    movement_type=MovementType.REGISTRY,
                    tool_group_id=group.id,
                    tool_unit_id=group.units[0].id,
                    customer_id=system_customer.id,
                    details=f"Group registered: {group.name} - initial stock: {initial_stock} - user: {acting_user}",
                    occurred_at=self.clock(),
                )

        logger.info("Registered tool group %s '%s' with %d units", group.id, group.name, initial_stock)
        return group

    async def get_group(self, group_id: int) -> Optional[ToolGroup]:
        """Get tool group by ID."""
        result = await self.session.execute(
            select(ToolGroup).where(ToolGroup.id == group_id)
        )
        return result.unique().scalar_one_or_none()

    async def require_group(self, group_id: int) -> ToolGroup:
        """Get tool group by ID or raise NotFoundError."""
        group = await self.get_group(group_id)
        if group is None:
            raise NotFoundError(f"Tool group {group_id} not found")
        return group

    async def list_groups(self, skip: int = 0, limit: int = 100) -> List[ToolGroup]:
        """Get tool groups ordered by ID."""
        result = await self.session.execute(
            select(ToolGroup).order_by(ToolGroup.id).offset(skip).limit(limit)
        )
        return list(result.unique().scalars().all())

    async def update_replacement_value(self, group_id: int, value: Optional[float]) -> ToolGroup:
        """Set a new replacement value. It must be greater than zero."""
        if value is None or value <= 0:
            raise ValidationError("Replacement value must be greater than zero")

        async with transaction(self.session):
            group = await self.require_group(group_id)
            group.replacement_value = value
            await self.session.flush()

        logger.info("Tool group %s replacement value set to %s", group_id, value)
        return group

    async def update_tariff(
        self,
        group_id: int,
        daily_rental_rate: Optional[float] = None,
        daily_fine_rate: Optional[float] = None,
    ) -> ToolGroup:
        """Change the group's rates. Values are stored as given."""
        async with transaction(self.session):
            group = await self.require_group(group_id)
            if daily_rental_rate is not None:
                group.tariff.daily_rental_rate = daily_rental_rate
            if daily_fine_rate is not None:
                group.tariff.daily_fine_rate = daily_fine_rate
            await self.session.flush()

        logger.info(
            "Tool group %s tariff set to rental=%s fine=%s",
            group_id, group.tariff.daily_rental_rate, group.tariff.daily_fine_rate,
        )
        return group

    async def adjust_stock(self, group_id: int, delta: int, acting_user: str) -> ToolGroup:
        """
        Add `delta` AVAILABLE units, or retire `-delta` AVAILABLE units.

        Fails with ValidationError when fewer AVAILABLE units exist than
        would be removed, and with InvalidStateError when adding units to a
        deactivated group. Writes one REGISTRY or RETIRE movement.
        """
        if delta == 0:
            return await self.require_group(group_id)

        async with transaction(self.session):
            group = await self.require_group(group_id)
            system_customer = await self.customers.get_or_create_system_customer()

            if delta > 0:
                if not group.is_active:
                    raise InvalidStateError(f"Tool group {group.id} is deactivated")
                new_units = [ToolUnit(status=ToolStatus.AVAILABLE) for _ in range(delta)]
                group.units.extend(new_units)
                await self.session.flush()
                await self.ledger.append(
                    movement_type=MovementType.REGISTRY,
                    tool_group_id=group.id,
                    tool_unit_id=new_units[0].id,
                    customer_id=system_customer.id,
                    details=f"Stock increased by {delta} - user: {acting_user}",
                    occurred_at=self.clock(),
                )
            else:
                count = -delta
                unit_ids = await self._lock_units(group.id, [ToolStatus.AVAILABLE], limit=count)
                if len(unit_ids) < count:
                    raise ValidationError(
                        f"Cannot remove {count} units from group {group.id}: only {len(unit_ids)} available"
                    )
                if await self._set_status(unit_ids, [ToolStatus.AVAILABLE], ToolStatus.RETIRED) != count:
                    raise ValidationError(f"Available stock of group {group.id} changed, retry the adjustment")
                await self._refresh_units(unit_ids)
                await self.ledger.append(
                    movement_type=MovementType.RETIRE,
                    tool_group_id=group.id,
                    tool_unit_id=unit_ids[0],
                    customer_id=system_customer.id,
                    details=f"Stock decreased by {count} - user: {acting_user}",
                    occurred_at=self.clock(),
                )

        logger.info("Tool group %s stock adjusted by %d", group_id, delta)
        return group

    async def deactivate_group(self, group_id: int, acting_user: str) -> int:
        """
        Retire every AVAILABLE and IN_REPAIR unit of a group.

        Units out on loan keep their LOANED status and are retired when they
        come back (see release_unit). The group stops lending for good. Writes
        one RETIRE movement when anything was retired and returns the count.
        """
        retirable = [ToolStatus.AVAILABLE, ToolStatus.IN_REPAIR]

        async with transaction(self.session):
            group = await self.require_group(group_id)
            if group.deactivated_at is None:
                group.deactivated_at = self.clock()
                await self.session.flush()
            unit_ids = await self._lock_units(group.id, retirable)
            retired = await self._set_status(unit_ids, retirable, ToolStatus.RETIRED) if unit_ids else 0

            if retired:
                units = await self._refresh_units(unit_ids)
                first_retired = next(unit for unit in units if unit.status == ToolStatus.RETIRED)
                system_customer = await self.customers.get_or_create_system_customer()
                await self.ledger.append(
                    movement_type=MovementType.RETIRE,
                    tool_group_id=group.id,
                    tool_unit_id=first_retired.id,
                    customer_id=system_customer.id,
                    details=f"Group deactivated: {group.name} - units retired: {retired} - user: {acting_user}",
                    occurred_at=self.clock(),
                )

        logger.info("Tool group %s deactivated, %d units retired", group_id, retired)
        return retired

    async def stock_summary(self, group_id: int) -> schemas.StockSummary:
        """Count the group's units per status."""
        result = await self.session.execute(
            select(ToolUnit.status, func.count(ToolUnit.id))
            .where(ToolUnit.tool_group_id == group_id)
            .group_by(ToolUnit.status)
        )
        counts = {status: count for status, count in result.all()}
        return schemas.StockSummary(
            available=counts.get(ToolStatus.AVAILABLE, 0),
            loaned=counts.get(ToolStatus.LOANED, 0),
            in_repair=counts.get(ToolStatus.IN_REPAIR, 0),
            retired=counts.get(ToolStatus.RETIRED, 0),
            total=sum(counts.values()),
        )

    # -- Tool units --

    async def get_unit(self, unit_id: int) -> Optional[ToolUnit]:
        """Get tool unit by ID."""
        result = await self.session.execute(
            select(ToolUnit).where(ToolUnit.id == unit_id)
        )
        return result.scalar_one_or_none()

    async def require_unit(self, unit_id: int) -> ToolUnit:
        """Get tool unit by ID or raise NotFoundError."""
        unit = await self.get_unit(unit_id)
        if unit is None:
            raise NotFoundError(f"Tool unit {unit_id} not found")
        return unit

    async def list_units(self, group_id: int, status: Optional[ToolStatus] = None) -> List[ToolUnit]:
        """Get the units of a group, optionally only those in one status."""
        query = select(ToolUnit).where(ToolUnit.tool_group_id == group_id)
        if status is not None:
            query = query.where(ToolUnit.status == status)
        result = await self.session.execute(query.order_by(ToolUnit.id))
        return list(result.scalars().all())

    async def allocate_unit(self, group_id: int) -> ToolUnit:
        """
        Take one AVAILABLE unit of the group and mark it LOANED.

        The candidate row is locked where the dialect supports it and the
        status flip only succeeds if the unit is still AVAILABLE. When another
        session wins the race the next candidate is tried. Does not commit.
        Deactivated groups lend nothing (InvalidStateError).
        """
        group = await self.require_group(group_id)
        if not group.is_active:
            raise InvalidStateError(f"Tool group {group_id} is deactivated")

        while True:
            candidates = await self._lock_units(group_id, [ToolStatus.AVAILABLE], limit=1)
            if not candidates:
                raise NoAvailabilityError(f"No available units in tool group {group_id}")
            if await self._set_status(candidates, [ToolStatus.AVAILABLE], ToolStatus.LOANED):
                units = await self._refresh_units(candidates)
                logger.debug("Allocated unit %s of group %s", units[0].id, group_id)
                return units[0]
            logger.debug("Unit %s of group %s taken concurrently, retrying", candidates[0], group_id)

    async def release_unit(self, unit_id: int) -> ToolUnit:
        """
        Take a LOANED unit back. Does not commit.

        The unit becomes AVAILABLE, or RETIRED when its group was deactivated
        while it was out.
        """
        unit = await self.require_unit(unit_id)
        deactivated_at = (await self.session.execute(
            select(ToolGroup.deactivated_at).where(ToolGroup.id == unit.tool_group_id)
        )).scalar_one()
        target = ToolStatus.AVAILABLE if deactivated_at is None else ToolStatus.RETIRED
        if not await self._set_status([unit_id], [ToolStatus.LOANED], target):
            unit = (await self._refresh_units([unit_id]))[0]
            raise InvalidStateError(f"Tool unit {unit_id} is {unit.status.value}, not LOANED")
        return (await self._refresh_units([unit.id]))[0]

    async def change_unit_status(self, unit_id: int, new_status: ToolStatus, acting_user: str) -> ToolUnit:
        """
        Maintenance transition of one unit outside the loan workflow.

        Rejected when the unit already has `new_status`, when it is RETIRED,
        and when LOANED is involved on either side (loans own that status).
        Writes the movement mapped in STATUS_MOVEMENTS.
        """
        new_status = ToolStatus(new_status)

        async with transaction(self.session):
            unit = await self.require_unit(unit_id)
            current = unit.status

            if current == ToolStatus.RETIRED:
                raise InvalidTransitionError(f"Tool unit {unit_id} is already retired")
            if current == new_status:
                raise InvalidTransitionError(f"Tool unit {unit_id} is already {new_status.value}")
            if ToolStatus.LOANED in (current, new_status):
                raise InvalidTransitionError(
                    f"Tool unit {unit_id} cannot change {current.value} -> {new_status.value} outside a loan"
                )
            if not await self._set_status([unit_id], [current], new_status):
                raise InvalidTransitionError(f"Tool unit {unit_id} changed status concurrently")

            system_customer = await self.customers.get_or_create_system_customer()
            await self.ledger.append(
                movement_type=STATUS_MOVEMENTS[new_status],
                tool_group_id=unit.tool_group_id,
                tool_unit_id=unit.id,
                customer_id=system_customer.id,
                details=f"Status change: {current.value} -> {new_status.value} - user: {acting_user}",
                occurred_at=self.clock(),
            )
            unit = (await self._refresh_units([unit_id]))[0]

        logger.info("Tool unit %s status %s -> %s", unit_id, current.value, new_status.value)
        return unit

    # -- Helpers --

    async def _lock_units(
        self, group_id: int, statuses: Sequence[ToolStatus], limit: Optional[int] = None
    ) -> List[int]:
        """Select unit ids in the given statuses, row-locked, skipping rows other sessions hold."""
        query = (
            select(ToolUnit.id)
            .where(ToolUnit.tool_group_id == group_id, ToolUnit.status.in_(statuses))
            .order_by(ToolUnit.id)
            .with_for_update(skip_locked=True)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _set_status(
        self, unit_ids: Sequence[int], expected: Sequence[ToolStatus], new_status: ToolStatus
    ) -> int:
        """Move units still in an expected status to new_status; returns how many moved."""
        result = await self.session.execute(
            update(ToolUnit)
            .where(ToolUnit.id.in_(unit_ids), ToolUnit.status.in_(expected))
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def _refresh_units(self, unit_ids: Sequence[int]) -> List[ToolUnit]:
        """Reload units from the database, overwriting stale in-session state."""
        result = await self.session.execute(
            select(ToolUnit)
            .where(ToolUnit.id.in_(unit_ids))
            .order_by(ToolUnit.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
