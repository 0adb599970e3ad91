"""Repository for the append-only kardex."""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.ledger.models import KardexMovement, MovementType
from components.ledger.schemas import KardexFilter


class LedgerRepository:
    """Appends and lists kardex movements. There is no update or delete."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def append(
        self,
        movement_type: MovementType,
        tool_group_id: int,
        tool_unit_id: Optional[int],
        customer_id: int,
        details: str,
        occurred_at: datetime,
    ) -> KardexMovement:
        """
        Write one movement inside the caller's transaction.

        The row is flushed so it gets its id, but never committed here:
        the state change it records and the entry itself must land together.
        """
        movement = KardexMovement(
            movement_type=movement_type,
            tool_group_id=tool_group_id,
            tool_unit_id=tool_unit_id,
            customer_id=customer_id,
            details=details,
            created_at=occurred_at,
        )
        self.session.add(movement)
        await self.session.flush()
        return movement

    async def list(self, filters: Optional[KardexFilter] = None) -> List[KardexMovement]:
        """List movements in the order they were appended."""
        query = select(KardexMovement)

        if filters:
            if filters.tool_group_id is not None:
                query = query.where(KardexMovement.tool_group_id == filters.tool_group_id)
            if filters.tool_unit_id is not None:
                query = query.where(KardexMovement.tool_unit_id == filters.tool_unit_id)
            if filters.movement_type is not None:
                query = query.where(KardexMovement.movement_type == filters.movement_type)
            if filters.date_from is not None:
                query = query.where(KardexMovement.created_at >= filters.date_from)
            if filters.date_to is not None:
                query = query.where(KardexMovement.created_at <= filters.date_to)

        result = await self.session.execute(query.order_by(KardexMovement.id))
        return list(result.scalars().all())
