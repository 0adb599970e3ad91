"""Kardex (ledger) endpoints for the API."""

from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.ledger.models import MovementType
from components.ledger.repository import LedgerRepository
from components.ledger import schemas
from restapi.endpoints.auth import get_acting_user

router = APIRouter(
    prefix="/kardex",
    tags=["kardex"],
)


@router.get("/", response_model=List[schemas.KardexMovement])
async def read_movements(
    tool_group_id: Optional[int] = Query(None, description="Only movements of this tool group"),
    tool_unit_id: Optional[int] = Query(None, description="Only movements of this tool unit"),
    movement_type: Optional[MovementType] = Query(None, description="Only movements of this type"),
    date_from: Optional[datetime] = Query(None, description="Movements at or after this time"),
    date_to: Optional[datetime] = Query(None, description="Movements at or before this time"),
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """List kardex movements in the order they were recorded."""
    repo = LedgerRepository(db)
    return await repo.list(schemas.KardexFilter(
        tool_group_id=tool_group_id,
        tool_unit_id=tool_unit_id,
        movement_type=movement_type,
        date_from=date_from,
        date_to=date_to,
    ))
