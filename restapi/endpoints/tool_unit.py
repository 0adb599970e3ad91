"""Tool unit endpoints for the API."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.catalog.repository import CatalogRepository
from components.catalog import schemas
from components.core.init_db import get_db
from restapi.endpoints.auth import get_acting_user

router = APIRouter(
    prefix="/tool-units",
    tags=["tool units"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{unit_id}", response_model=schemas.ToolUnit)
async def read_tool_unit(
    unit_id: int,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get a specific tool unit by ID."""
    repo = CatalogRepository(db)
    return await repo.require_unit(unit_id)


@router.patch("/{unit_id}/status", response_model=schemas.ToolUnit)
async def change_unit_status(
    unit_id: int,
    update: schemas.UnitStatusUpdate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Send a unit to repair, retire it, or bring it back to AVAILABLE."""
    repo = CatalogRepository(db)
    return await repo.change_unit_status(unit_id, update.status, acting_user)
