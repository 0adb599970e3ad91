"""Tool group (catalog) endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.catalog.models import ToolStatus
from components.catalog.repository import CatalogRepository
from components.catalog import schemas
from components.core.init_db import get_db
from restapi.endpoints.auth import get_acting_user

router = APIRouter(
    prefix="/tool-groups",
    tags=["tool groups"],
    responses={404: {"description": "Not found"}},
)


async def _with_stock(repo: CatalogRepository, group) -> schemas.ToolGroupWithStock:
    summary = await repo.stock_summary(group.id)
    return schemas.ToolGroupWithStock(
        **schemas.ToolGroup.model_validate(group).model_dump(),
        stock=summary,
    )


@router.post("/", response_model=schemas.ToolGroupWithStock)
async def register_tool_group(
    group: schemas.ToolGroupCreate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """
    Register a tool group with its tariff and initial units.

    The daily fine rate defaults to the house rate when omitted.
    """
    repo = CatalogRepository(db)
    created = await repo.register_group(
        name=group.name,
        category=group.category,
        replacement_value=group.replacement_value,
        daily_rate=group.daily_rental_rate,
        initial_stock=group.stock,
        acting_user=acting_user,
        daily_fine_rate=group.daily_fine_rate,
    )
    return await _with_stock(repo, created)


@router.get("/", response_model=List[schemas.ToolGroupWithStock])
async def read_tool_groups(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Number of records to return"),
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get tool groups with unit counts per status."""
    repo = CatalogRepository(db)
    groups = await repo.list_groups(skip=skip, limit=limit)
    return [await _with_stock(repo, group) for group in groups]


@router.get("/{group_id}", response_model=schemas.ToolGroupWithStock)
async def read_tool_group(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get a specific tool group by ID."""
    repo = CatalogRepository(db)
    return await _with_stock(repo, await repo.require_group(group_id))


@router.get("/{group_id}/units", response_model=List[schemas.ToolUnit])
async def read_tool_group_units(
    group_id: int,
    status: Optional[ToolStatus] = Query(None, description="Only units in this status"),
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get the units of a tool group."""
    repo = CatalogRepository(db)
    await repo.require_group(group_id)
    return await repo.list_units(group_id, status=status)


@router.put("/{group_id}/replacement-value", response_model=schemas.ToolGroupWithStock)
async def update_replacement_value(
    group_id: int,
    update: schemas.ReplacementValueUpdate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Set a new replacement value (must be greater than zero)."""
    repo = CatalogRepository(db)
    group = await repo.update_replacement_value(group_id, update.replacement_value)
    return await _with_stock(repo, group)


@router.put("/{group_id}/tariff", response_model=schemas.ToolGroupWithStock)
async def update_tariff(
    group_id: int,
    update: schemas.TariffUpdate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Change the daily rental and/or fine rate."""
    repo = CatalogRepository(db)
    group = await repo.update_tariff(group_id, update.daily_rental_rate, update.daily_fine_rate)
    return await _with_stock(repo, group)


@router.post("/{group_id}/stock", response_model=schemas.ToolGroupWithStock)
async def adjust_stock(
    group_id: int,
    adjustment: schemas.StockAdjustment,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Add units (positive delta) or retire available units (negative delta)."""
    repo = CatalogRepository(db)
    group = await repo.adjust_stock(group_id, adjustment.delta, acting_user)
    return await _with_stock(repo, group)


@router.delete("/{group_id}", response_model=schemas.DeactivationResult)
async def deactivate_tool_group(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Retire every unit of the group that is not out on loan."""
    repo = CatalogRepository(db)
    retired = await repo.deactivate_group(group_id, acting_user)
    return schemas.DeactivationResult(tool_group_id=group_id, retired_units=retired)
