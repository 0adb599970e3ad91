"""Health check endpoint for monitoring application status."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core import schemas
from components.core.config import get_settings
from components.core.init_db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/health_check",
    tags=["services"],
    responses={200: {"description": "Service is up; see `database` for storage reachability"}},
)


@router.get("/", response_model=schemas.HealthCheck)
async def health_check(db: AsyncSession = Depends(get_db)) -> schemas.HealthCheck:
    """Report service status and whether the database answers a trivial query."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        database = "unreachable"

    return schemas.HealthCheck(
        service_name="ToolRent",
        version=get_settings().API_VERSION,
        status="healthy" if database == "ok" else "degraded",
        database=database,
    )
