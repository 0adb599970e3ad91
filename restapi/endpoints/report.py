"""Report endpoints for the API."""

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.customer import schemas as customer_schemas
from components.report.repository import ReportRepository
from components.report import schemas
from restapi.endpoints.auth import get_acting_user

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


def _date_range(date_from: Optional[date], date_to: Optional[date]) -> Tuple[datetime, datetime]:
    """Default to the last month up to today; the end day is included whole."""
    today = date.today()
    date_to = date_to or today
    date_from = date_from or (today - timedelta(days=30))
    start = datetime.combine(date_from, time.min)
    end = datetime.combine(date_to + timedelta(days=1), time.min)
    return start, end


@router.get("/active-loans", response_model=List[schemas.ActiveLoan])
async def get_active_loans(
    date_from: Optional[date] = Query(None, alias="from", description="First loan date (defaults to a month ago)"),
    date_to: Optional[date] = Query(None, alias="to", description="Last loan date (defaults to today)"),
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get loans not yet returned, taken within the date range, by due date."""
    start, end = _date_range(date_from, date_to)
    repo = ReportRepository(db)
    return await repo.active_loans(start, end)


@router.get("/overdue-customers", response_model=List[customer_schemas.Customer])
async def get_overdue_customers(
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get customers with at least one active loan past its due date."""
    repo = ReportRepository(db)
    return await repo.overdue_customers()


@router.get("/top-tools", response_model=List[schemas.ToolLoanCount])
async def get_top_tools(
    date_from: Optional[date] = Query(None, alias="from", description="First loan date (defaults to a month ago)"),
    date_to: Optional[date] = Query(None, alias="to", description="Last loan date (defaults to today)"),
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Rank tool groups by number of loans taken within the date range."""
    start, end = _date_range(date_from, date_to)
    repo = ReportRepository(db)
    return await repo.top_tools(start, end)
