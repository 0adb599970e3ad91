"""Loan endpoints for the API."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.loan.repository import LoanRepository
from components.loan import schemas
from restapi.endpoints.auth import get_acting_user

router = APIRouter(
    prefix="/loans",
    tags=["loans"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=schemas.Loan)
async def register_loan(
    loan: schemas.LoanCreate,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """
    Lend one available unit of a tool group to a customer.

    Returns the loan with its total cost:
    - daily rental rate times whole days until the due date
    - at least one day, even for a due date in the past
    """
    repo = LoanRepository(db)
    return await repo.register_loan(loan.tool_group_id, loan.customer_id, loan.due_date, acting_user)


@router.get("/{loan_id}", response_model=schemas.Loan)
async def read_loan(
    loan_id: int,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Get a specific loan by ID."""
    repo = LoanRepository(db)
    return await repo.require(loan_id)


@router.post("/{loan_id}/return", response_model=schemas.Loan)
async def return_loan(
    loan_id: int,
    loan_return: schemas.LoanReturn | None = None,
    db: AsyncSession = Depends(get_db),
    acting_user: str = Depends(get_acting_user)
):
    """Return a loan, applying the late fine and an optional damage charge."""
    repo = LoanRepository(db)
    damage_charge = loan_return.damage_charge if loan_return else None
    return await repo.return_loan(loan_id, acting_user, damage_charge=damage_charge)
