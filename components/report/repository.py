"""Read-only report queries over loans, customers and the catalog."""

from datetime import datetime
from typing import List
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.catalog.models import ToolGroup, ToolUnit
from components.core.timeutils import Clock, system_clock
from components.customer.models import Customer
from components.loan.models import Loan
from components.report import schemas


class ReportRepository:
    """Repository for reports. Nothing here writes."""

    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock

    async def active_loans(self, date_from: datetime, date_to: datetime) -> List[schemas.ActiveLoan]:
        """
        Get loans not yet returned whose loan date lies in [date_from, date_to].

        Rows are ordered by due date; loans past their due date are flagged
        OVERDUE.
        """
        now = self.clock()
        result = await self.session.execute(
            select(Loan, Customer.name, ToolGroup.name)
            .join(Customer, Loan.customer_id == Customer.id)
            .join(ToolUnit, Loan.tool_unit_id == ToolUnit.id)
            .join(ToolGroup, ToolUnit.tool_group_id == ToolGroup.id)
            .where(
                Loan.return_date.is_(None),
                Loan.loan_date >= date_from,
                Loan.loan_date <= date_to,
            )
            .order_by(Loan.due_date, Loan.id)
        )
        return [
            schemas.ActiveLoan(
                id=loan.id,
                customer_id=loan.customer_id,
                customer_name=customer_name,
                tool_unit_id=loan.tool_unit_id,
                tool_name=tool_name,
                loan_date=loan.loan_date,
                due_date=loan.due_date,
                status="OVERDUE" if loan.due_date < now else "ACTIVE",
            )
            for loan, customer_name, tool_name in result.all()
        ]

    async def overdue_customers(self) -> List[Customer]:
        """Get distinct customers holding at least one active loan past its due date."""
        overdue = (
            select(Loan.customer_id)
            .where(Loan.return_date.is_(None), Loan.due_date < self.clock())
        )
        result = await self.session.execute(
            select(Customer).where(Customer.id.in_(overdue)).order_by(Customer.id)
        )
        return list(result.scalars().all())

    async def top_tools(self, date_from: datetime, date_to: datetime) -> List[schemas.ToolLoanCount]:
        """Rank tool groups by number of loans in the range, ties by group id."""
        loan_count = func.count(Loan.id).label("loan_count")
        result = await self.session.execute(
            select(ToolGroup.id, ToolGroup.name, loan_count)
            .join(ToolUnit, ToolUnit.tool_group_id == ToolGroup.id)
            .join(Loan, Loan.tool_unit_id == ToolUnit.id)
            .where(Loan.loan_date >= date_from, Loan.loan_date <= date_to)
            .group_by(ToolGroup.id, ToolGroup.name)
            .order_by(loan_count.desc(), ToolGroup.id)
        )
        return [
            schemas.ToolLoanCount(tool_group_id=group_id, tool_name=name, loan_count=count)
            for group_id, name, count in result.all()
        ]
