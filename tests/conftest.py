"""Shared fixtures: a file-backed SQLite database and a controllable clock."""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from components.catalog.repository import CatalogRepository
from components.core.database import DatabaseManager
from components.customer.repository import CustomerRepository
from components.loan.repository import LoanRepository
# Register every table on Base
import components.customer.models
import components.catalog.models
import components.ledger.models
import components.loan.models

ACTING_USER = "tester"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 10, 0, 0))


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    # One connection per session so concurrent sessions really compete
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'toolrent.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    manager = DatabaseManager(engine)
    await manager.create_tables()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def session(db_manager):
    async with db_manager.get_db() as db:
        yield db


@pytest.fixture
def customers(session):
    return CustomerRepository(session)


@pytest.fixture
def catalog(session, clock):
    return CatalogRepository(session, clock=clock)


@pytest.fixture
def loans(session, clock):
    return LoanRepository(session, clock=clock)


@pytest_asyncio.fixture
async def customer(customers):
    return await customers.register("Ana Rojas", "12.345.678-9", "+56912345678", "ana@example.com")


@pytest_asyncio.fixture
async def drill(catalog):
    return await catalog.register_group(
        name="Drill",
        category="Power tools",
        replacement_value=85000.0,
        daily_rate=1000.0,
        initial_stock=2,
        acting_user=ACTING_USER,
        daily_fine_rate=500.0,
    )
