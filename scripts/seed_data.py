"""Script to seed demo catalog, customers and loans into the database."""

from datetime import datetime, timedelta
import asyncio
import logging

from components.catalog.repository import CatalogRepository
from components.core.init_db import db_manager, create_tables, get_db
from components.core.logging_config import configure_logging
from components.customer.repository import CustomerRepository
from components.loan.repository import LoanRepository

logger = logging.getLogger(__name__)

SEED_USER = "seed-script"

GROUPS = [
    # name, category, replacement value, daily rate, daily fine, stock
    ("Drill", "Power tools", 85000.0, 1000.0, 500.0, 5),
    ("Circular saw", "Power tools", 120000.0, 3500.0, 2500.0, 3),
    ("Ladder 6m", "Access", 60000.0, 1500.0, 1000.0, 4),
    ("Concrete mixer", "Construction", 450000.0, 12000.0, 6000.0, 2),
]

CUSTOMERS = [
    ("Ana Rojas", "12.345.678-9", "+56912345678", "ana@example.com"),
    ("Bruno Diaz", "9.876.543-2", "+56987654321", "bruno@example.com"),
    ("Carla Soto", "15.111.222-3", "+56911122233", "carla@example.com"),
]


async def seed_data():
    """Seed demo data into the database."""
    configure_logging()
    await create_tables()

    async for db in get_db():
        customers = CustomerRepository(db)
        await customers.ensure_system_customer()
        created_customers = [await customers.register(*row) for row in CUSTOMERS]

        catalog = CatalogRepository(db)
        groups = []
        for name, category, replacement_value, daily_rate, daily_fine, stock in GROUPS:
            groups.append(await catalog.register_group(
                name=name,
                category=category,
                replacement_value=replacement_value,
                daily_rate=daily_rate,
                initial_stock=stock,
                acting_user=SEED_USER,
                daily_fine_rate=daily_fine,
            ))

        loans = LoanRepository(db)
        now = datetime.now()
        for i, customer in enumerate(created_customers):
            await loans.register_loan(
                tool_group_id=groups[i % len(groups)].id,
                customer_id=customer.id,
                due_date=now + timedelta(days=3 + i),
                acting_user=SEED_USER,
            )

    await db_manager.dispose()
    logger.info("Seeded %d tool groups and %d customers", len(GROUPS), len(CUSTOMERS))


if __name__ == "__main__":
    asyncio.run(seed_data())
