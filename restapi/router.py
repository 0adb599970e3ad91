"""Application configuration and router setup."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi

from components.core import init_db
from components.core.logging_config import configure_logging
from components.customer.repository import CustomerRepository
from restapi.errors import ERROR_RESPONSES, install_error_handlers
from restapi.endpoints import health_check, customer, tool_group, tool_unit, loan, kardex, report

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create tables and the system customer on startup, release the pool on shutdown."""
    await init_db.create_tables()
    async with init_db.db_manager.get_db() as session:
        system_customer = await CustomerRepository(session).ensure_system_customer()
    logger.info("System customer ready (id %s)", system_customer.id)
    yield
    await init_db.db_manager.dispose()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = fastapi.FastAPI(
        title="ToolRent",
        description="Tool rental inventory and loan ledger",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # Include routers
    app.include_router(health_check.router)
    for endpoint in (customer, tool_group, tool_unit, loan, kardex, report):
        app.include_router(endpoint.router, responses=ERROR_RESPONSES)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title="ToolRent",
            version="1.0.0",
            description="Tool rental inventory and loan ledger",
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
