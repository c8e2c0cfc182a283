import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request

from .core import logging_config  # noqa: F401  configures the "pos_insights" logger
from .core.config import DEFAULT_ADMIN_PASSWORD, DEFAULT_ADMIN_USERNAME, DEMO_MODE, MONGODB_DATABASE
from .core.database import create_client, ensure_indexes
from .core.exception_handlers import app_exception_handlers
from .core.policy import policy_for
from .features.auth.router import router as auth_router
from .features.auth.security import get_password_hash
from .features.auth.service import seed_default_user
from .features.reports.router import router as reports_router

logger = logging.getLogger("pos_insights.main")  # This logger will inherit from 'pos_insights'


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Opens the MongoDB client, makes sure indexes and the default admin exist,
    and picks the write policy for the deployment.
    """
    logger.info("Starting application...")
    client = create_client()
    app.state.database = client[MONGODB_DATABASE]
    app.state.write_policy = policy_for(DEMO_MODE)
    if DEMO_MODE:
        logger.warning("DEMO_MODE is on, writes are disabled.")

    await ensure_indexes(app.state.database)
    await seed_default_user(
        app.state.database, DEFAULT_ADMIN_USERNAME, get_password_hash(DEFAULT_ADMIN_PASSWORD)
    )
    logger.info(f"Connected to MongoDB database '{MONGODB_DATABASE}'.")

    yield

    await client.close()
    logger.info("MongoDB client has been closed.")


app = FastAPI(
    title="POS Insights API",
    description="Back-office API for point-of-sale dashboards.",
    version="0.1.0",
    exception_handlers=app_exception_handlers(),
    lifespan=lifespan,
)


@app.get("/")
async def read_root(request: Request):
    """
    Root endpoint for the API.
    """
    client_host = request.client.host if request.client else "unknown client"
    logger.info(f"Root endpoint '/' accessed by {client_host}")
    return {"message": "Welcome to the POS Insights API!"}


app.include_router(auth_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
