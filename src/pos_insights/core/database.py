"""MongoDB client lifecycle and request-scoped database access."""

import logging

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from .config import MONGODB_URL
from ..features.auth.models import INDEXES as AUTH_INDEXES
from ..features.sales.models import INDEXES as SALES_INDEXES

logger = logging.getLogger(__name__)


def create_client(url: str = MONGODB_URL) -> AsyncMongoClient:
    # Timestamps come back naive and are treated as UTC throughout.
    return AsyncMongoClient(url, tz_aware=False)


def get_database(request: Request) -> AsyncDatabase:
    """FastAPI dependency returning the database opened by the app lifespan."""
    return request.app.state.database


async def ensure_indexes(db: AsyncDatabase) -> list[str]:
    """Creates the secondary indexes every collection relies on.

    create_index is idempotent, so this runs on every startup.
    """
    created = []
    for collection, keys, options in [*SALES_INDEXES, *AUTH_INDEXES]:
        name = await db[collection].create_index(keys, **options)
        created.append(f"{collection}.{name}")
    logger.info(f"Ensured {len(created)} indexes.")
    return created
