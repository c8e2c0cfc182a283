"""Runs aggregation pipelines against the record store."""

from typing import Annotated, Any, Optional, Protocol

from fastapi import Depends
from pymongo.asynchronous.database import AsyncDatabase

from ...core.database import get_database


class QueryExecutor(Protocol):
    async def aggregate(
        self, collection: str, pipeline: list[dict[str, Any]], comment: Optional[str] = None
    ) -> list[dict[str, Any]]: ...


class MongoQueryExecutor:
    """Executes pipelines with pymongo's async API.

    ``comment`` is attached to the command so the sub-query can be told apart
    in the server log and profiler.
    """

    def __init__(self, database: AsyncDatabase):
        self._database = database

    async def aggregate(
        self, collection: str, pipeline: list[dict[str, Any]], comment: Optional[str] = None
    ) -> list[dict[str, Any]]:
        options = {"comment": comment} if comment else {}
        cursor = await self._database[collection].aggregate(pipeline, **options)
        return await cursor.to_list()


def get_query_executor(db: Annotated[AsyncDatabase, Depends(get_database)]) -> QueryExecutor:
    return MongoQueryExecutor(db)
