"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

Every test gets a fresh in-memory mongomock database. mongomock is
synchronous, so a thin async facade gives services and routers the same
awaitable surface they use against pymongo's AsyncMongoClient.

Key Fixtures:
- `mongo_db`: The raw (synchronous) mongomock database, handy for seeding.
- `db`: The async facade over `mongo_db`, with indexes and fixture users in place.
- `app_for_testing`: The FastAPI application with its production lifespan
  disabled and the database/write policy dependencies pointed at `db`.
- `client`: A non-authenticated TestClient.
- `admin_client`: A TestClient authenticated as a SUPER_ADMIN.
- `manager_client`: A TestClient authenticated as a MANAGER allowed to view the dashboard.
- `cashier_client`: A TestClient authenticated as a CASHIER with no permissions.
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Generator

import mongomock
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from pos_insights.core.database import get_database
from pos_insights.core.policy import ReadWritePolicy, get_write_policy
from pos_insights.features.auth.models import INDEXES as AUTH_INDEXES, USERS_COLLECTION, User
from pos_insights.features.auth.permissions import UserRole
from pos_insights.features.auth.security import get_password_hash
from pos_insights.features.sales.models import INDEXES as SALES_INDEXES

# Import the app
from pos_insights.main import app as actual_app

FIXTURE_PASSWORD = "fixturepassword123"

FIXTURE_USERS = {
    "adminfixture": (UserRole.SUPER_ADMIN, {}),
    "managerfixture": (UserRole.MANAGER, {"dashboard": {"view": True}}),
    "cashierfixture": (UserRole.CASHIER, {}),
}


@lru_cache
def hashed(password: str) -> str:
    """bcrypt is slow on purpose; hash each fixture password once per session."""
    return get_password_hash(password)


class AsyncMongomockCursor:
    def __init__(self, documents):
        self._documents = list(documents)

    async def to_list(self, length=None):
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class AsyncMongomockCollection:
    """The subset of AsyncCollection the application awaits."""

    def __init__(self, collection: mongomock.Collection):
        self._collection = collection

    async def aggregate(self, pipeline, **kwargs):
        # mongomock ignores server options such as ``comment``.
        return AsyncMongomockCursor(self._collection.aggregate(pipeline))

    async def find_one(self, *args, **kwargs):
        return self._collection.find_one(*args, **kwargs)

    async def insert_one(self, document, **kwargs):
        try:
            return self._collection.insert_one(document)
        except mongomock.DuplicateKeyError as exc:
            raise DuplicateKeyError(str(exc)) from exc

    async def insert_many(self, documents, **kwargs):
        return self._collection.insert_many(documents)

    async def update_one(self, *args, **kwargs):
        return self._collection.update_one(*args, **kwargs)

    async def count_documents(self, *args, **kwargs):
        return self._collection.count_documents(*args, **kwargs)

    async def create_index(self, keys, **kwargs):
        return self._collection.create_index(keys, **kwargs)


class AsyncMongomockDatabase:
    def __init__(self, database: mongomock.Database):
        self._database = database

    def __getitem__(self, name: str) -> AsyncMongomockCollection:
        return AsyncMongomockCollection(self._database[name])


def add_fixture_users(database: mongomock.Database) -> None:
    for username, (role, permissions) in FIXTURE_USERS.items():
        user = User(
            username=username,
            hashed_password=hashed(FIXTURE_PASSWORD),
            role=role,
            permissions=permissions,
        )
        database[USERS_COLLECTION].insert_one(user.to_document())


@pytest.fixture(scope="function")
def mongo_db() -> mongomock.Database:
    """A fresh in-memory database with indexes and fixture users."""
    database = mongomock.MongoClient(tz_aware=False)["pos_insights_test"]
    for collection, keys, options in [*SALES_INDEXES, *AUTH_INDEXES]:
        database[collection].create_index(keys, **options)
    add_fixture_users(database)
    return database


@pytest.fixture(scope="function")
def db(mongo_db: mongomock.Database) -> AsyncMongomockDatabase:
    return AsyncMongomockDatabase(mongo_db)


@pytest.fixture(scope="function")
def app_for_testing(db: AsyncMongomockDatabase) -> Generator[FastAPI, Any, None]:
    """
    Provides the FastAPI application with its production lifespan disabled,
    so no MongoDB server is contacted, and its dependencies bound to `db`.
    """
    original_lifespan = actual_app.router.lifespan_context

    @asynccontextmanager
    async def dummy_lifespan(app: FastAPI):
        yield

    actual_app.router.lifespan_context = dummy_lifespan
    actual_app.dependency_overrides[get_database] = lambda: db
    actual_app.dependency_overrides[get_write_policy] = ReadWritePolicy

    yield actual_app

    # Restore the original lifespan context after the test
    actual_app.router.lifespan_context = original_lifespan
    actual_app.dependency_overrides.clear()


def _authenticated_client(app: FastAPI, username: str) -> Generator[TestClient, Any, None]:
    with TestClient(app) as tc:
        response = tc.post(
            "/api/v1/auth/token",
            data={"username": username, "password": FIXTURE_PASSWORD},
        )
        if response.status_code != 200:
            raise Exception(f"Authentication failed for {username}")

        auth_token = response.json()["access_token"]
        tc.headers = {"Authorization": f"Bearer {auth_token}"}
        yield tc


@pytest.fixture(scope="function")
def client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    """
    Provides a non-authenticated starlette TestClient.
    """
    with TestClient(app_for_testing) as tc:
        yield tc


@pytest.fixture(scope="function")
def admin_client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    yield from _authenticated_client(app_for_testing, "adminfixture")


@pytest.fixture(scope="function")
def manager_client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    yield from _authenticated_client(app_for_testing, "managerfixture")


@pytest.fixture(scope="function")
def cashier_client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    yield from _authenticated_client(app_for_testing, "cashierfixture")
