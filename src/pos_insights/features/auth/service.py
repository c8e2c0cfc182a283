"""Business logic for authentication, such as user creation and retrieval."""
import logging
from typing import Optional

from fastapi import HTTPException, status
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from ...common.models import utcnow
from ...core.policy import WritePolicy, ensure_write_allowed
from . import models
from .permissions import PermissionMatrix, UserRole
from .schemas import UserCreate

logger = logging.getLogger(__name__)


async def get_user_by_username(db: AsyncDatabase, username: str) -> Optional[models.User]:
    """Retrieves a user by their username.

    Args:
        db: The database holding the users collection.
        username: The username of the user to retrieve.

    Returns:
        The User object if found, otherwise None.
    """
    document = await db[models.USERS_COLLECTION].find_one({"username": username})
    if document is None:
        return None
    return models.User.model_validate(document)


async def create_user(
    db: AsyncDatabase, user_in: UserCreate, hashed_password_val: str, policy: WritePolicy
) -> models.User:
    """Creates a new user in the database.

    Args:
        db: The database holding the users collection.
        user_in: The validated user data; the plain password is ignored.
        hashed_password_val: The hashed password for the new user.
        policy: Write policy of the running deployment.

    Returns:
        The newly created User object.
    """
    ensure_write_allowed(policy)
    if await get_user_by_username(db, user_in.username):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered",
        )
    new_user = models.User(
        username=user_in.username,
        hashed_password=hashed_password_val,
        role=user_in.role,
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        permissions=user_in.permissions.to_document(),
    )
    try:
        await db[models.USERS_COLLECTION].insert_one(new_user.to_document())
    except DuplicateKeyError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered",
        )
    logger.info(f"Created user {new_user.username} with role {new_user.role}")
    return new_user


async def _update_user(db: AsyncDatabase, username: str, changes: dict) -> Optional[models.User]:
    changes = {**changes, "updatedAt": utcnow()}
    result = await db[models.USERS_COLLECTION].update_one({"username": username}, {"$set": changes})
    if result.matched_count == 0:
        return None
    return await get_user_by_username(db, username)


async def update_permissions(
    db: AsyncDatabase, username: str, permissions: PermissionMatrix, policy: WritePolicy
) -> models.User:
    """Replaces the permission matrix of a user."""
    ensure_write_allowed(policy)
    user = await _update_user(db, username, {"permissions": permissions.to_document()})
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {username} not found.")
    return user


async def set_user_role(
    db: AsyncDatabase, username: str, role: UserRole, policy: WritePolicy
) -> Optional[models.User]:
    ensure_write_allowed(policy)
    return await _update_user(db, username, {"role": role.value})


async def set_user_active(
    db: AsyncDatabase, username: str, is_active: bool, policy: WritePolicy
) -> Optional[models.User]:
    ensure_write_allowed(policy)
    return await _update_user(db, username, {"isActive": is_active})


async def seed_default_user(
    db: AsyncDatabase, username: str, hashed_password_val: str
) -> Optional[models.User]:
    """Creates the initial SUPER_ADMIN when the users collection is empty.

    Runs on every startup. Returns the new user, or None when users already
    exist or another process seeded first.
    """
    user_count = await db[models.USERS_COLLECTION].count_documents({})
    if user_count > 0:
        logger.info(f"Database already has {user_count} user(s)")
        return None

    default_admin = models.User(
        username=username,
        hashed_password=hashed_password_val,
        role=UserRole.SUPER_ADMIN,
        first_name="System",
        last_name="Administrator",
    )
    try:
        await db[models.USERS_COLLECTION].insert_one(default_admin.to_document())
    except DuplicateKeyError:
        logger.info("Default user already exists")
        return None
    logger.warning(f"Default admin user '{username}' created. Change its password after first login!")
    return default_admin
