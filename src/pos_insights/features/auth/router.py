"""API routes for user authentication and user administration."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pymongo.asynchronous.database import AsyncDatabase
from typing import Annotated

from ...core.database import get_database
from ...core.policy import WritePolicy, get_write_policy
from . import schemas
from . import security as auth_security
from . import service as auth_service
from .models import User
from .permissions import Action, Module

logger = logging.getLogger(__name__)
router = APIRouter(
    tags=["Authentication"],
    prefix="/auth"
)

@router.post("/token", response_model=schemas.Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncDatabase, Depends(get_database)],
):
    user = await auth_service.get_user_by_username(db, username=form_data.username)
    if not user or not auth_security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    access_token = auth_security.create_access_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/me", response_model=schemas.UserResponse)
async def read_current_user(
    current_user: Annotated[User, Depends(auth_security.get_current_active_user)]
):
    return schemas.UserResponse.from_user(current_user)

@router.post("/users", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: schemas.UserCreate,
    current_user: Annotated[User, Depends(auth_security.require_permission(Module.USERS, Action.CREATE))],
    db: Annotated[AsyncDatabase, Depends(get_database)],
    policy: Annotated[WritePolicy, Depends(get_write_policy)],
):
    hashed_password = auth_security.get_password_hash(user_in.password)
    new_user = await auth_service.create_user(db, user_in, hashed_password, policy)
    return schemas.UserResponse.from_user(new_user)

@router.put("/users/{username}/permissions", response_model=schemas.UserResponse)
async def update_user_permissions(
    username: str,
    permissions_in: schemas.PermissionsUpdate,
    current_user: Annotated[User, Depends(auth_security.require_permission(Module.USERS, Action.UPDATE))],
    db: Annotated[AsyncDatabase, Depends(get_database)],
    policy: Annotated[WritePolicy, Depends(get_write_policy)],
):
    user = await auth_service.update_permissions(db, username, permissions_in.permissions, policy)
    logger.info(f"{current_user.username} updated permissions of {username}")
    return schemas.UserResponse.from_user(user)
