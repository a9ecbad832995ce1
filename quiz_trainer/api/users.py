"""
User API Routes
Known users and login sessions
FILE: quiz_trainer/api/users.py

User names are plain labels; a login session only carries an expiry time.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from quiz_trainer.api.dependencies import get_user_directory
from quiz_trainer.core.errors import InvalidInputError, NotFoundError, StorageError
from quiz_trainer.models.management import SuccessResponse
from quiz_trainer.models.user import (
    LoginResponse,
    LoginSession,
    SessionCheckResponse,
    User,
    UserNameRequest,
    UserResponse,
)
from quiz_trainer.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


# ==================== USERS ====================

@router.get("/users", response_model=List[User], summary="List users, most recently used first")
async def list_users(users: UserDirectory = Depends(get_user_directory)) -> List[User]:
    try:
        return users.list()

    except StorageError as e:
        logger.error(f"❌ Failed to load users: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load users"
        )


@router.get("/users/{name}", response_model=User, summary="Get one user")
async def get_user(name: str, users: UserDirectory = Depends(get_user_directory)) -> User:
    try:
        return users.get(name)

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    except StorageError as e:
        logger.error(f"❌ Failed to load users: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load users"
        )


@router.post("/users", response_model=UserResponse, summary="Create a user or mark it as used")
async def upsert_user(
    request: UserNameRequest,
    users: UserDirectory = Depends(get_user_directory)
) -> UserResponse:
    try:
        return UserResponse(success=True, user=users.upsert(request.name))

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except StorageError as e:
        logger.error(f"❌ Failed to save user: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user"
        )


@router.delete("/users", response_model=SuccessResponse, summary="Remove a user (history is kept)")
async def delete_user(
    request: UserNameRequest,
    users: UserDirectory = Depends(get_user_directory)
) -> SuccessResponse:
    if not request.name or not request.name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Valid name is required"
        )

    try:
        users.remove(request.name.strip())
        return SuccessResponse(success=True)

    except StorageError as e:
        logger.error(f"❌ Failed to remove user: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove user"
        )


# ==================== LOGIN ====================

@router.post("/login", response_model=LoginResponse, summary="Log in as a (new or known) user")
async def login(
    request: UserNameRequest,
    users: UserDirectory = Depends(get_user_directory)
) -> LoginResponse:
    try:
        session = users.login(request.name)
        logger.info(f"🔑 Login: {session.username} (expires {session.expiresAt.isoformat()})")
        return LoginResponse(
            success=True,
            user=User(name=session.username, lastUsed=session.loginTime),
            session=session
        )

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except StorageError as e:
        logger.error(f"❌ Login failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )


@router.post("/login/check", response_model=SessionCheckResponse, summary="Check a login session")
async def check_login(
    session: LoginSession,
    users: UserDirectory = Depends(get_user_directory)
) -> SessionCheckResponse:
    return SessionCheckResponse(valid=users.check_session(session))
