"""
Notely Backend — Users Route Handlers
======================================

What:  POST /v1/users (open) and GET /v1/users (authenticated).
How:   build_router() closes over the Database handle and the authenticator;
       handlers delegate to UserService.
"""

from typing import Callable, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notely.database import Database
from notely.models import User
from notely.schemas.common import ErrorResponse
from notely.schemas.user import UserCreate, UserCreatedResponse, UserResponse
from notely.services.user_service import user_service


def build_router(database: Database, authenticate: Callable) -> APIRouter:
    router = APIRouter(tags=["Users"])

    @router.post(
        "/users",
        status_code=201,
        response_model=UserCreatedResponse,
        responses={
            400: {"description": "Missing or empty name", "model": ErrorResponse},
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="Create a user",
        description=(
            "Creates a user and returns it together with its API key. "
            "This is the only response that ever contains the key."
        ),
    )
    async def create_user(
        payload: UserCreate,
        db: AsyncSession = Depends(database.session),
    ) -> UserCreatedResponse:
        user = await user_service.create_user(db, payload.name)
        return UserCreatedResponse.model_validate(user)

    @router.get(
        "/users",
        response_model=List[UserResponse],
        responses={
            401: {"description": "Missing, malformed or invalid API key", "model": ErrorResponse},
            500: {"description": "Server error", "model": ErrorResponse},
        },
        summary="List users",
    )
    async def list_users(
        user: User = Depends(authenticate),
        db: AsyncSession = Depends(database.session),
    ) -> List[UserResponse]:
        users = await user_service.list_users(db)
        return [UserResponse.model_validate(u) for u in users]

    return router
