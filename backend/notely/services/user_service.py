"""
Notely Backend — User Service
==============================

What:  Business logic for users: creation, listing and API-key lookup.
Who:   Called by the users routes and by the token authenticator.

Design Decision:
    UserService is stateless; every call receives the AsyncSession of the
    current request. Database failures are rolled back and re-raised as
    StorageError so no SQL details reach the client.
"""

import logging
import secrets
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notely.exceptions import StorageError, ValidationError
from notely.models import User

logger = logging.getLogger(__name__)

# 32 random bytes, hex encoded → 64 characters
API_KEY_BYTES = 32


def generate_api_key() -> str:
    return secrets.token_hex(API_KEY_BYTES)


class UserService:
    """
    Responsibilities:
        - create_user(): validate the name, mint an api key, persist
        - list_users(): every user, oldest first
        - get_by_api_key(): the single lookup behind authentication
    """

    async def create_user(self, db: AsyncSession, name: Optional[str]) -> User:
        """
        Create a user with a freshly generated API key.

        Raises:
            ValidationError: name is missing or blank (→ 400)
            StorageError: the insert failed (→ 500)
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError(message="name is required", field="name")

        user = User(name=name, api_key=generate_api_key())
        try:
            db.add(user)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not create the user. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("User created: %s", user.id)
        return user

    async def list_users(self, db: AsyncSession) -> List[User]:
        """Return all users ordered by creation time (no pagination)."""
        try:
            result = await db.execute(select(User).order_by(User.created_at, User.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def get_by_api_key(self, db: AsyncSession, api_key: str) -> Optional[User]:
        """
        Resolve an API key to its user, or None when no user holds it.

        Query plan:
            SELECT * FROM users WHERE api_key = :key
            → served by the unique index on users.api_key
        """
        try:
            result = await db.execute(select(User).where(User.api_key == api_key))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up API key: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not verify credentials. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e


user_service = UserService()
