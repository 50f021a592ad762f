"""
Notely Backend — API Key Authentication
========================================

What:  Resolves `Authorization: ApiKey <key>` to a User for protected routes.
How:   build_authenticator() returns a FastAPI dependency. Routes declare
       `user: User = Depends(authenticate)`; FastAPI resolves it before the
       route body runs, so any AuthError short-circuits the request.
Who:   Wired into the users and notes routers by build_v1_router().

Failure modes (all → 401, never reaching the route):
    header absent                       → AuthError(kind="missing")
    wrong scheme / no key / blank key   → AuthError(kind="malformed")
    well-formed key, no matching user   → AuthError(kind="invalid")

Statelessness:
    One lookup per request, nothing cached between requests. The resolved
    user travels to the route as a parameter, never through globals or
    request.state.
"""

import logging
from typing import Awaitable, Callable, Mapping

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notely.database import Database
from notely.exceptions import AuthError
from notely.models import User
from notely.services.user_service import user_service

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
AUTH_SCHEME = "ApiKey"


def extract_api_key(headers: Mapping[str, str]) -> str:
    """
    Pull the API key out of the request headers.

    Expected format: `Authorization: ApiKey <key>`. The scheme is matched
    case-sensitively.

    Raises:
        AuthError: kind "missing" or "malformed".
    """
    value = headers.get(AUTH_HEADER)
    if value is None:
        raise AuthError(AuthError.MISSING)

    scheme, _, api_key = value.strip().partition(" ")
    api_key = api_key.strip()
    if scheme != AUTH_SCHEME or not api_key:
        raise AuthError(AuthError.MALFORMED)
    return api_key


def build_authenticator(database: Database) -> Callable[..., Awaitable[User]]:
    """
    Create the authentication dependency bound to `database`.

    The dependency shares the request's session with the route (FastAPI
    caches `database.session` per request), so authentication plus the
    route body use a single connection.
    """

    async def authenticate(
        request: Request,
        db: AsyncSession = Depends(database.session),
    ) -> User:
        api_key = extract_api_key(request.headers)
        user = await user_service.get_by_api_key(db, api_key)
        if user is None:
            raise AuthError(AuthError.INVALID)
        logger.debug("Authenticated user %s", user.id)
        return user

    return authenticate
