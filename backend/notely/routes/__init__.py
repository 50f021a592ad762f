# Routes package init
"""
Notely Backend — API Routes Package
====================================

What:  HTTP route handlers and the versioned router that composes them.

Route Inventory:
    - index.py:   GET  /                 (landing page)
    - health.py:  GET  /v1/healthz       (always mounted)
    - users.py:   POST /v1/users         (full mode only)
                  GET  /v1/users         (full mode, authenticated)
    - notes.py:   POST /v1/notes         (full mode, authenticated)
                  GET  /v1/notes         (full mode, authenticated)

Two router variants:
    build_v1_router() is called once at startup. With a Database it mounts
    every route; without one (degraded mode) it mounts only the health check,
    so CRUD paths answer with the framework's plain 404.
"""

from typing import Optional

from fastapi import APIRouter

from notely.database import Database
from notely.middleware.auth import build_authenticator
from notely.routes import health, notes, users

API_PREFIX = "/v1"


def build_v1_router(database: Optional[Database]) -> APIRouter:
    router = APIRouter(prefix=API_PREFIX)

    if database is not None:
        authenticate = build_authenticator(database)
        router.include_router(users.build_router(database, authenticate))
        router.include_router(notes.build_router(database, authenticate))

    router.include_router(health.router)
    return router
