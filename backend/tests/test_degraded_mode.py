"""
Notely Backend — Degraded Mode Tests
=====================================

What:  Without a database only the health check exists; every CRUD path is
       unregistered and answers with the framework's plain 404.
"""

import pytest

from notely.bootstrap import ServiceMode
from notely.main import create_app


def registered_paths(app) -> set:
    return set(app.openapi()["paths"])


def test_degraded_app_has_no_crud_routes():
    app = create_app(database=None)

    assert app.state.mode is ServiceMode.DEGRADED
    paths = registered_paths(app)
    assert "/v1/healthz" in paths
    assert "/v1/users" not in paths
    assert "/v1/notes" not in paths


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/v1/users"),
        ("POST", "/v1/users"),
        ("GET", "/v1/notes"),
        ("POST", "/v1/notes"),
    ],
)
async def test_crud_routes_are_not_found(degraded_client, method, path):
    response = await degraded_client.request(
        method, path, headers={"Authorization": "ApiKey whatever"}
    )

    assert response.status_code == 404
    # Starlette's own 404, not one of our structured error bodies
    assert response.json() == {"detail": "Not Found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/healthz", "/v1/healthz"])
async def test_health_still_ok(degraded_client, path):
    response = await degraded_client.get(path)

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_landing_page_still_served(degraded_client):
    response = await degraded_client.get("/")

    assert response.status_code == 200
