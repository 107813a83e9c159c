"""Fixtures for driving the HTTP API end to end.

Hey future me - httpx's ASGITransport does NOT run the lifespan, so we enter it
ourselves. Everything (app, DB, client) lives on the test's own event loop.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import httpx
import pytest
from fastapi import FastAPI

from scrob.application.services import CredentialStore
from scrob.config import Settings
from scrob.domain.entities import User
from scrob.infrastructure.persistence import UserRepository
from scrob.main import create_app


@pytest.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with its lifespan running."""
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client talking to the app in-process."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c


@pytest.fixture
def create_user(app: FastAPI) -> Callable[..., Awaitable[User]]:
    """Bootstrap a user the same way scripts/create_user.py does."""

    async def _create(username: str, password: str, is_admin: bool = False) -> User:
        async with app.state.db.session_scope() as session:
            store = CredentialStore(UserRepository(session), app.state.settings.security)
            return await store.create_user(username, password, is_admin=is_admin)

    return _create


@pytest.fixture
def login(client: httpx.AsyncClient) -> Callable[[str, str], Awaitable[str]]:
    """Log in and return the bearer token."""

    async def _login(username: str, password: str) -> str:
        response = await client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _login
