"""
Shared fixtures for the test suite.

HTTP tests run against ``create_app`` with in-memory repositories and a
limiter large enough not to interfere; rate-limit tests build their own
limiter on a fake clock.
"""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from recipe_service.config import Settings
from recipe_service.db_handlers import InMemoryRecipeRepository, InMemoryUserRepository
from recipe_service.rate_limit import TokenBucketLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def recipe_repo() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def make_app(user_repo, recipe_repo):
    """
    Factory for an application wired to the in-memory repositories.

    ``user_repository`` and ``recipe_repository`` replace the in-memory
    repositories; every other keyword argument except ``limiter`` becomes a
    ``Settings`` field.
    """

    def _make(
        limiter: TokenBucketLimiter | None = None,
        user_repository=None,
        recipe_repository=None,
        **overrides,
    ) -> FastAPI:
        # Import here so the module-level app in main is only built when needed.
        from main import create_app

        app_settings = Settings(storage_backend="memory", **overrides)
        return create_app(
            app_settings,
            user_repository=user_repository or user_repo,
            recipe_repository=recipe_repository or recipe_repo,
            limiter=limiter or TokenBucketLimiter(refill_rate=0, burst=100_000),
        )

    return _make


@pytest.fixture
def client(make_app):
    """
    Test client for the default application.
    The TestClient runs the application's lifespan events (startup/shutdown).
    """
    with TestClient(make_app()) as c:
        yield c


def run(coro):
    """Drive a repository coroutine from a synchronous test."""
    return asyncio.run(coro)
