"""
In-memory repository backend.

Used by the test suite and by ``STORAGE_BACKEND=memory`` for local runs
without a database. Rows live in dictionaries guarded by a lock; every read
hands out a detached copy so callers never share state with the store.
"""

from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone

from recipe_service.db_handlers.repositories import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    RECIPE_SORT_COLUMNS,
    RecipeRepository,
    UserRepository,
    parse_sort_expression,
    validate_page,
)
from recipe_service.exceptions import NotFoundError
from recipe_service.models import Recipe, User
from recipe_service.models.base import ensure_utc

USER_FIELDS = ("id", "username", "email", "password", "created_at", "updated_at")
RECIPE_FIELDS = (
    "id",
    "title",
    "category",
    "recipe_text",
    "publisher_username",
    "published_date",
    "created_at",
    "updated_at",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _InMemoryTable:
    """Rows keyed by id, with ids handed out from a monotonic counter."""

    def __init__(self, model, fields: tuple[str, ...]):
        self.model = model
        self.fields = fields
        self._rows: dict[int, dict] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _snapshot(self, row: dict):
        return self.model(**{field: row[field] for field in self.fields})

    def insert(self, values: dict):
        with self._lock:
            now = _utcnow()
            row = {field: None for field in self.fields}
            row.update(values)
            row.update(id=next(self._ids), created_at=now, updated_at=now)
            self._rows[row["id"]] = row
            return self._snapshot(row)

    def get(self, entity_id: int):
        with self._lock:
            row = self._rows.get(entity_id)
            if row is None:
                raise NotFoundError(self.model.__name__, entity_id)
            return self._snapshot(row)

    def set_field(self, entity_id: int, field: str, value) -> None:
        with self._lock:
            row = self._rows.get(entity_id)
            if row is None:
                raise NotFoundError(self.model.__name__, entity_id)
            row[field] = value
            row["updated_at"] = _utcnow()

    def remove(self, entity_id: int) -> None:
        with self._lock:
            self._rows.pop(entity_id, None)

    def all(self) -> list:
        with self._lock:
            return [self._snapshot(row) for _, row in sorted(self._rows.items())]


def _sort_key(value):
    # NULLs first, like an ascending ORDER BY in SQLite.
    return (value is not None, value if value is not None else 0)


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self._table = _InMemoryTable(User, USER_FIELDS)

    async def get_by_id(self, user_id: int) -> User:
        return self._table.get(user_id)

    async def update_field(self, user_id: int, new_name: str) -> None:
        self._table.set_field(user_id, "username", new_name)

    async def delete(self, user_id: int) -> None:
        self._table.remove(user_id)

    async def create(self, username: str, email: str, password: str) -> User:
        return self._table.insert(
            {"username": username, "email": email, "password": password}
        )

    async def get_all(self) -> list[User]:
        return self._table.all()


class InMemoryRecipeRepository(RecipeRepository):
    def __init__(self):
        self._table = _InMemoryTable(Recipe, RECIPE_FIELDS)

    async def get_by_id(self, recipe_id: int) -> Recipe:
        return self._table.get(recipe_id)

    async def update_field(self, recipe_id: int, new_title: str) -> None:
        self._table.set_field(recipe_id, "title", new_title)

    async def delete(self, recipe_id: int) -> None:
        self._table.remove(recipe_id)

    async def create(
        self,
        title: str,
        category: str,
        recipe_text: str,
        publisher_username: str,
        published_date: datetime | None = None,
    ) -> Recipe:
        return self._table.insert(
            {
                "title": title,
                "category": category,
                "recipe_text": recipe_text,
                "publisher_username": publisher_username,
                "published_date": ensure_utc(published_date),
            }
        )

    async def list_recipes(
        self,
        filter: str = "",
        sort: str = "",
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Recipe]:
        offset = validate_page(page, limit)
        order = parse_sort_expression(sort, RECIPE_SORT_COLUMNS)

        recipes = self._table.all()
        if filter:
            recipes = [recipe for recipe in recipes if filter in recipe.category]

        # Stable sorts applied last-key-first give multi-column ordering.
        for column, descending in reversed(order):
            recipes.sort(
                key=lambda recipe, c=column: _sort_key(getattr(recipe, c)),
                reverse=descending,
            )

        return recipes[offset : offset + limit]
