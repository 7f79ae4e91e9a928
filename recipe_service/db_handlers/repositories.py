"""
Storage-agnostic repository contracts for users and recipes.

Handlers only ever talk to these interfaces; ``UserDBHandler`` /
``RecipeDBHandler`` implement them on SQLAlchemy and the ``InMemory*``
classes implement them on plain dictionaries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from recipe_service.exceptions import StorageError, ValidationError
from recipe_service.models import Recipe, User

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 12

# Accepted sort column spellings -> model attribute.
RECIPE_SORT_COLUMNS = {
    "id": "id",
    "title": "title",
    "category": "category",
    "recipe_text": "recipe_text",
    "recipetext": "recipe_text",
    "publisher_username": "publisher_username",
    "publisherusername": "publisher_username",
    "published_date": "published_date",
    "publisheddate": "published_date",
    "created_at": "created_at",
    "createdat": "created_at",
    "updated_at": "updated_at",
    "updatedat": "updated_at",
}


def parse_sort_expression(
    sort: str, columns: dict[str, str]
) -> list[tuple[str, bool]]:
    """Parse ``"title desc, id"`` into ``[("title", True), ("id", False)]``.

    Each term is a column name optionally followed by ``asc`` or ``desc``.
    An empty expression yields no ordering. Anything else is rejected the
    way a database rejects an unknown ORDER BY column.
    """
    terms = []
    if not sort or not sort.strip():
        return terms

    for raw_term in sort.split(","):
        parts = raw_term.split()
        if not parts or len(parts) > 2:
            raise StorageError(f"invalid sort expression: '{sort}'")

        column = columns.get(parts[0].lower())
        if column is None:
            raise StorageError(f"unknown sort column: '{parts[0]}'")

        descending = False
        if len(parts) == 2:
            direction = parts[1].lower()
            if direction not in ("asc", "desc"):
                raise StorageError(f"invalid sort direction: '{parts[1]}'")
            descending = direction == "desc"
        terms.append((column, descending))
    return terms


def validate_page(page: int, limit: int) -> int:
    """Return the row offset for a 1-indexed page."""
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ValidationError(f"limit must be >= 1, got {limit}")
    return (page - 1) * limit


class UserRepository(ABC):
    """CRUD contract over users."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User:
        """Return the user or raise ``NotFoundError``."""

    @abstractmethod
    async def update_field(self, user_id: int, new_name: str) -> None:
        """Rename a user; ``NotFoundError`` if it does not exist."""

    @abstractmethod
    async def delete(self, user_id: int) -> None:
        """Delete a user. Deleting a missing id is not an error."""

    @abstractmethod
    async def create(self, username: str, email: str, password: str) -> User:
        """Store a new user; the id is assigned by storage."""

    @abstractmethod
    async def get_all(self) -> list[User]:
        """Return every stored user."""


class RecipeRepository(ABC):
    """CRUD contract over recipes, plus filtered/sorted/paged listing."""

    @abstractmethod
    async def get_by_id(self, recipe_id: int) -> Recipe:
        """Return the recipe or raise ``NotFoundError``."""

    @abstractmethod
    async def update_field(self, recipe_id: int, new_title: str) -> None:
        """Retitle a recipe; ``NotFoundError`` if it does not exist."""

    @abstractmethod
    async def delete(self, recipe_id: int) -> None:
        """Delete a recipe. Deleting a missing id is not an error."""

    @abstractmethod
    async def create(
        self,
        title: str,
        category: str,
        recipe_text: str,
        publisher_username: str,
        published_date: datetime | None = None,
    ) -> Recipe:
        """Store a new recipe; the id is assigned by storage."""

    @abstractmethod
    async def list_recipes(
        self,
        filter: str = "",
        sort: str = "",
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Recipe]:
        """Return one page of recipes whose category contains ``filter``."""
