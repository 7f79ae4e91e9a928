from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipe_service.db_handlers.base import BaseDBHandler, check_local_db
from recipe_service.db_handlers.repositories import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    RECIPE_SORT_COLUMNS,
    RecipeRepository,
    parse_sort_expression,
    validate_page,
)
from recipe_service.models.base import ensure_utc
from recipe_service.models.recipe import Recipe
from recipe_service.utils.logger import setup_logger

logger = setup_logger("db_handlers.recipe")


class RecipeDBHandler(BaseDBHandler[Recipe], RecipeRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(Recipe, session_factory)

    async def get_by_id(self, recipe_id: int) -> Recipe:
        return await self.get_or_raise(recipe_id)

    @check_local_db
    async def update_field(
        self, recipe_id: int, new_title: str, *, db: AsyncSession = None
    ) -> None:
        """Load the recipe, overwrite its title and save it."""
        recipe = await self.get_or_raise(recipe_id, db=db)
        await self.update(recipe, {"title": new_title}, db=db)
        logger.debug(f"Retitled recipe {recipe_id}")

    async def delete(self, recipe_id: int) -> None:
        await self.remove(recipe_id)

    async def create(
        self,
        title: str,
        category: str,
        recipe_text: str,
        publisher_username: str,
        published_date: datetime | None = None,
    ) -> Recipe:
        return await self.create_record(
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
        """Return one page of recipes.

        ``filter`` is a LIKE '%filter%' match on category, so case
        sensitivity follows the database collation. Without a sort
        expression rows come back in id order.
        """
        offset = validate_page(page, limit)

        order_by = [
            getattr(Recipe, column).desc() if descending else getattr(Recipe, column).asc()
            for column, descending in parse_sort_expression(sort, RECIPE_SORT_COLUMNS)
        ] or [Recipe.id.asc()]

        where = Recipe.category.contains(filter) if filter else None

        return await self.get_multi(
            skip=offset, limit=limit, order_by=order_by, where=where
        )
