from recipe_service.db_handlers.base import BaseDBHandler, check_local_db
from recipe_service.db_handlers.memory import (
    InMemoryRecipeRepository,
    InMemoryUserRepository,
)
from recipe_service.db_handlers.recipe import RecipeDBHandler
from recipe_service.db_handlers.repositories import RecipeRepository, UserRepository
from recipe_service.db_handlers.user import UserDBHandler

__all__ = [
    "BaseDBHandler",
    "check_local_db",
    "UserRepository",
    "RecipeRepository",
    "UserDBHandler",
    "RecipeDBHandler",
    "InMemoryUserRepository",
    "InMemoryRecipeRepository",
]
