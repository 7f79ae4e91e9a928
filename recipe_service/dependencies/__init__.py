from recipe_service.dependencies.rate_limit import enforce_rate_limit
from recipe_service.dependencies.repositories import (
    get_recipe_repository,
    get_settings,
    get_user_repository,
)

__all__ = [
    "enforce_rate_limit",
    "get_settings",
    "get_user_repository",
    "get_recipe_repository",
]
