"""
Database models for the recipe service.
"""

from recipe_service.models.recipe import Recipe
from recipe_service.models.user import User

__all__ = [
    "User",
    "Recipe",
]
