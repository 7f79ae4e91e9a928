"""
Accessors for the objects ``create_app`` wires onto ``app.state``.
"""

from fastapi import Request

from recipe_service.config import Settings
from recipe_service.db_handlers.repositories import RecipeRepository, UserRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.user_repository


def get_recipe_repository(request: Request) -> RecipeRepository:
    return request.app.state.recipe_repository
