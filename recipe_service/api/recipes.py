"""
Recipe API Routes - recipe CRUD plus filtered, sorted and paged listing.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from recipe_service.api.common import (
    bad_request,
    check_entity_id,
    read_json_body,
    repository_http_error,
    success,
)
from recipe_service.config import Settings
from recipe_service.db_handlers.repositories import DEFAULT_PAGE, RecipeRepository
from recipe_service.dependencies import (
    enforce_rate_limit,
    get_recipe_repository,
    get_settings,
)
from recipe_service.exceptions import RepositoryError
from recipe_service.schemas import (
    CreateRecipeRequest,
    RecipeResponse,
    RetitleRecipeRequest,
    StatusResponse,
)
from recipe_service.utils.logger import log_event, setup_logger

logger = setup_logger("api.recipes")

router = APIRouter(
    prefix="/api/recipes",
    tags=["Recipes"],
    dependencies=[Depends(enforce_rate_limit)],
)


def parse_page(raw: str | None) -> int:
    """Lenient page parsing: anything but a positive integer means page 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_PAGE
    return page if page > 0 else DEFAULT_PAGE


@router.get("/{recipe_id:int}", response_model=StatusResponse)
async def get_recipe(
    recipe_id: int,
    settings: Settings = Depends(get_settings),
    recipe_repo: RecipeRepository = Depends(get_recipe_repository),
):
    """Return the title of one recipe as the envelope message."""
    check_entity_id(recipe_id, "recipe", logger)

    try:
        recipe = await recipe_repo.get_by_id(recipe_id)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error getting recipe by ID", recipe_id=recipe_id
        ) from e

    log_event(logger, logging.INFO, "Retrieved recipe by ID", recipe_id=recipe_id)
    return success(recipe.title)


@router.put("/{recipe_id:int}", response_model=StatusResponse)
async def retitle_recipe(
    recipe_id: int,
    request: Request,
    settings: Settings = Depends(get_settings),
    recipe_repo: RecipeRepository = Depends(get_recipe_repository),
):
    check_entity_id(recipe_id, "recipe", logger)
    body = await read_json_body(request, RetitleRecipeRequest, logger)

    try:
        await recipe_repo.update_field(recipe_id, body.new_title)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error updating recipe title", recipe_id=recipe_id
        ) from e

    log_event(
        logger,
        logging.INFO,
        "Recipe title updated",
        recipe_id=recipe_id,
        new_title=body.new_title,
    )
    return success("Recipe title successfully updated")


@router.delete("/{recipe_id:int}", response_model=StatusResponse)
async def delete_recipe(
    recipe_id: int,
    settings: Settings = Depends(get_settings),
    recipe_repo: RecipeRepository = Depends(get_recipe_repository),
):
    check_entity_id(recipe_id, "recipe", logger)

    try:
        await recipe_repo.delete(recipe_id)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error deleting recipe", recipe_id=recipe_id
        ) from e

    log_event(logger, logging.INFO, "Recipe deleted", recipe_id=recipe_id)
    return success("Recipe successfully deleted")


@router.post("", response_model=StatusResponse)
async def create_recipe(
    request: Request,
    settings: Settings = Depends(get_settings),
    recipe_repo: RecipeRepository = Depends(get_recipe_repository),
):
    """Create a recipe; every field except ``publishedDate`` is required."""
    recipe_data = await read_json_body(request, CreateRecipeRequest, logger)

    required = [
        recipe_data.title,
        recipe_data.category,
        recipe_data.recipe_text,
        recipe_data.publisher_username,
    ]
    if any(value == "" for value in required):
        raise bad_request("Missing required fields", logger)

    try:
        await recipe_repo.create(
            recipe_data.title,
            recipe_data.category,
            recipe_data.recipe_text,
            recipe_data.publisher_username,
            recipe_data.published_date,
        )
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error creating recipe", detail="Error creating recipe"
        ) from e

    log_event(logger, logging.INFO, "Recipe created", recipe_title=recipe_data.title)
    return success("Recipe successfully created")


@router.get("", response_model=list[RecipeResponse])
async def list_recipes(
    filter_text: str = Query("", alias="filter"),
    sort: str = Query(""),
    page: str | None = Query(None),
    settings: Settings = Depends(get_settings),
    recipe_repo: RecipeRepository = Depends(get_recipe_repository),
):
    """
    One page of recipes.

    ``filter`` keeps recipes whose category contains the text, ``sort`` is an
    ordering such as ``title desc`` and ``page`` is 1-indexed. The page size
    is fixed by ``RECIPES_PAGE_SIZE``.
    """
    page_number = parse_page(page)

    try:
        recipes = await recipe_repo.list_recipes(
            filter=filter_text,
            sort=sort,
            page=page_number,
            limit=settings.recipes_page_size,
        )
    except RepositoryError as e:
        raise repository_http_error(e, settings, logger, "Error getting all recipes") from e

    log_event(
        logger,
        logging.INFO,
        "Retrieved all recipes",
        recipe_count=len(recipes),
        page=page_number,
    )
    return [RecipeResponse.model_validate(recipe) for recipe in recipes]
