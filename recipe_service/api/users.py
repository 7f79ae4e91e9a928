"""
User API Routes - registration, login and user CRUD.

Every route passes the shared rate-limit gate first, then parses its
parameters and body, then talks to the ``UserRepository`` from app state.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from recipe_service.api.common import (
    bad_request,
    check_entity_id,
    read_json_body,
    repository_http_error,
    success,
)
from recipe_service.config import Settings
from recipe_service.db_handlers.repositories import UserRepository
from recipe_service.dependencies import (
    enforce_rate_limit,
    get_settings,
    get_user_repository,
)
from recipe_service.exceptions import RepositoryError
from recipe_service.schemas import (
    LoginRequest,
    RegisterRequest,
    RenameUserRequest,
    StatusResponse,
    UserResponse,
)
from recipe_service.utils.logger import log_event, setup_logger

logger = setup_logger("api.users")

router = APIRouter(
    prefix="/api",
    tags=["Users"],
    dependencies=[Depends(enforce_rate_limit)],
)


def _missing_fields(values: list[str], settings: Settings) -> bool:
    # Legacy mode only rejects a body where every field is empty.
    if settings.legacy_required_fields:
        return all(value == "" for value in values)
    return any(value == "" for value in values)


@router.post("/register", response_model=StatusResponse)
async def register_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Register a new user."""
    user_data = await read_json_body(request, RegisterRequest, logger)

    if _missing_fields(
        [user_data.username, user_data.email, user_data.password], settings
    ):
        raise bad_request("Invalid JSON message", logger)

    try:
        await user_repo.create(user_data.username, user_data.email, user_data.password)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error creating user", detail="Error creating user"
        ) from e

    log_event(logger, logging.INFO, "New user registered", username=user_data.username)
    return success(f"New user successfully registered {user_data.username}")


@router.post("/login", response_model=StatusResponse)
async def login_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """
    Check a username/password pair against the stored users.

    The stored users are scanned linearly for an exact match. By default a
    mismatch still answers 200 with an empty message; with
    ``LOGIN_REJECT_MISMATCH`` it answers 401 instead.
    """
    credentials = await read_json_body(
        request, LoginRequest, logger, detail="Invalid JSON format"
    )

    if _missing_fields([credentials.username, credentials.password], settings):
        raise bad_request("Invalid JSON message", logger)

    try:
        users = await user_repo.get_all()
    except RepositoryError as e:
        if settings.login_reject_mismatch:
            raise repository_http_error(e, settings, logger, "Error finding user") from e
        log_event(logger, logging.ERROR, "Error finding user", exc=e)
        users = []

    matched = any(
        user.username == credentials.username and user.password == credentials.password
        for user in users
    )

    log_event(
        logger,
        logging.INFO,
        "User login attempt",
        username=credentials.username,
        matched=matched,
    )

    if matched:
        return success(f"You successfully logged in {credentials.username}")
    if settings.login_reject_mismatch:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    return success("")


@router.get("/users/{user_id:int}", response_model=StatusResponse)
async def get_user(
    user_id: int,
    settings: Settings = Depends(get_settings),
    user_repo: UserRepository = Depends(get_user_repository),
):
    """Return the username of one user as the envelope message."""
    check_entity_id(user_id, "user", logger)

    try:
        user = await user_repo.get_by_id(user_id)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error getting user by ID", user_id=user_id
        ) from e

    log_event(logger, logging.INFO, "Retrieved user by ID", user_id=user_id)
    return success(user.username)


@router.put("/users/{user_id:int}", response_model=StatusResponse)
async def rename_user(
    user_id: int,
    request: Request,
    settings: Settings = Depends(get_settings),
    user_repo: UserRepository = Depends(get_user_repository),
):
    check_entity_id(user_id, "user", logger)
    body = await read_json_body(request, RenameUserRequest, logger)

    try:
        await user_repo.update_field(user_id, body.new_name)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error updating user name", user_id=user_id
        ) from e

    log_event(
        logger, logging.INFO, "User name updated", user_id=user_id, new_name=body.new_name
    )
    return success("User successfully updated")


@router.delete("/users/{user_id:int}", response_model=StatusResponse)
async def delete_user(
    user_id: int,
    settings: Settings = Depends(get_settings),
    user_repo: UserRepository = Depends(get_user_repository),
):
    check_entity_id(user_id, "user", logger)

    try:
        await user_repo.delete(user_id)
    except RepositoryError as e:
        raise repository_http_error(
            e, settings, logger, "Error deleting user", user_id=user_id
        ) from e

    log_event(logger, logging.INFO, "User deleted", user_id=user_id)
    return success("User successfully deleted")


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    settings: Settings = Depends(get_settings),
    user_repo: UserRepository = Depends(get_user_repository),
):
    try:
        users = await user_repo.get_all()
    except RepositoryError as e:
        raise repository_http_error(e, settings, logger, "Error getting all users") from e

    log_event(logger, logging.INFO, "Retrieved all users", user_count=len(users))
    return [UserResponse.model_validate(user) for user in users]
