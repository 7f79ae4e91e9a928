"""
Request parsing and error mapping shared by the user and recipe routers.
"""

import json
import logging
from typing import TypeVar

import pydantic
from fastapi import HTTPException, Request, status

from recipe_service.config import Settings
from recipe_service.exceptions import NotFoundError, RepositoryError
from recipe_service.models.base import MAX_ID
from recipe_service.schemas import StatusResponse
from recipe_service.utils.logger import log_event

BodyType = TypeVar("BodyType", bound=pydantic.BaseModel)


def check_entity_id(entity_id: int, entity: str, logger: logging.Logger) -> int:
    """Reject ids the route matched but storage could never hold."""
    if entity_id > MAX_ID:
        log_event(logger, logging.ERROR, f"Invalid {entity} ID", entity_id=entity_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {entity} ID"
        )
    return entity_id


async def read_json_body(
    request: Request,
    schema: type[BodyType],
    logger: logging.Logger,
    detail: str = "Invalid request body",
) -> BodyType:
    """Decode the request body as JSON and validate it against ``schema``."""
    try:
        payload = await request.json()
        return schema.model_validate(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, pydantic.ValidationError) as e:
        log_event(logger, logging.ERROR, detail, exc=e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=detail
        ) from e


def bad_request(detail: str, logger: logging.Logger) -> HTTPException:
    log_event(logger, logging.ERROR, detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def repository_http_error(
    exc: RepositoryError,
    settings: Settings,
    logger: logging.Logger,
    event: str,
    detail: str | None = None,
    **fields,
) -> HTTPException:
    """Log a failed repository call and build the matching HTTP error.

    ``NotFoundError`` maps to 404 unless ``LEGACY_NOT_FOUND_STATUS`` asks for
    the old 500. Everything else is a 500 carrying the error message, or
    ``detail`` when the caller wants a fixed text.
    """
    log_event(logger, logging.ERROR, event, exc=exc, **fields)
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, NotFoundError) and not settings.legacy_not_found_status:
        status_code = status.HTTP_404_NOT_FOUND
    return HTTPException(status_code=status_code, detail=detail or exc.message)


def success(message: str) -> StatusResponse:
    return StatusResponse(status="success", message=message)
