"""
Rate-limit gate shared by every API route.
"""

from fastapi import HTTPException, Request, status

from recipe_service.utils.logger import setup_logger

logger = setup_logger("dependencies.rate_limit")


async def enforce_rate_limit(request: Request) -> None:
    """
    Take one token from the application's limiter or answer 429.

    Declared first in each route's dependencies so a rejected request never
    reaches body parsing or the repositories.
    """
    if not request.app.state.limiter.try_acquire():
        logger.warning(f"Rate limit exceeded: {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
        )
