#!/usr/bin/env python3

"""
Main application entry point for the recipe service.

Architecture: FastAPI application exposing user and recipe CRUD over
swappable repositories, behind one shared token-bucket rate limiter.
Key Features: Lifecycle management, database health checks, error handling,
CORS configuration, static pages with a file-based 404 page.
"""

import asyncio
import sys

# Add this block to switch asyncio event loop policy on Windows
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import errno
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from recipe_service.api.pages import NotFoundPage
from recipe_service.api.pages import router as pages_router
from recipe_service.api.recipes import router as recipes_router
from recipe_service.api.users import router as users_router
from recipe_service.config import Settings, settings
from recipe_service.db import (
    check_db_connection,
    close_db,
    create_engine_from_settings,
    create_session_factory,
    init_db,
)
from recipe_service.db_handlers import (
    InMemoryRecipeRepository,
    InMemoryUserRepository,
    RecipeDBHandler,
    RecipeRepository,
    UserDBHandler,
    UserRepository,
)
from recipe_service.rate_limit import TokenBucketLimiter
from recipe_service.utils.logger import setup_logger

logger = setup_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the repositories from settings unless they were injected, and
    release the database engine on shutdown.
    """
    logger.info("Application startup...")
    app_settings: Settings = app.state.settings
    engine = None

    if getattr(app.state, "user_repository", None) is None:
        if app_settings.storage_backend == "memory":
            logger.info("Using in-memory repositories.")
            app.state.user_repository = InMemoryUserRepository()
            app.state.recipe_repository = InMemoryRecipeRepository()
        else:
            try:
                engine = create_engine_from_settings(app_settings)

                logger.info("Initializing database...")
                await init_db(engine)

                logger.info("Checking database connectivity...")
                await check_db_connection(engine)
                logger.info("Database connectivity confirmed.")
            except Exception as e:
                logger.critical(f"Startup error: {e}")
                if engine is not None:
                    await engine.dispose()
                raise SystemExit(f"Startup failed: {e}") from e

            session_factory = create_session_factory(engine)
            app.state.user_repository = UserDBHandler(session_factory)
            app.state.recipe_repository = RecipeDBHandler(session_factory)

    logger.info("Recipe service API startup successful.")
    yield

    logger.info("Recipe service API shutdown...")
    if engine is not None:
        await close_db(engine)
    logger.info("Shutdown complete.")


def create_app(
    app_settings: Settings | None = None,
    *,
    user_repository: UserRepository | None = None,
    recipe_repository: RecipeRepository | None = None,
    limiter: TokenBucketLimiter | None = None,
) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(title="Recipe Service API", lifespan=lifespan)

    app.state.settings = app_settings
    app.state.limiter = limiter or TokenBucketLimiter(
        refill_rate=app_settings.rate_limit_refill_rate,
        burst=app_settings.rate_limit_burst,
    )
    app.state.user_repository = user_repository
    app.state.recipe_repository = recipe_repository

    @app.exception_handler(OSError)
    async def oserror_exception_handler(request: Request, exc: OSError):
        logger.error(f"OSError caught: {exc}, errno: {exc.errno}")
        if exc.errno in [errno.ETIMEDOUT, errno.ECONNREFUSED]:
            logger.error(
                f"Returning 503 due to DB connection issue: {app_settings.db_unavailable_hint}"
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": app_settings.db_unavailable_hint},
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"An unexpected OS error occurred: {exc}"},
        )

    app.include_router(users_router)
    app.include_router(recipes_router)
    app.include_router(pages_router)

    if app_settings.static_dir.is_dir():
        app.mount(
            "/static", StaticFiles(directory=str(app_settings.static_dir)), name="static"
        )
    else:
        logger.warning(f"Static directory not found: {app_settings.static_dir}")

    app.router.default = NotFoundPage(app_settings.pages_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_allow_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    return app


app = create_app()


def main():
    port = int(settings.server_port)
    host = settings.server_host

    logger.info(f"Starting recipe service API server on {host}:{port}")

    try:
        uvicorn.run(
            "main:app" if settings.server_workers > 1 else app,
            host=host,
            port=port,
            workers=settings.server_workers,
        )
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
