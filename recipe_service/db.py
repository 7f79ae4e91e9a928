import argparse
import asyncio

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from recipe_service import models  # noqa: F401
from recipe_service.config import Settings, settings
from recipe_service.models.base import Base
from recipe_service.utils.logger import setup_logger

logger = setup_logger("db")


def create_app_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for an already driver-qualified URL."""
    logger.debug(f"Application DB URL: {database_url}")
    if database_url.startswith("sqlite+aiosqlite://"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory SQLite lives inside one connection; share it across sessions.
        if ":memory:" in database_url or database_url.endswith("://"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(database_url, echo=echo, **kwargs)

    return create_async_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=30,
        pool_timeout=60,
        pool_recycle=300,
        echo=echo,
        connect_args={"timeout": 30},
    )


def create_engine_from_settings(app_settings: Settings = settings) -> AsyncEngine:
    database_url = app_settings.async_database_url
    if not database_url:
        raise ValueError(
            "RECIPES_DATABASE_URL environment variable not set for Application DB"
        )
    return create_app_engine(database_url, echo=app_settings.db_echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine):
    """Create every registered table that does not exist yet."""
    if not Base.metadata.tables:
        logger.warning("Base.metadata.tables is EMPTY! No tables will be created.")
    else:
        logger.debug(
            f"Tables registered in Base.metadata: {list(Base.metadata.tables.keys())}"
        )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema initialized.")


async def close_db(engine: AsyncEngine):
    """Closes database connections."""
    logger.info("Closing database connections.")
    await engine.dispose()
    logger.info("Database connections closed.")


async def list_tables(engine: AsyncEngine) -> list[str]:
    async with engine.connect() as conn:
        table_names = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names()
        )

    if table_names:
        logger.debug(f"Tables in Application DB: {table_names}")
    else:
        logger.debug("No tables found in Application DB.")
    return table_names


async def reset_db(engine: AsyncEngine):
    logger.warning(
        "Attempting to reset the Application database. THIS IS A DESTRUCTIVE OPERATION."
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("Application tables dropped.")

    await init_db(engine)
    logger.info("Application database has been reset and re-initialized.")


async def check_db_connection(engine: AsyncEngine, db_name="Application DB") -> bool:
    """Performs a simple query to check actual DB connectivity."""
    session_maker = create_session_factory(engine)
    async with session_maker() as session:
        try:
            result = await session.execute(text("SELECT 1"))
            if result.scalar_one() == 1:
                logger.info(
                    f"Successfully connected to {db_name} and executed a test query."
                )
                return True
            raise RuntimeError(
                f"Test query to {db_name} returned an unexpected result."
            )
        except Exception as e:
            logger.error(
                f"Failed to execute test query on {db_name}: {e}", exc_info=True
            )
            raise RuntimeError(
                f"Database connectivity check failed for {db_name}."
            ) from e


async def _run_action(action: str):
    engine = create_engine_from_settings(settings)
    try:
        if action == "init":
            await init_db(engine)
        elif action == "reset":
            await reset_db(engine)
        elif action == "list-tables":
            for name in await list_tables(engine):
                print(name)
        elif action == "check":
            await check_db_connection(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Application Database Initialization Utility"
    )
    parser.add_argument(
        "action",
        choices=["init", "reset", "list-tables", "check"],
        help="'init' to create missing tables, "
        "'reset' to drop and recreate all tables, "
        "'list-tables' to show existing tables, "
        "'check' to verify connectivity.",
    )
    args = parser.parse_args()

    if args.action == "reset":
        confirm = input(
            "WARNING: This will delete all data in the Application DB. Are you sure? (yes/no): "
        )
        if confirm.lower() != "yes":
            logger.info("Application Database reset cancelled by user.")
            raise SystemExit(0)

    asyncio.run(_run_action(args.action))
    logger.info("Application Database utility script finished.")
