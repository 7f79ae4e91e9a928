from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipe_service.exceptions import NotFoundError, RepositoryError, StorageError
from recipe_service.models.base import Base
from recipe_service.utils.logger import setup_logger

logger = setup_logger("db_handlers")

ModelType = TypeVar("ModelType", bound=Base)

MAX_ATTEMPTS = 3


def _is_dropped_connection(e: DBAPIError) -> bool:
    if e.connection_invalidated:
        return True
    orig = getattr(e, "orig", None)
    return isinstance(orig, ConnectionDoesNotExistError) or isinstance(
        getattr(orig, "__cause__", None), ConnectionDoesNotExistError
    )


def check_local_db(func):
    """Database session decorator with transaction management and retry logic.

    Opens a session from the handler's ``session_factory`` unless a ``db``
    keyword is passed, commits on success and rolls back on failure. Dropped
    connections are retried; any other SQLAlchemy failure surfaces as
    ``StorageError``. Repository errors pass through untouched.
    """

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        # Nested call: the outermost caller owns the transaction.
        if kwargs.get("db") is not None:
            return await func(self, *args, **kwargs)

        last_exception = None
        for attempt in range(MAX_ATTEMPTS):
            async with self.session_factory() as db:
                kwargs["db"] = db
                try:
                    result = await func(self, *args, **kwargs)
                    await db.commit()
                    return result
                except RepositoryError:
                    await db.rollback()
                    raise
                except DBAPIError as e:
                    await db.rollback()
                    if _is_dropped_connection(e):
                        last_exception = e
                        logger.warning(
                            f"Connection error in {func.__name__} (attempt {attempt + 1}/{MAX_ATTEMPTS}): {e}. Retrying..."
                        )
                        await asyncio.sleep(1 + attempt)
                        continue
                    logger.error(
                        f"DBAPIError in {func.__name__} (attempt {attempt + 1}/{MAX_ATTEMPTS}): {e}",
                        exc_info=True,
                    )
                    raise StorageError(str(e.orig or e)) from e
                except SQLAlchemyError as e:
                    await db.rollback()
                    logger.error(
                        f"Transaction failed in {func.__name__}: {e}", exc_info=True
                    )
                    raise StorageError(str(e)) from e

        logger.error(
            f"All retries failed for {func.__name__}. Last error: {last_exception}"
        )
        raise StorageError(str(last_exception)) from last_exception

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """Generic handler for database operations with basic CRUD methods."""

    def __init__(
        self,
        model: type[ModelType],
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.model = model
        self.session_factory = session_factory

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    @check_local_db
    async def create_record(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> ModelType:
        """Insert a new row and return it with its storage-assigned id."""
        db_obj = self.model(**obj_dict)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    @check_local_db
    async def get(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Get a single record by its primary key."""
        stmt = select(self.model).where(self.model.id == id)
        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_or_raise(self, id: Any, *, db: AsyncSession = None) -> ModelType:
        """Get a single record by its primary key or raise ``NotFoundError``."""
        obj = await self.get(id, db=db)
        if obj is None:
            raise NotFoundError(self.entity_name, id)
        return obj

    @check_local_db
    async def get_multi(
        self,
        *,
        db: AsyncSession = None,
        skip: int = 0,
        limit: int | None = None,
        order_by=None,
        where=None,
    ) -> list[ModelType]:
        """Get multiple records with optional filtering, ordering and pagination."""
        stmt = select(self.model)

        if where is not None:
            stmt = stmt.where(*where) if isinstance(where, list) else stmt.where(where)

        if order_by is not None:
            if isinstance(order_by, list):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)

        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def update(
        self,
        db_obj: ModelType,
        update_data: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> ModelType:
        """Overwrite the given fields of a loaded record and persist it."""
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    @check_local_db
    async def remove(self, id: Any, *, db: AsyncSession = None) -> bool:
        """Delete a record by primary key; returns whether a row was removed."""
        result = await db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
