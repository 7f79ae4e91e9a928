from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipe_service.db_handlers.base import BaseDBHandler, check_local_db
from recipe_service.db_handlers.repositories import UserRepository
from recipe_service.models.user import User
from recipe_service.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")


class UserDBHandler(BaseDBHandler[User], UserRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(User, session_factory)

    async def get_by_id(self, user_id: int) -> User:
        return await self.get_or_raise(user_id)

    @check_local_db
    async def update_field(
        self, user_id: int, new_name: str, *, db: AsyncSession = None
    ) -> None:
        """Load the user, overwrite its username and save it."""
        user = await self.get_or_raise(user_id, db=db)
        await self.update(user, {"username": new_name}, db=db)
        logger.debug(f"Renamed user {user_id}")

    async def delete(self, user_id: int) -> None:
        await self.remove(user_id)

    async def create(self, username: str, email: str, password: str) -> User:
        return await self.create_record(
            {"username": username, "email": email, "password": password}
        )

    async def get_all(self) -> list[User]:
        return await self.get_multi(order_by=User.id)
