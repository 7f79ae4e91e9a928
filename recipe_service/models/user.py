"""
User model for registration, login and the user CRUD endpoints.

Usernames are not unique at the storage layer and passwords are kept in
cleartext; both match the behaviour of the service this API replaces.
"""

from sqlalchemy import Column, String

from recipe_service.models.base import Base, IntegerIDMixin, TimestampMixin


class User(Base, IntegerIDMixin, TimestampMixin):
    """A registered account."""

    __tablename__ = "users"

    username = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    password = Column(
        String(255),
        nullable=False,
        default="",
        comment="Cleartext password compared verbatim at login",
    )

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
