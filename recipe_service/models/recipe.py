"""
Recipe model.

``publisher_username`` is a denormalized copy of the publishing user's name,
not a foreign key: deleting or renaming a user leaves their recipes intact.
"""

from sqlalchemy import Column, String, Text

from recipe_service.models.base import Base, IntegerIDMixin, TimestampMixin, UTCDateTime


class Recipe(Base, IntegerIDMixin, TimestampMixin):
    """A published recipe."""

    __tablename__ = "recipes"

    title = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False, index=True)
    recipe_text = Column(Text, nullable=False)
    publisher_username = Column(String(255), nullable=False)
    published_date = Column(UTCDateTime, nullable=True)

    def __repr__(self):
        return f"<Recipe(id={self.id}, title='{self.title}', category='{self.category}')>"
