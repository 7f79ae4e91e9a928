from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from recipe_service.models.base import ensure_utc


class RequestBody(BaseModel):
    """
    Base for JSON request bodies.

    Unknown keys are ignored and missing or null string fields decode to "",
    so required-field rules are applied by the handlers, not here.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None and cls.model_fields[info.field_name].annotation is str:
            return ""
        return v


class RegisterRequest(RequestBody):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(RequestBody):
    username: str = ""
    password: str = ""


class RenameUserRequest(RequestBody):
    new_name: str = Field(default="", alias="newName")


class RetitleRecipeRequest(RequestBody):
    new_title: str = Field(default="", alias="newTitle")


class CreateRecipeRequest(RequestBody):
    title: str = ""
    category: str = ""
    recipe_text: str = Field(default="", alias="recipeText")
    publisher_username: str = Field(default="", alias="publisherUsername")
    published_date: datetime | None = Field(default=None, alias="publishedDate")

    @field_validator("published_date")
    @classmethod
    def published_date_as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


class StatusResponse(BaseModel):
    status: str = Field(default="success", description="Outcome of the request")
    message: str = Field(..., description="Human readable result")


class UserResponse(BaseModel):
    """Public view of a user; the password never leaves the service."""

    id: int
    username: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class RecipeResponse(BaseModel):
    id: int
    title: str
    category: str
    recipe_text: str
    publisher_username: str
    published_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )
