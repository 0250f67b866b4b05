"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict


class CreateBookRequest(BaseModel):
    """Payload for creating a book.

    Unknown fields, including any client-supplied ``user_id``, are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    author: str | None = None
    status: str | None = None


class UpdateBookRequest(BaseModel):
    """Partial update payload for a book."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    author: str | None = None
    status: str | None = None


class LoginRequest(BaseModel):
    """Email and password sign-in payload."""

    email: str
    password: str
