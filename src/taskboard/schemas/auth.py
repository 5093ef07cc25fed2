"""Pydantic schemas for sign-up, sign-in, and users.

Learn: Separate input schemas (SignUpInput, SignInInput) from output
schemas (UserRead, AuthUser). UserRead never exposes password_hash.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SignUpInput(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=100)
    avatar: Optional[str] = Field(None, max_length=1024)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("must be an email address")
        return v


class SignInInput(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    avatar: Optional[str] = None

    model_config = {"from_attributes": True}


class AuthUser(BaseModel):
    """Response for sign-up and sign-in."""
    user: UserRead
    token: str
