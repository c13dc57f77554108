"""Pydantic schemas for administrator authentication."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


def normalize_email(email: str) -> str:
    """Trim and lower-case an email so lookups are case-insensitive."""
    return email.strip().lower()


# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72
MIN_PASSWORD_LENGTH = 6


def check_new_password(password: str) -> str:
    """Validate a password about to be hashed.

    Raises:
        ValueError: If it is too short or longer than bcrypt accepts.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


class LoginRequest(BaseModel):
    """Request schema for administrator login.

    Both fields are optional at the schema level so that a missing email or
    password is reported by the endpoint as a single 400 before any lookup.
    """

    email: str | None = Field(default=None, description="Administrator email address")
    password: str | None = Field(default=None, description="Administrator password")


class AdminUser(BaseModel):
    """Public administrator profile returned to clients (never the hash)."""

    id: str
    name: str
    email: str


class LoginResponse(BaseModel):
    """Response schema for a successful login."""

    message: str = "Login successful"
    token: str
    user: AdminUser


class AdminCreate(BaseModel):
    """Schema used by out-of-band provisioning to create an administrator."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., description="Plaintext password, hashed before storage")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_new_password(value)


class AdminRead(BaseModel):
    """Administrator as held by the credential store, including the hash.

    Only ever used server-side; endpoints respond with AdminUser.
    """

    id: str
    name: str
    email: str
    hashed_password: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_public(self) -> AdminUser:
        return AdminUser(id=self.id, name=self.name, email=self.email)
