"""Pydantic schemas for contact records.

JSON field names follow the dashboard's wire format (``createdAt``);
attributes stay snake_case and are mapped with aliases.
"""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class ContactCreate(BaseModel):
    """Contact as submitted by the public form (not exposed by the dashboard API)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.fullmatch(value):
            raise ValueError("Invalid email address")
        return value.lower()


class ContactedUpdate(BaseModel):
    """Body of PATCH /contacts/{id}/contacted.

    An absent flag means True; an explicit null means False.
    """

    contacted: bool | None = True

    def flag(self) -> bool:
        return bool(self.contacted)


class ContactRead(BaseModel):
    """Contact as returned to dashboard clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str
    contacted: bool = False
    created_at: datetime | None = Field(default=None, alias="createdAt")
