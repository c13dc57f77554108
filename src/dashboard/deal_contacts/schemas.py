"""Pydantic schemas for deal contacts -- create, typed patch, and read.

JSON bodies use the dashboard's established field names (``nombre``,
``nombreEmpresa``, ``telefono``, ``direccion``, ``descripcionServicio``,
``fechaInicio``, ``fechaTermino``); attributes are snake_case English and are
mapped through aliases. Both create and patch run the same per-field
validators; the patch only validates the keys that are present.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

PHONE_PATTERN = re.compile(r"^[0-9+()\-.\s]+$")

DATE_RANGE_MESSAGE = "fechaTermino must be on or after fechaInicio"

TEXT_FIELDS = ("name", "company_name", "phone", "address", "service_description")


def check_date_range(start: date | None, end: date | None) -> None:
    """Enforce end >= start whenever both dates are present.

    Raises:
        ValueError: Naming the violated rule.
    """
    if start is not None and end is not None and end < start:
        raise ValueError(DATE_RANGE_MESSAGE)


def _clean_text(value: Any) -> Any:
    if value is None:
        raise ValueError("Field is required")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("Field must not be blank")
    return value


def _clean_date(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        # Accept full ISO timestamps from browser date pickers
        if "T" in value:
            value = value.split("T", 1)[0]
    elif isinstance(value, datetime):
        return value.date()
    return value


def _check_phone(value: str | None) -> str | None:
    if value is not None and not PHONE_PATTERN.fullmatch(value):
        raise ValueError("Invalid phone format")
    return value


class DealContactCreate(BaseModel):
    """Body of POST /deal-contacts."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nombre", min_length=2, max_length=120)
    company_name: str = Field(..., alias="nombreEmpresa", min_length=2, max_length=160)
    phone: str = Field(..., alias="telefono", max_length=30)
    address: str = Field(..., alias="direccion", max_length=240)
    service_description: str = Field(..., alias="descripcionServicio", max_length=2000)
    start_date: date | None = Field(default=None, alias="fechaInicio")
    end_date: date | None = Field(default=None, alias="fechaTermino")

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _clean_text(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return _clean_date(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return _check_phone(value)

    @field_validator("end_date")
    @classmethod
    def validate_date_range(cls, value: date | None, info: ValidationInfo) -> date | None:
        check_date_range(info.data.get("start_date"), value)
        return value


class DealContactPatch(BaseModel):
    """Body of PATCH /deal-contacts/{id}: every attribute optional.

    Only keys present in the payload are applied. Text attributes cannot be
    cleared; dates can be cleared with null.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, alias="nombre", min_length=2, max_length=120)
    company_name: str | None = Field(
        default=None, alias="nombreEmpresa", min_length=2, max_length=160
    )
    phone: str | None = Field(default=None, alias="telefono", max_length=30)
    address: str | None = Field(default=None, alias="direccion", max_length=240)
    service_description: str | None = Field(
        default=None, alias="descripcionServicio", max_length=2000
    )
    start_date: date | None = Field(default=None, alias="fechaInicio")
    end_date: date | None = Field(default=None, alias="fechaTermino")

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _clean_text(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return _clean_date(value)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        return _check_phone(value)

    @field_validator("end_date")
    @classmethod
    def validate_date_range(cls, value: date | None, info: ValidationInfo) -> date | None:
        # start_date is None here unless it is part of the same patch; a lone
        # end date is checked against the stored record by the repository.
        check_date_range(info.data.get("start_date"), value)
        return value

    def changes(self) -> dict[str, Any]:
        """Attribute values explicitly present in the payload."""
        return self.model_dump(exclude_unset=True)


class DealContactRead(BaseModel):
    """Deal contact as returned to dashboard clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(alias="nombre")
    company_name: str = Field(alias="nombreEmpresa")
    phone: str = Field(alias="telefono")
    address: str = Field(alias="direccion")
    service_description: str = Field(alias="descripcionServicio")
    start_date: date | None = Field(default=None, alias="fechaInicio")
    end_date: date | None = Field(default=None, alias="fechaTermino")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
