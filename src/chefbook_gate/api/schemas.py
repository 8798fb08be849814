"""
chefbook_gate.api.schemas

Request/response models for the public API.

Responsibilities:
- Closed request schemas (`extra="forbid"`, strict strings) so no structured
  value or unexpected field reaches persistence.
- Response models that never include credential material.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel

from chefbook_gate.auth.models import Role
from chefbook_gate.db.models import BookingStatus, PaymentStatus, ServiceType

EMAIL_PATTERN = r"^\S+@\S+\.\S+$"
PHONE_PATTERN = r"^\+?[1-9]\d{9,14}$"
ID_PATTERN = r"^[0-9a-f]{24}$"
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"

_EMAIL_RE = re.compile(EMAIL_PATTERN)
_PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return len(email) <= 254 and bool(_EMAIL_RE.match(email))


def password_problem(password: str, *, max_bytes: int) -> str | None:
    if len(password) < 8:
        return "too short"
    if len(password.encode("utf-8")) > max_bytes:
        return "too long"
    if not _PASSWORD_RE.match(password):
        return "needs a letter and a digit"
    return None


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ClosedModel(ApiModel):
    model_config = ConfigDict(extra="forbid")


class ProfileUpdateRequest(ClosedModel):
    name: StrictStr | None = Field(default=None, min_length=2, max_length=100)
    email: StrictStr | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=254)
    phone: StrictStr | None = Field(default=None, pattern=PHONE_PATTERN)


class ChefCreateRequest(ClosedModel):
    name: StrictStr = Field(min_length=2, max_length=100)
    bio: StrictStr = Field(default="", max_length=2000)
    city: StrictStr | None = Field(default=None, max_length=100)
    specialties: list[StrictStr] = Field(default_factory=list, max_length=20)
    price_per_hour: float = Field(gt=0, le=100_000)


class ChefUpdateRequest(ClosedModel):
    name: StrictStr | None = Field(default=None, min_length=2, max_length=100)
    bio: StrictStr | None = Field(default=None, max_length=2000)
    city: StrictStr | None = Field(default=None, max_length=100)
    specialties: list[StrictStr] | None = Field(default=None, max_length=20)
    price_per_hour: float | None = Field(default=None, gt=0, le=100_000)


class BookingCreateRequest(ClosedModel):
    chef_id: StrictStr = Field(pattern=ID_PATTERN)
    event_date: date
    event_time: StrictStr = Field(pattern=TIME_PATTERN)
    duration_hours: int = Field(ge=1, le=24)
    guest_count: int = Field(ge=1, le=1000)
    location: StrictStr = Field(min_length=5, max_length=300)
    service_type: ServiceType
    special_requests: StrictStr = Field(default="", max_length=1000)
    add_ons: list[StrictStr] = Field(default_factory=list, max_length=20)
    total_price: float = Field(ge=0, le=10_000_000)


class BookingStatusUpdate(ClosedModel):
    status: BookingStatus


class PaymentOrderRequest(ClosedModel):
    booking_id: StrictStr


class PaymentErrorInfo(ApiModel):
    description: StrictStr | None = Field(default=None, max_length=500)


class PaymentFailureRequest(ClosedModel):
    booking_id: StrictStr
    error: PaymentErrorInfo | None = None


class UserOut(ApiModel):
    id: str
    name: str
    email: str
    phone: str | None
    role: Role
    created_at: datetime


class ChefOut(ApiModel):
    id: str
    user_id: str
    name: str
    bio: str
    city: str | None
    specialties: list[str]
    price_per_hour: float
    is_active: bool


class BookingOut(ApiModel):
    id: str
    user_id: str
    chef_id: str
    event_date: date
    event_time: str
    duration_hours: int
    guest_count: int
    location: str
    service_type: ServiceType
    special_requests: str
    add_ons: list[str]
    total_price: float
    status: BookingStatus
    payment_status: PaymentStatus
    order_id: str | None
    payment_id: str | None
    notes: str | None
    created_at: datetime


def dump(model: type[ApiModel], obj: Any) -> dict[str, Any]:
    return model.model_validate(obj).model_dump(mode="json", by_alias=True)
