"""
chefbook_gate.api.routers.bookings

Booking endpoints.

Responsibilities:
- Create and list the caller's bookings, and list a chef's incoming bookings.
- Gate single-booking reads/updates/deletes on ownership (404 for strangers).
- Restrict non-cancel status transitions to the booked chef (forward only) or an admin.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_409_CONFLICT

from chefbook_gate.api.deps import db_session
from chefbook_gate.api.schemas import BookingCreateRequest, BookingOut, BookingStatusUpdate, dump
from chefbook_gate.auth.models import Principal, Role
from chefbook_gate.db.models import BookingStatus
from chefbook_gate.db.repositories.bookings import BookingRepo
from chefbook_gate.db.repositories.chefs import ChefRepo
from chefbook_gate.gate.authz import ResourceType
from chefbook_gate.gate.deps import get_principal, require_owner, require_roles
from chefbook_gate.gate.errors import Forbidden, InvalidInput, ResourceNotFound
from chefbook_gate.observability.logging import get_logger

router = APIRouter(prefix="/bookings", tags=["bookings"])
log = get_logger(__name__)

_CLOSED = frozenset({BookingStatus.cancelled, BookingStatus.completed})
# Forward moves open to the booked chef. Any participant may cancel.
_CHEF_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed}),
    BookingStatus.confirmed: frozenset({BookingStatus.completed}),
}

# Customer or booked chef.
_participant = require_owner(
    ResourceType.booking, param="booking_id", delegates=(ResourceType.booked_chef,)
)
_customer = require_owner(ResourceType.booking, param="booking_id")


@router.post("", status_code=HTTP_201_CREATED)
async def create_booking(
    body: BookingCreateRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    chef = await ChefRepo(session).get(body.chef_id)
    if chef is None or not chef.is_active:
        raise ResourceNotFound("Chef")
    if body.event_date < datetime.now(tz=UTC).date():
        raise InvalidInput(
            "booking date in the past", public_message="Booking date cannot be in the past"
        )

    booking = await BookingRepo(session).create(
        user_id=principal.subject,
        chef_id=chef.id,
        event_date=body.event_date,
        event_time=body.event_time,
        duration_hours=body.duration_hours,
        guest_count=body.guest_count,
        location=body.location,
        service_type=body.service_type,
        total_price=body.total_price,
        special_requests=body.special_requests,
        add_ons=list(body.add_ons),
    )
    await session.commit()
    log.info("booking_created", booking_id=booking.id, chef_id=chef.id)
    return {"success": True, "data": dump(BookingOut, booking)}


@router.get("")
async def list_my_bookings(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    bookings = await BookingRepo(session).list_for_user(principal.subject)
    return {"success": True, "data": [dump(BookingOut, b) for b in bookings]}


@router.get(
    "/chef/{chef_id}",
    dependencies=[Depends(require_owner(ResourceType.chef, param="chef_id"))],
)
async def list_chef_bookings(
    chef_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    bookings = await BookingRepo(session).list_for_chef(chef_id)
    return {"success": True, "data": [dump(BookingOut, b) for b in bookings]}


@router.get("/admin/stats", dependencies=[Depends(require_roles(Role.admin))])
async def booking_stats(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    return {"success": True, "data": await BookingRepo(session).stats()}


@router.get("/{booking_id}", dependencies=[Depends(_participant)])
async def get_booking(
    booking_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    booking = await BookingRepo(session).get(booking_id)
    if booking is None:
        raise ResourceNotFound("Booking")
    return {"success": True, "data": dump(BookingOut, booking)}


@router.put("/{booking_id}")
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    principal: Principal = Depends(_participant),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    bookings = BookingRepo(session)
    booking = await bookings.get(booking_id, for_update=True)
    if booking is None:
        raise ResourceNotFound("Booking")
    if booking.status in _CLOSED:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Booking is already closed")

    if body.status != BookingStatus.cancelled and not principal.is_admin:
        chef = await ChefRepo(session).get(booking.chef_id)
        if chef is None or chef.user_id != principal.subject:
            raise Forbidden(f"{principal.subject} may only cancel booking {booking_id}")
        if body.status not in _CHEF_TRANSITIONS.get(booking.status, frozenset()):
            raise HTTPException(
                status_code=HTTP_409_CONFLICT,
                detail=f"Cannot move a {booking.status.value} booking to {body.status.value}",
            )

    await bookings.set_status(booking, body.status)
    await session.commit()
    log.info("booking_status_changed", booking_id=booking_id, status=body.status.value)
    return {"success": True, "data": dump(BookingOut, booking)}


@router.delete("/{booking_id}", dependencies=[Depends(_customer)])
async def delete_booking(
    booking_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    bookings = BookingRepo(session)
    booking = await bookings.get(booking_id)
    if booking is None:
        raise ResourceNotFound("Booking")
    await bookings.delete(booking)
    await session.commit()
    return {"success": True, "message": "Booking deleted"}


# --- Module Notes -----------------------------------------------------------
# Ownership is checked before the handler loads the booking; a stranger gets the
# same 404 whether or not the booking exists.
