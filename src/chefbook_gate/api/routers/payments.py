"""
chefbook_gate.api.routers.payments

Payment checkout and confirmation endpoints.

Responsibilities:
- Allocate a provider order id for a booking the caller owns.
- Confirm a booking only on a payment assertion whose HMAC signature verifies
  and whose order id matches the one allocated for that booking.
- Record payment failures and expose payment status to the booking owner.
"""

from __future__ import annotations

import hmac
import secrets
import time
from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_409_CONFLICT

from chefbook_gate.api.deps import db_session, settings_dep
from chefbook_gate.api.schemas import BookingOut, PaymentFailureRequest, PaymentOrderRequest, dump
from chefbook_gate.auth.models import Principal
from chefbook_gate.db.models import BookingStatus, PaymentStatus
from chefbook_gate.db.repositories.bookings import BookingRepo
from chefbook_gate.gate.authz import AuthzGate, ResourceType
from chefbook_gate.gate.deps import get_gate, get_principal, require_owner
from chefbook_gate.gate.errors import InvalidSignature, ResourceNotFound
from chefbook_gate.observability.logging import get_logger
from chefbook_gate.settings import Settings

router = APIRouter(prefix="/payments", tags=["payments"])
log = get_logger(__name__)


def _field(payload: Mapping[str, Any], *names: str) -> Any:
    # Accept both our camelCase names and the provider's checkout callback names.
    for name in names:
        if name in payload:
            return payload[name]
    return None


def new_order_id() -> str:
    return f"order_{secrets.token_hex(7)}"


@router.post("/create-order")
async def create_payment_order(
    body: PaymentOrderRequest,
    principal: Principal = Depends(get_principal),
    gate: AuthzGate = Depends(get_gate),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    await gate.authorize_ownership(principal, ResourceType.booking, body.booking_id)

    bookings = BookingRepo(session)
    booking = await bookings.get(body.booking_id, for_update=True)
    if booking is None:
        raise ResourceNotFound("Booking")
    if booking.payment_status == PaymentStatus.paid:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Booking is already paid")
    if booking.status in (BookingStatus.cancelled, BookingStatus.completed):
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Booking is already closed")

    order_id = new_order_id()
    await bookings.attach_order(booking, order_id)
    await session.commit()
    log.info("payment_order_created", booking_id=booking.id, order_id=order_id)
    return {
        "success": True,
        "data": {
            "orderId": order_id,
            # Minor currency units (paise).
            "amount": round(booking.total_price * 100),
            "currency": settings.payment_currency,
            "receipt": f"bk_{booking.id[-8:]}_{str(int(time.time()))[-8:]}",
            "bookingId": booking.id,
        },
    }


@router.post("/verify")
async def verify_payment(
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(get_principal),
    gate: AuthzGate = Depends(get_gate),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    order_id = _field(payload, "orderId", "razorpay_order_id")
    payment_id = _field(payload, "paymentId", "razorpay_payment_id")
    signature = _field(payload, "signature", "razorpay_signature")

    # Signature first: a forged assertion never reaches a booking lookup.
    gate.verify_payment_signature(order_id, payment_id, signature)

    booking_id = gate.reject_injection_operators(
        _field(payload, "bookingId", "booking_id"), field="bookingId"
    )
    await gate.authorize_ownership(principal, ResourceType.booking, booking_id)

    bookings = BookingRepo(session)
    booking = await bookings.get(booking_id, for_update=True)
    if booking is None:
        raise ResourceNotFound("Booking")

    # A genuine assertion for some other order must not confirm this booking.
    if booking.order_id is None or not hmac.compare_digest(
        booking.order_id.encode("utf-8"), order_id.encode("utf-8")
    ):
        raise InvalidSignature(f"order {order_id} was not issued for booking {booking_id}")

    if booking.payment_status == PaymentStatus.paid:
        if booking.payment_id != payment_id:
            raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Booking is already paid")
    else:
        await bookings.mark_paid(booking, payment_id)
        await session.commit()
        log.info("payment_verified", booking_id=booking_id, order_id=order_id)

    return {
        "success": True,
        "message": "Payment verified successfully",
        "data": {
            "booking": dump(BookingOut, booking),
            "paymentId": payment_id,
            "orderId": order_id,
        },
    }


@router.post("/failure")
async def record_payment_failure(
    body: PaymentFailureRequest,
    principal: Principal = Depends(get_principal),
    gate: AuthzGate = Depends(get_gate),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    await gate.authorize_ownership(principal, ResourceType.booking, body.booking_id)

    bookings = BookingRepo(session)
    booking = await bookings.get(body.booking_id, for_update=True)
    if booking is None:
        raise ResourceNotFound("Booking")
    if booking.payment_status == PaymentStatus.paid:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Booking is already paid")

    description = (body.error.description if body.error else None) or "Unknown error"
    await bookings.mark_payment_failed(booking, description)
    await session.commit()
    return {
        "success": True,
        "message": "Payment failure recorded",
        "data": {"booking": dump(BookingOut, booking)},
    }


@router.get(
    "/status/{booking_id}",
    dependencies=[Depends(require_owner(ResourceType.booking, param="booking_id"))],
)
async def payment_status(
    booking_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    booking = await BookingRepo(session).get(booking_id)
    if booking is None:
        raise ResourceNotFound("Booking")
    return {
        "success": True,
        "data": {
            "bookingId": booking.id,
            "paymentStatus": booking.payment_status.value,
            "paymentId": booking.payment_id,
            "status": booking.status.value,
            "totalPrice": booking.total_price,
        },
    }


# --- Module Notes -----------------------------------------------------------
# Refunds go through the payment provider and are not handled by this service.
