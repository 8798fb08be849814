"""
chefbook_gate.db.repositories.bookings

Repository for `Booking` entities.

Responsibilities:
- Create, fetch, list and delete bookings.
- Record booking status and payment state transitions.
- Aggregate booking statistics for the admin view.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chefbook_gate.db.models import Booking, BookingStatus, PaymentStatus, ServiceType


class BookingRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        user_id: str,
        chef_id: str,
        event_date: date,
        event_time: str,
        duration_hours: int,
        guest_count: int,
        location: str,
        service_type: ServiceType,
        total_price: float,
        special_requests: str = "",
        add_ons: list[str] | None = None,
    ) -> Booking:
        booking = Booking(
            user_id=user_id,
            chef_id=chef_id,
            event_date=event_date,
            event_time=event_time,
            duration_hours=duration_hours,
            guest_count=guest_count,
            location=location,
            service_type=service_type,
            total_price=total_price,
            special_requests=special_requests,
            add_ons=add_ons or [],
            status=BookingStatus.pending,
            payment_status=PaymentStatus.pending,
        )
        self._session.add(booking)
        await self._session.flush()
        return booking

    async def get(self, booking_id: str, *, for_update: bool = False) -> Booking | None:
        return await self._session.get(Booking, booking_id, with_for_update=for_update)

    async def list_for_user(self, user_id: str, *, limit: int = 100) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(desc(Booking.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_for_chef(self, chef_id: str, *, limit: int = 100) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.chef_id == chef_id)
            .order_by(Booking.event_date, Booking.event_time)
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_status(self, booking: Booking, status: BookingStatus) -> Booking:
        booking.status = status
        booking.updated_at = datetime.utcnow()
        await self._session.flush()
        return booking

    async def attach_order(self, booking: Booking, order_id: str) -> Booking:
        booking.order_id = order_id
        booking.payment_status = PaymentStatus.pending
        booking.updated_at = datetime.utcnow()
        await self._session.flush()
        return booking

    async def mark_paid(self, booking: Booking, payment_id: str) -> Booking:
        booking.payment_status = PaymentStatus.paid
        booking.payment_id = payment_id
        booking.status = BookingStatus.confirmed
        booking.updated_at = datetime.utcnow()
        await self._session.flush()
        return booking

    async def mark_payment_failed(self, booking: Booking, description: str) -> Booking:
        booking.payment_status = PaymentStatus.failed
        booking.status = BookingStatus.cancelled
        booking.notes = f"Payment failed: {description}"
        booking.updated_at = datetime.utcnow()
        await self._session.flush()
        return booking

    async def delete(self, booking: Booking) -> None:
        await self._session.delete(booking)
        await self._session.flush()

    async def stats(self) -> dict[str, Any]:
        by_status = select(Booking.status, func.count()).group_by(Booking.status)
        counts = {s.value: 0 for s in BookingStatus}
        for status, count in (await self._session.execute(by_status)).all():
            counts[status.value] = count

        revenue_stmt = select(func.coalesce(func.sum(Booking.total_price), 0.0)).where(
            Booking.payment_status == PaymentStatus.paid
        )
        revenue = (await self._session.execute(revenue_stmt)).scalar_one()
        return {
            "totalBookings": sum(counts.values()),
            "byStatus": counts,
            "paidRevenue": float(revenue),
        }


# --- Module Notes -----------------------------------------------------------
# Status/payment writers assume the caller already passed the gate for this booking.
