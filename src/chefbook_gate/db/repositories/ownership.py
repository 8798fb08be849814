"""
chefbook_gate.db.repositories.ownership

Ownership lookups consumed by `AuthzGate`.

Responsibilities:
- Resolve (resource type, resource id) to the owning user id.
- Translate store failures into `StoreUnavailable` so they never read as an
  authorization outcome.
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chefbook_gate.db.base import is_valid_id
from chefbook_gate.db.models import Booking, ChefProfile, User
from chefbook_gate.gate.authz import ResourceType
from chefbook_gate.gate.errors import StoreUnavailable


def _owner_query(resource_type: ResourceType, resource_id: str) -> Select[tuple[str]]:
    if resource_type == ResourceType.profile:
        return select(User.id).where(User.id == resource_id)
    if resource_type == ResourceType.chef:
        return select(ChefProfile.user_id).where(ChefProfile.id == resource_id)
    if resource_type == ResourceType.booking:
        return select(Booking.user_id).where(Booking.id == resource_id)
    if resource_type == ResourceType.booked_chef:
        return (
            select(ChefProfile.user_id)
            .join(Booking, Booking.chef_id == ChefProfile.id)
            .where(Booking.id == resource_id)
        )
    raise ValueError(f"unknown resource type: {resource_type}")


class OwnershipRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def owner_of(self, resource_type: ResourceType, resource_id: str) -> str | None:
        # Ids that cannot exist are answered without a round trip.
        if not is_valid_id(resource_id):
            return None
        stmt = _owner_query(resource_type, resource_id)
        try:
            return (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreUnavailable(
                f"ownership lookup failed for {resource_type}: {e.__class__.__name__}"
            ) from e


# --- Module Notes -----------------------------------------------------------
# Read on every check, never cached: the gate must see the store's current answer.
