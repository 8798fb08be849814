"""
chefbook_gate.db.repositories.chefs

Repository for `ChefProfile` entities.

Responsibilities:
- Create, fetch, update and deactivate chef profiles.
- List active profiles for the public directory, with simple filters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chefbook_gate.db.models import ChefProfile


class ChefRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        user_id: str,
        name: str,
        price_per_hour: float,
        bio: str = "",
        city: str | None = None,
        specialties: list[str] | None = None,
    ) -> ChefProfile:
        chef = ChefProfile(
            user_id=user_id,
            name=name,
            price_per_hour=price_per_hour,
            bio=bio,
            city=city,
            specialties=specialties or [],
            is_active=True,
        )
        self._session.add(chef)
        await self._session.flush()
        return chef

    async def get(self, chef_id: str) -> ChefProfile | None:
        return await self._session.get(ChefProfile, chef_id)

    async def get_for_user(self, user_id: str) -> ChefProfile | None:
        stmt = select(ChefProfile).where(ChefProfile.user_id == user_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_active(
        self,
        *,
        city: str | None = None,
        specialty: str | None = None,
        limit: int = 50,
    ) -> list[ChefProfile]:
        """
        Active profiles, newest first. `city` matches case-insensitively;
        `specialty` must equal one of the profile's specialties (case-insensitive).
        """

        stmt = select(ChefProfile).where(ChefProfile.is_active.is_(True))
        if city is not None:
            stmt = stmt.where(func.lower(ChefProfile.city) == city.strip().lower())
        stmt = stmt.order_by(ChefProfile.created_at.desc())
        chefs = list((await self._session.execute(stmt)).scalars().all())

        # Specialties live in a JSON column; matched here to stay portable across backends.
        if specialty is not None:
            wanted = specialty.strip().lower()
            chefs = [c for c in chefs if wanted in (s.lower() for s in c.specialties or [])]
        return chefs[:limit]

    async def update(self, chef: ChefProfile, changes: dict[str, Any]) -> ChefProfile:
        # `changes` comes from a closed request schema; ownership columns are not in it.
        for field, value in changes.items():
            setattr(chef, field, value)
        chef.updated_at = datetime.utcnow()
        await self._session.flush()
        return chef

    async def deactivate(self, chef: ChefProfile) -> None:
        chef.is_active = False
        chef.updated_at = datetime.utcnow()
        await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# Deactivation is a soft delete: bookings keep pointing at the profile row.
