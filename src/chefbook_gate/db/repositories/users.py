"""
chefbook_gate.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Create and fetch accounts (by id or normalized email).
- Resolve a user's current role for the gate.
- Apply profile edits and role changes.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chefbook_gate.auth.models import Role
from chefbook_gate.db.base import is_valid_id
from chefbook_gate.db.models import User
from chefbook_gate.gate.errors import StoreUnavailable


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
        role: Role = Role.user,
    ) -> User:
        user = User(name=name, email=email, password_hash=password_hash, phone=phone, role=role)
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def role_of(self, user_id: str) -> str | None:
        if not is_valid_id(user_id):
            return None
        try:
            stmt = select(User.role).where(User.id == user_id)
            role = (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"user lookup failed: {e.__class__.__name__}") from e
        return role.value if role is not None else None

    async def update_profile(
        self,
        user: User,
        *,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> User:
        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        if phone is not None:
            user.phone = phone
        user.updated_at = datetime.utcnow()
        await self._session.flush()
        return user

    async def set_role(self, user_id: str, role: Role) -> None:
        user = await self._session.get(User, user_id, with_for_update=True)
        if user is None:
            return
        user.role = role
        user.updated_at = datetime.utcnow()


# --- Module Notes -----------------------------------------------------------
# `role_of` is read on every authenticated request; roles are never cached in tokens.
