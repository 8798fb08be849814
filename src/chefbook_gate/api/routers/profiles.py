"""
chefbook_gate.api.routers.profiles

User profile endpoints.

Responsibilities:
- Public profile reads.
- Owner-only (or admin) profile updates through a closed schema, so role and
  credential fields can never be written here.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_409_CONFLICT

from chefbook_gate.api.deps import db_session
from chefbook_gate.api.schemas import ProfileUpdateRequest, UserOut, dump, normalize_email
from chefbook_gate.db.repositories.users import UserRepo
from chefbook_gate.gate.authz import ResourceType
from chefbook_gate.gate.deps import require_owner
from chefbook_gate.gate.errors import ResourceNotFound

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/{user_id}")
async def get_profile(
    user_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    user = await UserRepo(session).get(user_id)
    if user is None:
        raise ResourceNotFound("User")
    return {"success": True, "user": dump(UserOut, user)}


@router.put(
    "/{user_id}",
    dependencies=[Depends(require_owner(ResourceType.profile, param="user_id"))],
)
async def update_profile(
    user_id: str,
    body: ProfileUpdateRequest,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    users = UserRepo(session)
    user = await users.get(user_id)
    if user is None:
        raise ResourceNotFound("User")

    email = normalize_email(body.email) if body.email is not None else None
    if email is not None and email != user.email:
        if await users.get_by_email(email) is not None:
            raise HTTPException(
                status_code=HTTP_409_CONFLICT, detail="This email is already registered"
            )

    await users.update_profile(user, name=body.name, email=email, phone=body.phone)
    await session.commit()
    return {"success": True, "message": "Profile updated successfully", "user": dump(UserOut, user)}


# --- Module Notes -----------------------------------------------------------
# A profile id is the owner's user id; the gate refuses strangers before any lookup.
