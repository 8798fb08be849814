"""
chefbook_gate.api.routers.chefs

Chef profile endpoints.

Responsibilities:
- Let an authenticated account publish one chef profile.
- Public chef directory (filterable by city and specialty) and profile reads.
- Owner-only updates and deactivation.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_409_CONFLICT

from chefbook_gate.api.deps import db_session
from chefbook_gate.api.schemas import ChefCreateRequest, ChefOut, ChefUpdateRequest, dump
from chefbook_gate.auth.models import Principal, Role
from chefbook_gate.db.repositories.chefs import ChefRepo
from chefbook_gate.db.repositories.users import UserRepo
from chefbook_gate.gate.authz import ResourceType
from chefbook_gate.gate.deps import get_principal, require_owner
from chefbook_gate.gate.errors import InvalidInput, ResourceNotFound
from chefbook_gate.gate.shapes import require_scalar

router = APIRouter(prefix="/chefs", tags=["chefs"])

_owner_only = require_owner(ResourceType.chef, param="chef_id")

_FILTERS = ("city", "specialty")


def _directory_filter(request: Request, name: str) -> str | None:
    # Repeated keys arrive as a list and are refused like any other structured value.
    values = request.query_params.getlist(name)
    if not values:
        return None
    return require_scalar(values[0] if len(values) == 1 else values, field=name)


@router.post("", status_code=HTTP_201_CREATED)
async def create_chef_profile(
    body: ChefCreateRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    chefs = ChefRepo(session)
    if await chefs.get_for_user(principal.subject) is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Chef profile already exists")

    chef = await chefs.create(
        user_id=principal.subject,
        name=body.name,
        price_per_hour=body.price_per_hour,
        bio=body.bio,
        city=body.city,
        specialties=list(body.specialties),
    )
    if principal.role == Role.user:
        await UserRepo(session).set_role(principal.subject, Role.chef)
    await session.commit()
    return {"success": True, "data": dump(ChefOut, chef)}


@router.get("")
async def list_chefs(
    request: Request,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    # Bracketed keys (`city[$ne]=x`) are operator syntax in some query parsers.
    if any("[" in key for key in request.query_params.keys()):
        raise InvalidInput("bracketed query key")
    filters = {name: _directory_filter(request, name) for name in _FILTERS}
    chefs = await ChefRepo(session).list_active(**filters)
    return {"success": True, "data": [dump(ChefOut, c) for c in chefs], "count": len(chefs)}


@router.get("/{chef_id}")
async def get_chef(
    chef_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    chef = await ChefRepo(session).get(chef_id)
    if chef is None or not chef.is_active:
        raise ResourceNotFound("Chef")
    return {"success": True, "data": dump(ChefOut, chef)}


@router.put("/{chef_id}", dependencies=[Depends(_owner_only)])
async def update_chef(
    chef_id: str,
    body: ChefUpdateRequest,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    chefs = ChefRepo(session)
    chef = await chefs.get(chef_id)
    if chef is None:
        raise ResourceNotFound("Chef")
    await chefs.update(chef, body.model_dump(exclude_none=True))
    await session.commit()
    return {"success": True, "data": dump(ChefOut, chef)}


@router.delete("/{chef_id}", dependencies=[Depends(_owner_only)])
async def deactivate_chef(
    chef_id: str,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    chefs = ChefRepo(session)
    chef = await chefs.get(chef_id)
    if chef is None:
        raise ResourceNotFound("Chef")
    await chefs.deactivate(chef)
    await session.commit()
    return {"success": True, "message": "Chef profile deactivated"}


# --- Module Notes -----------------------------------------------------------
# Chef profiles are public, so a non-owner write is 403 rather than a hidden 404.
