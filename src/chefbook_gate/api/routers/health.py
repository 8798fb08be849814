"""
chefbook_gate.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chefbook_gate.api.deps import db_session
from chefbook_gate.gate.errors import StoreUnavailable

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    # Ownership checks cannot run without the store, so readiness follows it.
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise StoreUnavailable(f"readiness probe failed: {e.__class__.__name__}") from e
    return {"status": "ready"}
