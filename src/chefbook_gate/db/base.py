"""
chefbook_gate.db.base

SQLAlchemy declarative base and id generation.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
- Generate record ids in the marketplace's 24-hex-character format.
"""

from __future__ import annotations

import re
import secrets

from sqlalchemy.orm import DeclarativeBase

ID_LENGTH = 24
_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def new_id() -> str:
    return secrets.token_hex(ID_LENGTH // 2)


def is_valid_id(value: str) -> bool:
    return bool(_ID_RE.match(value))


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# All ORM models should inherit from `Base` so Alembic and metadata discovery work.
