"""
chefbook_gate.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime


class Role(enum.StrEnum):
    # Stored on the user record; treat values as a stable contract.
    user = "user"
    chef = "chef"
    admin = "admin"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, built per request from a verified bearer token.
    """

    subject: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


# --- Module Notes -----------------------------------------------------------
# Principals are never persisted; they live for the duration of one request.
