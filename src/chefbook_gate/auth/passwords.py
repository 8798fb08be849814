"""
chefbook_gate.auth.passwords

Password hashing (bcrypt).

Responsibilities:
- Hash and verify passwords off the event loop.
- Keep login timing flat for unknown accounts (dummy hash check).
"""

from __future__ import annotations

import asyncio
from functools import lru_cache

import bcrypt

# bcrypt only looks at the first 72 bytes; longer inputs are refused at registration.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, *, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        # Over-long input or a malformed stored hash.
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("timing-equalizer-not-a-real-password")


async def hash_password_async(password: str, *, rounds: int = 12) -> str:
    return await asyncio.to_thread(hash_password, password, rounds=rounds)


async def verify_password_async(password: str, hashed: str | None) -> bool:
    """
    Verify in a worker thread. When `hashed` is None (unknown account) a dummy
    hash is checked anyway and the result is always False.
    """

    if hashed is None:
        await asyncio.to_thread(verify_password, password, _dummy_hash())
        return False
    return await asyncio.to_thread(verify_password, password, hashed)


# --- Module Notes -----------------------------------------------------------
# bcrypt is CPU-bound (~100ms at 12 rounds); running it inline would stall every
# other request on the loop.
