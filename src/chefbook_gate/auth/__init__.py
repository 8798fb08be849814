"""
chefbook_gate.auth

Credential primitives.

Responsibilities:
- Bearer token issuing and validation (JWT).
- Password hashing.
- The authenticated identity type (`Principal`).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Policy decisions (who may touch what) live in `chefbook_gate.gate`, not here.
