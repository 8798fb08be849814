"""
chefbook_gate.api

API package for the chefbook gateway.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, schemas, error rendering and rate limiting.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: shape validation + gate + delegation to repositories.
