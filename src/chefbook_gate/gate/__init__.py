"""
chefbook_gate.gate

Request authorization and payment-integrity gate.

Responsibilities:
- `AuthzGate`: token authentication, ownership checks, payment signature
  verification, injection-operator rejection.
- The rejection taxonomy rendered by the API layer.
- FastAPI dependencies that run the gate before handlers execute.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `authz`, `errors` and `shapes` are framework-free; only `deps` imports FastAPI.
