"""
chefbook_gate.observability

Observability package.

Responsibilities:
- Structured logging configuration with credential scrubbing.
- Request context propagation for consistent log enrichment.
"""

# Package marker.
