"""
chefbook_gate.api.__main__

`python -m chefbook_gate.api` / `chefbook-gate`: serve the API with uvicorn.
"""

from __future__ import annotations

import uvicorn

from chefbook_gate.api.app import create_app
from chefbook_gate.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        # Login throttling keys on the client address; only trusted proxies may set it.
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
        log_config=None,  # structlog owns the root logger
    )


if __name__ == "__main__":
    main()
