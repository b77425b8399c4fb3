from __future__ import annotations

import uvicorn

from smartqr.core.config import get_settings


def main() -> None:
    # Run the API with env-driven settings; workers share nothing but the configured stores.
    settings = get_settings()
    uvicorn.run(
        "smartqr.apps.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
