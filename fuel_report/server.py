"""
Process entry point: serve the report API with uvicorn.
"""

from __future__ import annotations

import uvicorn

from fuel_report.config import get_server_settings


def main() -> None:
    settings = get_server_settings()
    uvicorn.run(
        "fuel_report.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
