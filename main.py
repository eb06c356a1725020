from __future__ import annotations

import os

import uvicorn

from tradejournal.utils.config import get_settings
from tradejournal.utils.logger import get_logger, setup_logging


def main() -> None:
    setup_logging()
    settings = get_settings()

    port = int(os.environ.get("PORT", settings.api_port))
    get_logger(__name__).info("journal_api_starting", host=settings.api_host, port=port,
                              db_path=settings.db_path)

    uvicorn.run(
        "tradejournal.api.webapp:app",
        host=settings.api_host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
