# creavely/server.py — Process entry point (uvicorn)

import logging

import uvicorn

from creavely.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Server listening on port %d", settings.server_port)
    # On SIGINT/SIGTERM uvicorn drains for the grace period, then the lifespan closes the database.
    uvicorn.run(
        "creavely.main:app",
        host=settings.server_host,
        port=settings.server_port,
        timeout_keep_alive=60,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
        log_config=None,
    )
    logger.info("Server exited properly")


if __name__ == "__main__":
    main()
