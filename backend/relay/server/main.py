"""Process entrypoint: serve the relay on the configured host and port."""

import structlog
import uvicorn

from relay.server.settings import RelayServerSettings
from shared.logging import setup_logging

logger = structlog.get_logger()


def main() -> None:  # pragma: no cover
    settings = RelayServerSettings()
    setup_logging(log_dir=settings.log_dir)
    logger.info("starting relay server", host=settings.host, port=settings.port)
    # log_config=None keeps the structlog configuration instead of uvicorn's default
    uvicorn.run(
        "relay.server.app:get_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
