"""Main entry point for the Hilal application."""

import logging

import uvicorn

from hilal.api.app import create_app
from hilal.config import get_config, setup_logging


def main() -> None:
    """Run the Hilal application."""
    config = get_config()
    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Hilal starting...")
    logger.info(f"Location: {config.latitude}, {config.longitude} ({config.city})")
    logger.info(f"Audio directory: {config.audio_dir}")

    app = create_app(config=config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
