"""Process logging setup."""

import logging

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install a single stream handler on the root logger at LOG_LEVEL."""
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ"))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # SQL echo is controlled by DEBUG on the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
