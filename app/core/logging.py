"""Process-wide logging setup shared by the API entrypoint and CLI scripts."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


def configure_logging(settings: "Settings") -> None:
    """Configure root logging from LOG_LEVEL. Safe to call more than once."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    # SQL echo is controlled by DEBUG on the engine; keep the logger itself quiet.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
