"""Logging configuration for clean-recently-used."""

import logging
import sys

from clean_recently_used.config import settings

# Single app logger that can be imported throughout the application
logger = logging.getLogger("clean_recently_used")


def setup_logging(debug: bool | None = None) -> None:
    """Configure application logging.

    Logs to stderr so a dry run can keep stdout for its report.
    The app logger level follows CRU_DEBUG unless ``debug`` overrides it.
    """
    # Clear existing handlers to prevent duplicate log entries
    logging.root.handlers = []

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    enabled = settings.cru_debug if debug is None else debug
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)

    level_name = "DEBUG" if enabled else "INFO"
    logger.debug("clean-recently-used logging initialized at %s level", level_name)
