"""
Logging setup for the FilmStock server.
"""
import logging
import sys
from typing import Optional

from filmstock.utilities.config import LOG_LEVEL


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once, at process start.

    Args:
        level: Level name such as "DEBUG"; defaults to the LOG_LEVEL setting.
    """
    name = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
