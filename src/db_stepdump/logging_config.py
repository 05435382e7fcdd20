"""Central logging configuration.

Invoked once by the CLI entry point.  Library code only ever calls
``logging.getLogger(__name__)``.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str | None = None) -> None:
    """Initialize logging.

    - Level is taken from the ``LOG_LEVEL`` environment variable if not
      provided (default ``INFO``).
    - Log records go to stderr through rich so they do not interleave with
      progress output on stdout.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()

    # Configure handlers once to avoid duplicates on repeated calls
    if not root_logger.handlers:
        logging.basicConfig(
            level=log_level,
            format="%(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    root_logger.setLevel(log_level)

    # SQLAlchemy: detailed SQL only when DEBUG is enabled at the root
    sqlalchemy_engine_level = logging.DEBUG if root_logger.level == logging.DEBUG else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sqlalchemy_engine_level)
