"""
Logging setup for scripts that run sources outside the host.

Sources only create module loggers and never install handlers; whoever runs
them decides where records go. Fetch failures are logged at ERROR level, so
they reach stderr even when nothing is configured.
"""

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Send log records of the given level and above to stderr.

    Args:
        level: Logging level name (e.g. "DEBUG") or number
    """
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
