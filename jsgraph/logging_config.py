import logging
import sys
from typing import Optional, TextIO

from .config import get_settings

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_NAME = "jsgraph-console"


def setup_logging(stream: Optional[TextIO] = None, level: Optional[str] = None) -> None:
    """
    Configure the root logger with a single console handler.

    The level comes from *level* when given, otherwise from the
    ``JSGRAPH_LOG_LEVEL`` setting. Calling this again replaces the handler
    instead of stacking a second one. Handlers installed by anyone else
    are left alone.
    """
    level_name = (level or get_settings().log_level).upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.set_name(HANDLER_NAME)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    root_logger.addHandler(console_handler)
