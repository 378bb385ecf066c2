import logging
import sys
from typing import Iterable


def setup_logging(level: str = "INFO", quiet_loggers: Iterable[str] = ()) -> None:
    """
    Configure service logging.

    Engine events are logged as `EVENT | key=value` lines (RULE_SKIPPED,
    HORIZON_CLAMPED, ...). Loggers named in `quiet_loggers` (database
    drivers, HTTP clients) are held at WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a namespaced logger.
    """
    return logging.getLogger(name)
