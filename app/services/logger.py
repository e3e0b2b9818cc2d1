import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level="INFO") -> logging.Logger:
    """Send everything under the `app` logger to stdout. Safe to call more than once."""
    lg = logging.getLogger("app")
    lg.setLevel(level)
    lg.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    lg.addHandler(handler)
    return lg
