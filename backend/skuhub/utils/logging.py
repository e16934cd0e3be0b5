import logging
import sys

from skuhub.config import settings


def get_logger(name: str, tag: str) -> logging.Logger:
    """
    Return a logger that writes "[TAG] message" lines to stdout.
    Handlers are attached once per logger name, so repeated imports are safe.
    """
    log = logging.getLogger(name)
    log.setLevel(settings.LOG_LEVEL.upper())
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(f"[{tag}] %(message)s"))
        log.addHandler(h)
        log.propagate = False
    return log
