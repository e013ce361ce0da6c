"""Process-wide logger; level comes from LOG_LEVEL."""
import logging
import os

ROOT_NAME = "testigo"

logger = logging.getLogger(ROOT_NAME)
if not logger.handlers:
    h = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    logger.propagate = False


def get_logger(name: str = None):
    """Root service logger, or a child such as `testigo.store` when a name is given."""
    return logger.getChild(name) if name else logger
