import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

log = logging.getLogger("compliance")


def setup_logging() -> None:
    """
    Configure root logging once (uvicorn / tests may call this repeatedly).
    Level comes from LOG_LEVEL env var, default INFO.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
