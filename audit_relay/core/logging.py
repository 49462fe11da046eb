from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send every logger to stdout with one timestamped format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(handlers=[handler], level=level.upper(), force=True)
    # uvicorn installs its own access log; the request middleware replaces it
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
