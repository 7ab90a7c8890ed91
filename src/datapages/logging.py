from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
PACKAGE_LOGGER = "datapages"


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; the package level is applied even if logging was already set up."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level.upper())
