"""
Shared helpers.
"""
import logging
import os


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format=LOG_FORMAT,
)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger configured with the service-wide format."""
    return logging.getLogger(name)
