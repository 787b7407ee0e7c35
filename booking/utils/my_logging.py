# booking/utils/my_logging.py
"""Logging configuration shared by the API and the Celery worker"""
import logging
import sys
from booking.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that drown out booking logs when left at INFO
NOISY_LOGGERS = [
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "celery",
    "kombu",
    "amqp",
    "redis",
    "httpx",
    "uvicorn.access",
]


def setup_logging(verbose=True):
    """
    Configure application logging

    Args:
        verbose: log at settings.LOG_LEVEL and keep third-party output;
            otherwise only warnings, and third-party loggers only errors
    """
    settings = get_settings()

    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.getLogger("booking").setLevel(level)

    if not verbose:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR)
