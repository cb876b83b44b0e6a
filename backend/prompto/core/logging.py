# prompto/core/logging.py
import logging

from prompto.core.settings import settings


def setup_logging():
    """
    Configures the root logger for the application.
    """
    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding='utf-8'))

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    # Return module logger
    return logging.getLogger("prompto")

logger = setup_logging()
