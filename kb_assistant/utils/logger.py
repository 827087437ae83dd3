"""
Logging configuration
"""
import logging
import sys
from kb_assistant.config import get_settings

settings = get_settings()


def get_logger(name: str) -> logging.Logger:
    """
    Get logger with standard format

    Handlers are attached only once per logger name so repeated imports
    do not duplicate output.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    # Console handler
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
