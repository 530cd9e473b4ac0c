"""
Centralized logging configuration for the discount engine.
"""
import logging
import sys
from typing import Optional

# Global logger instance
_logger: Optional[logging.Logger] = None


def setup_logging(level: int = logging.INFO, name: str = "discount_engine") -> logging.Logger:
    """
    Setup global logging configuration.

    Args:
        level: Logging level (default: INFO)
        name: Logger name

    Returns:
        Configured logger instance
    """
    global _logger

    if _logger is not None:
        return _logger

    _logger = logging.getLogger(name)
    _logger.setLevel(level)

    # Remove existing handlers
    _logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    # Format: [TIME] [LEVEL] [MODULE] Message
    formatter = logging.Formatter(
        fmt='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    _logger.addHandler(handler)
    _logger.propagate = False

    return _logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Optional module name for logger

    Returns:
        Logger instance
    """
    global _logger

    if _logger is None:
        _logger = setup_logging()

    if name:
        return _logger.getChild(name)

    return _logger


def reset_logging() -> None:
    """Drop the cached logger so the next call reconfigures it."""
    global _logger
    if _logger is not None:
        _logger.handlers.clear()
        _logger.setLevel(logging.NOTSET)
        _logger.propagate = True
    _logger = None
