"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger

    logger.info("Refresh cycle finished")
    logger.warning("Primary price source failed, trying fallback")

Log Levels (from most to least verbose):
    DEBUG    - Detailed diagnostic information (e.g., "GET https://... - Status: 200")
    INFO     - General informational messages (e.g., "USD/RUB rate refreshed and cached")
    WARNING  - Recovered failures (e.g., "Primary price source failed")
    ERROR    - Failures surfaced to the display (e.g., "Refresh cycle failed")
    CRITICAL - Not used by the refresh loop; no error is fatal

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional

from core.config import settings


ROOT_LOGGER_NAME = "btcrub"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] btcrub Application started
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

# Create the global logger instance
logger = setup_logging(log_level=settings.log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger named "btcrub.<name>"

    Example:
        # In fetchers/price.py:
        logger = get_logger(__name__)  # "btcrub.fetchers.price"
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(source: str, url: str) -> None:
    """
    Log an outgoing API request with consistent formatting.

    Example:
        >>> log_api_request("fallback_price", "https://api.blockchain.info/stats")
        [DEBUG] API Request: fallback_price https://api.blockchain.info/stats
    """
    logger.debug(f"API Request: {source} {url}")


def log_api_response(source: str, url: str, status: int, response_time: Optional[float] = None) -> None:
    """
    Log an API response with status and timing information.

    Example:
        >>> log_api_response("rate", "https://www.cbr-xml-daily.ru/daily_json.js", 200, 0.342)
        [DEBUG] API Response: rate https://www.cbr-xml-daily.ru/daily_json.js | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {source} {url} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
