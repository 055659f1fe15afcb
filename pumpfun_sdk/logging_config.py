"""
Logging configuration for applications using the SDK.

Usage:
    from pumpfun_sdk import logging_config
    logging_config.setup()
"""

import logging
import sys

NOISY_LOGGERS = ("websockets", "websockets.client", "httpx", "httpcore")


def setup(level=logging.INFO):
    """
    Configure console logging.

    - Quiets websocket frame and HTTP request logs
    - Uses short timestamps (HH:MM:SS)
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S")
    )
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("pumpfun_sdk").setLevel(level)


def setup_minimal():
    """Only warnings and errors."""
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging.
    Shows HTTP requests, but not raw websocket frames.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("httpx").setLevel(logging.INFO)
