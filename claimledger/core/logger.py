import logging
import os
import sys

NOISY_LIBRARIES = ("httpx", "httpcore", "openai", "groq", "web3", "urllib3")


def get_logger(name: str) -> logging.Logger:
    """
    Returns a structured logger for any module in the service.
    Level comes from LOG_LEVEL (default INFO).

    Usage:
        logger = get_logger(__name__)
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] → %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def quiet_libraries(level: int = logging.WARNING) -> None:
    """Client libraries log every HTTP request at INFO; keep them at `level`."""
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(level)
