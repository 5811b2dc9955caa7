"""Logging configuration helpers."""

import logging

# httpx logs full request URLs at INFO, including the FDC api_key query param.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("meal_nutrition")
    logger.setLevel(level.upper())
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
