"""
Structured logging for the check-in service.

Every module logs through get_logger(__name__) with keyword fields; output is
one JSON object per line on stdout.
"""

import logging
import sys

import structlog
from structlog.stdlib import LoggerFactory

# Loggers that are chatty at INFO and carry nothing the service needs
_QUIET_LOGGERS = ("uvicorn.access", "asyncio")


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog + stdlib logging once, at process start.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Raw identifiers
            (phone numbers, emails) only appear at DEBUG.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_lookup(identifier_kind: str, resolved: bool, duration_ms: float, error: str = None):
    """One line per directory lookup; failures go out at WARNING."""
    logger = get_logger("directory")

    fields = {
        "operation": "directory_lookup",
        "identifier_kind": identifier_kind,
        "resolved": resolved,
        "duration_ms": duration_ms,
    }

    if error:
        logger.warning("Directory lookup failed", error=error, **fields)
        return
    logger.info("Directory lookup completed", **fields)
