"""
Structured logging for layerconf.

Configuration values can carry credentials, so log events only ever name
config keys. Where a value must be logged, ``RedactingProcessor`` masks it
when the key looks like a secret.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, cast

import structlog
from structlog.types import FilteringBoundLogger

REDACTED = "***MASKED***"

SENSITIVE_FRAGMENTS = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "credential",
    "privatekey",
)


def is_sensitive_key(key: str) -> bool:
    """Return True if the attribute part of ``key`` looks like a secret."""
    attribute = key.rsplit(".", 1)[-1].lower().replace("-", "_")
    compact = attribute.replace("_", "")
    return any(frag in attribute or frag in compact for frag in SENSITIVE_FRAGMENTS)


class RedactingFilter(logging.Filter):
    """
    Filter for stdlib records emitted outside structlog.

    Drops records whose extra fields carry a ``value`` for a sensitive key.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        key = getattr(record, "key", None)
        if isinstance(key, str) and hasattr(record, "value") and is_sensitive_key(key):
            return False
        return True


class RedactingProcessor:
    """
    Structlog processor that masks config values logged for secret keys.

    Note: only the ``value`` field is inspected; event names and keys are
    always kept so operators can tell which attribute was touched.
    """

    def __call__(
        self, logger: FilteringBoundLogger, method_name: str, event_dict: Dict[str, Any]
    ) -> Dict[str, Any]:
        key = event_dict.get("key")
        if "value" in event_dict and isinstance(key, str) and is_sensitive_key(key):
            event_dict["value"] = REDACTED
        return event_dict


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    enable_redaction: bool = True,
) -> None:
    """
    Set up structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json, console)
        log_file: Optional log file path
        enable_redaction: Whether to mask values of secret-looking keys
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if enable_redaction:
        processors.append(RedactingProcessor())

    if log_format == "json":
        processors.extend(
            [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
        )
    else:
        processors.extend([structlog.dev.ConsoleRenderer(colors=False)])

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = []

    # stderr keeps stdout clean for CLI output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if enable_redaction:
        console_handler.addFilter(RedactingFilter())
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        if enable_redaction:
            file_handler.addFilter(RedactingFilter())
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, format="%(message)s", force=True)


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return cast(FilteringBoundLogger, structlog.get_logger(name))
