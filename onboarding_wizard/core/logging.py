"""structlog setup for the onboarding service.

Every record, whether emitted through structlog or a stdlib logger (uvicorn,
SQLAlchemy, redis), goes through the same processor chain. Each record is
tagged with the request's X-Request-ID and has email addresses masked before
rendering. Production renders JSON lines; debug mode renders coloured console
output.
"""

import logging
import logging.config
import re

import structlog
from asgi_correlation_id.context import correlation_id

EMAIL_RE = re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "redis")


def add_correlation_id(logger, method, event_dict):
    request_id = correlation_id.get(None)
    if request_id:
        event_dict["correlation_id"] = request_id
    return event_dict


def mask_emails(logger, method, event_dict):
    """Reduce addresses in string values to ``a***@example.com``."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "@" in value:
            event_dict[key] = EMAIL_RE.sub(r"\1***@\2", value)
    return event_dict


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Install the processor chain. Must run before any module calls
    ``structlog.get_logger`` because loggers cache it on first use."""
    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        mask_emails,
    ]
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "structured",
                },
            },
            "root": {"level": log_level, "handlers": ["stdout"]},
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        }
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
