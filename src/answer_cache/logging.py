"""Structured logging configuration."""

import logging
import sys

import structlog

from answer_cache.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog on top of the stdlib logging backend."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
        processors.insert(0, structlog.stdlib.add_logger_name)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.insert(0, structlog.processors.TimeStamper(fmt="%H:%M:%S"))
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=False,
                pad_event=35,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_cache_operation(
    logger: structlog.stdlib.BoundLogger,
    tier: str,
    key: str,
    hit: bool | None = None,
    **kwargs,
) -> None:
    """Log a cache lookup or write with a standard shape."""
    log_data = {
        "tier": tier,
        "cache_key": key,
        **kwargs,
    }

    if hit is not None:
        log_data["cache_hit"] = hit

    logger.debug("Cache operation", **log_data)


def log_upstream_call(
    logger: structlog.stdlib.BoundLogger,
    provider: str,
    model: str,
    success: bool,
    **kwargs,
) -> None:
    """Log an upstream model call."""
    logger.info(
        "Upstream call",
        provider=provider,
        model=model,
        success=success,
        **kwargs,
    )
