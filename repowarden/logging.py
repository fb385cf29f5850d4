"""Structured logging configuration for RepoWarden."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.types import Processor

from .config import get_settings


def setup_logging() -> None:
    """Configure structured logging for RepoWarden."""
    settings = get_settings()

    # Scan output goes to stdout, logs stay on stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

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


def log_scan_event(
    logger: structlog.stdlib.BoundLogger,
    repository: str,
    phase: str,
    **kwargs: Any,
) -> None:
    """Log a scan event with repository context."""
    log_data: Dict[str, Any] = {
        "repository": repository,
        "phase": phase,
    }
    log_data.update(kwargs)

    if phase == "failed":
        logger.error(f"scan.{phase}", **log_data)
    else:
        logger.info(f"scan.{phase}", **log_data)


def log_provider_call(
    logger: structlog.stdlib.BoundLogger,
    method: str,
    path: str,
    payload: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> None:
    """Log a configuration provider API call."""
    log_data: Dict[str, Any] = {
        "http_method": method,
        "path": path,
    }

    # Payload keys only, values may carry secrets
    if payload:
        log_data["payload_keys"] = list(payload.keys())

    log_data.update(kwargs)

    logger.debug("provider.call", **log_data)


def log_remediation_event(
    logger: structlog.stdlib.BoundLogger,
    repository: str,
    finding_id: str,
    status: str,
    duration_ms: Optional[int] = None,
    **kwargs: Any,
) -> None:
    """Log a remediation attempt with standardized fields."""
    log_data: Dict[str, Any] = {
        "repository": repository,
        "finding_id": finding_id,
        "status": status,
    }

    if duration_ms is not None:
        log_data["duration_ms"] = duration_ms

    log_data.update(kwargs)

    if status == "failed":
        logger.warning("remediation.attempt", **log_data)
    else:
        logger.info("remediation.attempt", **log_data)


# Initialize logging on module import
setup_logging()
