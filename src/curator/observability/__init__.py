"""Observability helpers."""

from curator.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
    request_context,
)


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "get_logger",
    "request_context",
]
