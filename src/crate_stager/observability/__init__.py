"""Public observability primitives: progress output and JSON-lines logging."""

from crate_stager.observability.logging import (
    LOGGER_NAME,
    JsonLineFormatter,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LOGGER_NAME",
    "JsonLineFormatter",
    "setup_logging",
    "shutdown_logging",
]
