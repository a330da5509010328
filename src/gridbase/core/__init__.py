"""Settings and structured logging shared by every GridBase layer."""

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    log_context,
    new_correlation_id,
)

__all__ = [
    "Settings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
    "log_context",
    "new_correlation_id",
]
