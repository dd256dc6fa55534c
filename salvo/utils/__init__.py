"""
Utility functions and helpers.

Logging configuration and the verbosity-gated progress callback.
"""

from salvo.utils.logging import (
    ProgressCallback,
    configure_logging,
    ensure_logging_configured,
    get_logger,
    make_progress_callback,
    silent_progress,
)

__all__ = [
    "ProgressCallback",
    "configure_logging",
    "ensure_logging_configured",
    "get_logger",
    "make_progress_callback",
    "silent_progress",
]
