"""Logging for Salvo.

Two separate channels are used:

- Progress output: user-facing lines such as ``Pod name: web-1``. They are
  printed through a callback that is passed explicitly into the pipeline and
  is a no-op unless verbose mode is enabled.
- Diagnostic logging: structlog events rendered to stderr. Quiet by default
  (WARNING), enabled with ``--debug``.
"""

import logging
import sys
from typing import Callable, Optional

import structlog
from rich.console import Console

ProgressCallback = Callable[[str], None]


def _stderr_logger_factory(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure structlog for Salvo.

    At DEBUG level every component step is logged with its context.
    At WARNING level nothing is logged unless something unexpected happens;
    per-pod failures are reported by the CLI instead.

    Args:
        level: Standard logging level (e.g., logging.DEBUG, logging.WARNING).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def ensure_logging_configured() -> None:
    """Apply the quiet WARNING-to-stderr setup unless logging is already configured."""
    if not structlog.is_configured():
        configure_logging()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structlog logger."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def silent_progress(message: str) -> None:
    """Progress callback used when verbose output is disabled."""
    return None


def make_progress_callback(verbose: bool, console: Optional[Console] = None) -> ProgressCallback:
    """Build the progress callback handed to the pipeline.

    Args:
        verbose: When False the returned callback discards every message
        console: Console to print to (default: a new stdout console)

    Returns:
        Callable taking one progress line
    """
    if not verbose:
        return silent_progress

    out = console or Console(highlight=False, soft_wrap=True)

    def _progress(message: str) -> None:
        out.print(message, markup=False)

    return _progress
