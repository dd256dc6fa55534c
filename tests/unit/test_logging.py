"""Unit tests for logging configuration and the progress callback."""

import io
import logging

import structlog
from rich.console import Console

from salvo.utils.logging import (
    configure_logging,
    ensure_logging_configured,
    get_logger,
    make_progress_callback,
    silent_progress,
)


class TestProgressCallback:
    """Tests for make_progress_callback."""

    def test_not_verbose_is_silent(self):
        """Test the callback is a no-op without verbose."""
        buffer = io.StringIO()
        callback = make_progress_callback(False, Console(file=buffer))

        callback("Pod name: web-1")

        assert callback is silent_progress
        assert buffer.getvalue() == ""

    def test_verbose_prints_lines(self):
        """Test verbose callbacks print each message on its own line."""
        buffer = io.StringIO()
        callback = make_progress_callback(True, Console(file=buffer, width=200))

        callback("Pod name: web-1")
        callback("Pod name: web-2")

        assert buffer.getvalue() == "Pod name: web-1\nPod name: web-2\n"

    def test_markup_is_not_interpreted(self):
        """Test brackets in paths are printed verbatim."""
        buffer = io.StringIO()
        callback = make_progress_callback(True, Console(file=buffer, width=200))

        callback("Created file /tmp/[red]/web-1.log")

        assert buffer.getvalue() == "Created file /tmp/[red]/web-1.log\n"


class TestConfigureLogging:
    """Tests for structlog configuration."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_warning_level_hides_debug(self, capsys):
        """Test debug events are filtered at the default level."""
        configure_logging(logging.WARNING)
        logger = get_logger("salvo.test")

        logger.debug("hidden event")
        logger.warning("shown event", pod="web-1")

        captured = capsys.readouterr()
        assert "hidden event" not in captured.err
        assert "shown event" in captured.err
        assert "web-1" in captured.err
        assert captured.out == ""

    def test_debug_level_shows_debug(self, capsys):
        """Test debug events are shown at DEBUG level."""
        configure_logging(logging.DEBUG)

        get_logger("salvo.test").debug("visible event")

        assert "visible event" in capsys.readouterr().err

    def test_ensure_applies_quiet_default(self, capsys):
        """Test an unconfigured structlog gets the WARNING-to-stderr setup."""
        structlog.reset_defaults()

        ensure_logging_configured()
        get_logger("salvo.test").debug("hidden event")

        assert structlog.is_configured()
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_ensure_keeps_existing_setup(self, capsys):
        """Test an explicit configuration is left alone."""
        configure_logging(logging.DEBUG)

        ensure_logging_configured()
        get_logger("salvo.test").debug("visible event")

        assert "visible event" in capsys.readouterr().err
