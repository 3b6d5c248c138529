"""
Unit tests for structured logging configuration.
"""

import structlog

from orgpulse import __version__
from orgpulse.config import Settings
from orgpulse.utils.logging import (
    SERVICE_NAME,
    add_service_context,
    add_severity,
    build_processors,
)


class TestLoggingProcessors:
    def test_logging_service_context_tags_event(self):
        event = add_service_context(None, "info", {"event": "snapshot_loaded"})

        assert event["service"] == SERVICE_NAME
        assert event["version"] == __version__

    def test_logging_service_context_keeps_explicit_values(self):
        event = add_service_context(None, "info", {"event": "x", "service": "orgpulse-cli"})
        assert event["service"] == "orgpulse-cli"

    def test_logging_severity_is_upper_case(self):
        assert add_severity(None, "warning", {"event": "x"})["severity"] == "WARNING"

    def test_logging_production_renders_json(self):
        processors = build_processors(Settings(log_format="json", dev_mode=False))

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert add_service_context in processors

    def test_logging_dev_mode_renders_console(self):
        processors = build_processors(Settings(log_format="json", dev_mode=True))
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
