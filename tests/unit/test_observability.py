"""
Structured logging helpers
"""

import subprocess
import sys

import pytest
from structlog.testing import capture_logs

from svelte_unsafe_html.analyzer import analyze
from svelte_unsafe_html.observability import LogPerformance, get_logger, log_error


class TestLogHelpers:
    def test_log_error(self):
        logger = get_logger("test")

        with capture_logs() as logs:
            log_error(logger, "something_failed", ValueError("boom"), filename="App.svelte")

        assert logs == [
            {
                "event": "something_failed",
                "log_level": "warning",
                "error_type": "ValueError",
                "error_message": "boom",
                "filename": "App.svelte",
            }
        ]

    def test_log_performance_success(self):
        logger = get_logger("test")

        with capture_logs() as logs:
            with LogPerformance(logger, "analysis", filename="App.svelte"):
                pass

        assert logs[0]["event"] == "analysis_complete"
        assert logs[0]["log_level"] == "debug"
        assert "duration_ms" in logs[0]

    def test_log_performance_failure_propagates(self):
        logger = get_logger("test")

        with capture_logs() as logs:
            with pytest.raises(RuntimeError):
                with LogPerformance(logger, "analysis"):
                    raise RuntimeError("broken")

        assert logs[0]["event"] == "analysis_failed"
        assert logs[0]["error_message"] == "broken"


class TestAnalysisEvents:
    @pytest.fixture(autouse=True)
    def fresh_loggers(self, monkeypatch):
        """Module loggers cache their processors on first use; swap in unbound ones"""
        monkeypatch.setattr("svelte_unsafe_html.analyzer.logger", get_logger("svelte_unsafe_html.analyzer"))
        monkeypatch.setattr("svelte_unsafe_html.rules.unsafe_html.logger", get_logger("svelte_unsafe_html.rules"))

    def test_findings_and_completion_are_logged(self):
        with capture_logs() as logs:
            analyze("{@html a}", "App.svelte")

        events = [entry["event"] for entry in logs]
        assert "unsafe_html_detected" in events
        assert "analysis_complete" in events

    def test_parse_failure_is_logged(self):
        with capture_logs() as logs:
            analyze("{@html a +}", "Broken.svelte")

        failure = next(entry for entry in logs if entry["event"] == "template_parse_failed")
        assert failure["code"] == "invalid-expression"
        assert failure["filename"] == "Broken.svelte"

    def test_completion_carries_warning_count(self):
        with capture_logs() as logs:
            analyze("{@html a}{@html b}", "App.svelte")

        complete = next(entry for entry in logs if entry["event"] == "analysis_complete")
        assert complete["warnings"] == 2
        assert complete["filename"] == "App.svelte"


class TestLoggingSetup:
    def test_import_leaves_logging_unconfigured(self):
        """Only the CLI configures logging; a fresh interpreter shows the import side effects"""
        code = (
            "import logging, structlog, svelte_unsafe_html; "
            "print(len(logging.getLogger().handlers), structlog.is_configured())"
        )

        result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True, check=True)

        assert result.stdout.split() == ["0", "False"]

    def test_unconfigured_debug_events_stay_quiet(self):
        """Before setup_logging(), stdlib defaults drop debug events"""
        code = "from svelte_unsafe_html import analyze; analyze('<p>{@html x}</p>', 'App.svelte')"

        result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True, check=True)

        assert result.stdout == ""
        assert "template_parsed" not in result.stderr
