"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_json and print_table in every mode
- Rich markup in messages is printed literally
- Logging configuration
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from reatchify import output as output_module
from reatchify.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("reatchify.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("reatchify.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("a message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "a message" in captured.err

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("hello")
        captured = capfd.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == ""

    def test_prefixes_without_color(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.warning("w")
        mgr.error("e")
        mgr.suggest("s")
        err = capfd.readouterr().err
        assert "Warning: w" in err
        assert "Error: e" in err
        assert "→ s" in err

    def test_markup_printed_literally(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        mgr = OutputManager(format=OutputFormat.PLAIN)
        mgr.error("errorHandling.customErrorClasses[RateLimitError]: bad")
        assert "[RateLimitError]" in capfd.readouterr().err


class TestQuietAndVerbose:
    def test_quiet_suppresses_info_success_suggest(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("x")
        mgr.success("x")
        mgr.suggest("x")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warning_and_error(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.warning("careful")
        mgr.error("broken")
        err = capfd.readouterr().err
        assert "careful" in err
        assert "broken" in err

    def test_debug_only_when_verbose(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("shown")
        err = capfd.readouterr().err
        assert "hidden" not in err
        assert "[debug] shown" in err

    def test_progress_only_on_tty(self, capfd, monkeypatch):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        monkeypatch.setattr("reatchify.output._is_tty", lambda: False)
        mgr.progress("off")
        monkeypatch.setattr("reatchify.output._is_tty", lambda: True)
        mgr.progress("on")
        err = capfd.readouterr().err
        assert "off" not in err
        assert "on" in err


# ------------------------------------------------------------------ #
# Data output
# ------------------------------------------------------------------ #


class TestPrintJson:
    def test_plain_is_raw_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_json({"apiKey": "****", "language": "ts"})
        assert json.loads(capfd.readouterr().out) == {"apiKey": "****", "language": "ts"}

    def test_rich_contains_content(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_json({"stateManagement": "zustand"})
        out = capfd.readouterr().out
        assert "stateManagement" in out
        assert "zustand" in out


class TestPrintTable:
    def test_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["File", "Lines"], [["index.ts", "7"]])
        assert json.loads(capfd.readouterr().out) == [{"File": "index.ts", "Lines": "7"}]

    def test_plain_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["File", "Lines"], [["index.ts", "7"], ["api/users.ts", "40"]], title="ignored")
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["File\tLines", "index.ts\t7", "api/users.ts\t40"]

    def test_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["Field", "Value"], [["type", "next"]], title="Project detection")
        out = capfd.readouterr().out
        assert "Project detection" in out
        assert "next" in out


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def test_levels(self, non_tty):
        configure_logging(OutputManager(no_color=True))
        assert logging.getLogger("reatchify").level == logging.WARNING
        configure_logging(OutputManager(no_color=True, verbose=True))
        assert logging.getLogger("reatchify").level == logging.DEBUG
        configure_logging(OutputManager(no_color=True, quiet=True))
        assert logging.getLogger("reatchify").level == logging.ERROR

    def test_single_handler_no_propagation(self, non_tty):
        configure_logging(OutputManager(no_color=True))
        configure_logging(OutputManager(no_color=True))
        logger = logging.getLogger("reatchify")
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_plain_handler_writes_stderr(self, capfd, non_tty):
        configure_logging(OutputManager(no_color=True))
        logging.getLogger("reatchify.schema.loader").warning("using fallback schema")
        captured = capfd.readouterr()
        assert "WARNING: using fallback schema" in captured.err
        assert captured.out == ""

    def test_rich_handler_when_colored(self, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        configure_logging(OutputManager())
        assert isinstance(logging.getLogger("reatchify").handlers[0], RichHandler)


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalOutput:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_output(self, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_module_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.info("via helper")
        output_module.print_data("data line")
        captured = capfd.readouterr()
        assert "via helper" in captured.err
        assert "data line" in captured.out
