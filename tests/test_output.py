"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON, plain and Rich renderers
- Global instance management and convenience functions
"""

from __future__ import annotations

import json

import pytest

from reqclient import output as output_module
from reqclient.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("reqclient.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("reqclient.output._is_tty", lambda: True)


def _plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


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

    def test_no_color_flag_forces_plain_on_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_format_is_kept(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON
        assert OutputManager(format=OutputFormat.RICH).format == OutputFormat.RICH


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
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
    """Data goes to stdout, diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        _plain().print_data("body text")
        captured = capfd.readouterr()
        assert "body text" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(_plain(), method)("HTTP 200 OK")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "HTTP 200 OK" in captured.err

    def test_no_diagnostics_leak_to_stdout_in_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.info("HTTP 201 Created")
        mgr.format_response({"id": 7})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"id": 7}
        assert "HTTP 201 Created" in captured.err


class TestQuietAndVerbose:
    def test_quiet_suppresses_info_and_success(self, capfd, non_tty):
        mgr = _plain(quiet=True)
        mgr.info("hidden")
        mgr.success("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warning_and_error(self, capfd, non_tty):
        mgr = _plain(quiet=True)
        mgr.warning("Failed to parse JSON response")
        mgr.error("HTTP 500 Internal Server Error")
        err = capfd.readouterr().err
        assert "Warning: Failed to parse JSON response" in err
        assert "Error: HTTP 500 Internal Server Error" in err

    def test_debug_hidden_by_default(self, capfd, non_tty):
        _plain().debug("retrying in 100ms")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        _plain(verbose=True).debug("retrying in 100ms")
        assert "[debug] retrying in 100ms" in capfd.readouterr().err

    def test_progress_only_on_tty(self, capfd, tty):
        _plain().progress("download: 10/20 bytes")
        assert "download: 10/20 bytes" in capfd.readouterr().err

    def test_progress_hidden_when_not_tty(self, capfd, non_tty):
        _plain().progress("download: 10/20 bytes")
        assert capfd.readouterr().err == ""

    def test_quiet_suppresses_progress(self, capfd, tty):
        _plain(quiet=True).progress("upload: 1/2 bytes")
        assert capfd.readouterr().err == ""


# ------------------------------------------------------------------ #
# Renderers
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict_as_json(self, capfd, non_tty):
        data = {"users": [{"id": 1, "name": "Alice"}]}
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response(data)
        out = capfd.readouterr().out
        assert json.loads(out) == data
        assert "\n" in out.strip()

    def test_string_that_is_json_is_reindented(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response('{"a":1}')
        assert json.loads(capfd.readouterr().out) == {"a": 1}

    def test_plain_string_printed_as_is(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response("<html></html>")
        assert "<html></html>" in capfd.readouterr().out


class TestPlainFormat:
    def test_dict_as_key_value(self, capfd, non_tty):
        _plain().format_response({"name": "Alice", "age": 30})
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["name\tAlice", "age\t30"]

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        _plain().format_response([{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}])
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["1\tAlice", "2\tBob"]

    def test_scalar(self, capfd, non_tty):
        _plain().format_response(42)
        assert "42" in capfd.readouterr().out


class TestRichFormat:
    def test_dict_produces_output(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response({"key": "value"})
        out = capfd.readouterr().out
        assert "key" in out
        assert "value" in out

    def test_markup_in_text_is_not_interpreted(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response(
            "[bold]raw[/bold]", "text/plain"
        )
        assert "[bold]raw[/bold]" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        mgr = _plain()
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_output_clears(self):
        mgr = _plain()
        set_output(mgr)
        reset_output()
        assert get_output() is not mgr


class TestConvenienceFunctions:
    def test_info_and_error_delegate(self, capfd, non_tty):
        set_output(_plain())
        output_module.info("status line")
        output_module.error("boom")
        err = capfd.readouterr().err
        assert "status line" in err
        assert "Error: boom" in err

    def test_format_response_delegates(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        output_module.format_response({"ok": True})
        assert json.loads(capfd.readouterr().out) == {"ok": True}

    def test_debug_delegates(self, capfd, non_tty):
        set_output(_plain(verbose=True))
        output_module.debug("cache hit")
        assert "cache hit" in capfd.readouterr().err
