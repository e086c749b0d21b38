"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb colour disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- format_response and print_table in JSON and plain modes
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from openapi_consumer import output as output_module
from openapi_consumer.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("openapi_consumer.output._is_tty", lambda: False)


def _manager(format: OutputFormat = OutputFormat.PLAIN, **kwargs) -> OutputManager:
    return OutputManager(format=format, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# Format resolution
# ------------------------------------------------------------------ #


HEADERS = ["Operation", "Method"]
ROWS = [["listPets", "GET"]]


class TestFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty, capsys) -> None:
        OutputManager().print_table(HEADERS, ROWS)
        assert capsys.readouterr().out == "Operation\tMethod\nlistPets\tGET\n"

    def test_auto_is_rich_on_tty(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("openapi_consumer.output._is_tty", lambda: True)
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        OutputManager().print_table(HEADERS, ROWS)
        out = capsys.readouterr().out
        assert "listPets" in out
        assert "\t" not in out

    def test_auto_is_plain_without_colour(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("openapi_consumer.output._is_tty", lambda: True)
        OutputManager(no_color=True).print_table(HEADERS, ROWS)
        assert capsys.readouterr().out == "Operation\tMethod\nlistPets\tGET\n"

    def test_explicit_format_kept(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("openapi_consumer.output._is_tty", lambda: True)
        OutputManager(format=OutputFormat.JSON).print_table(HEADERS, ROWS)
        assert json.loads(capsys.readouterr().out) == [{"Operation": "listPets", "Method": "GET"}]


class TestColourDisabling:
    def test_no_color_env(self, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_dumb_terminal(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_colour_allowed(self, monkeypatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# Data output
# ------------------------------------------------------------------ #


class TestFormatResponse:
    def test_json_mode(self, capsys) -> None:
        _manager(OutputFormat.JSON).format_response({"id": 1, "name": "rex"})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"id": 1, "name": "rex"}
        assert captured.err == ""

    def test_json_mode_reparses_text(self, capsys) -> None:
        _manager(OutputFormat.JSON).format_response('{"a": 1}')
        assert json.loads(capsys.readouterr().out) == {"a": 1}

    def test_json_mode_non_json_text(self, capsys) -> None:
        _manager(OutputFormat.JSON).format_response("hello")
        assert capsys.readouterr().out == "hello\n"

    def test_plain_dict(self, capsys) -> None:
        _manager().format_response({"id": 1, "name": "rex"})
        assert capsys.readouterr().out == "id\t1\nname\trex\n"

    def test_plain_list_of_dicts(self, capsys) -> None:
        _manager().format_response([{"id": 1, "name": "rex"}, {"id": 2, "name": "tom"}])
        assert capsys.readouterr().out == "1\trex\n2\ttom\n"

    def test_none_prints_nothing(self, capsys) -> None:
        _manager().format_response(None)
        assert capsys.readouterr().out == ""


class TestPrintTable:
    def test_json_mode(self, capsys) -> None:
        _manager(OutputFormat.JSON).print_table(["Operation", "Method"], [["listPets", "GET"]])
        assert json.loads(capsys.readouterr().out) == [{"Operation": "listPets", "Method": "GET"}]

    def test_plain_mode(self, capsys) -> None:
        _manager().print_table(["Operation", "Method"], [["listPets", "GET"], ["addPet", "POST"]])
        assert capsys.readouterr().out == "Operation\tMethod\nlistPets\tGET\naddPet\tPOST\n"


# ------------------------------------------------------------------ #
# Diagnostics
# ------------------------------------------------------------------ #


class TestDiagnostics:
    def test_error_goes_to_stderr(self, capsys) -> None:
        _manager().error("boom")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: boom\n"

    def test_warning_not_quieted(self, capsys) -> None:
        _manager(quiet=True).warning("careful")
        assert capsys.readouterr().err == "Warning: careful\n"

    def test_quiet_suppresses_info_and_suggest(self, capsys) -> None:
        manager = _manager(quiet=True)
        manager.info("status")
        manager.suggest("try this")
        assert capsys.readouterr().err == ""

    def test_info_and_suggest(self, capsys) -> None:
        manager = _manager()
        manager.info("200 OK")
        manager.suggest("Run: openapi-consumer operations petstore.json")
        assert capsys.readouterr().err == "200 OK\n→ Run: openapi-consumer operations petstore.json\n"

    def test_debug_only_when_verbose(self, capsys) -> None:
        _manager().debug("hidden")
        assert capsys.readouterr().err == ""
        _manager(verbose=True).debug("shown")
        assert capsys.readouterr().err == "[debug] shown\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazily_created(self) -> None:
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self) -> None:
        manager = _manager()
        set_output(manager)
        assert get_output() is manager
        reset_output()
        assert get_output() is not manager

    def test_module_helpers_delegate(self, capsys) -> None:
        set_output(_manager())
        output_module.info("hello")
        output_module.error("bad")
        output_module.warning("old")
        output_module.format_response({"k": "v"})
        captured = capsys.readouterr()
        assert captured.out == "k\tv\n"
        assert captured.err == "hello\nError: bad\nWarning: old\n"
