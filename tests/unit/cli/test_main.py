"""Tests for the docrag entry point."""

from __future__ import annotations

import logging

from typer.testing import CliRunner

from docrag.cli.main import app

runner = CliRunner()


def test_version_flag_exits_zero() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "docrag" in result.output


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.startswith("docrag ")


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("init", "ingest", "search", "status", "remove"):
        assert command in result.output


def test_verbose_flag_accepted(cli_env) -> None:
    result = runner.invoke(app, ["--verbose", "status"])
    assert result.exit_code == 0, result.output


def test_log_level_from_env(cli_env, monkeypatch) -> None:
    monkeypatch.setenv("DOCRAG_LOG_LEVEL", "info")
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.INFO


def test_unknown_log_level_falls_back_to_warning(cli_env, monkeypatch) -> None:
    monkeypatch.setenv("DOCRAG_LOG_LEVEL", "LOUD")
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.WARNING
