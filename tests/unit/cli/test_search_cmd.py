"""Tests for docrag search command."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from docrag.cli.main import app

runner = CliRunner()


def _ingest(dir_: Path, name: str, content: str) -> None:
    path = dir_ / name
    path.write_text(content, encoding="utf-8")
    result = runner.invoke(app, ["ingest", str(path), "--yes"])
    assert result.exit_code == 0, result.output


def test_search_without_documents_exits_1(cli_env) -> None:
    result = runner.invoke(app, ["search", "anything"])

    assert result.exit_code == 1
    assert "No documents" in result.output


def test_search_shows_matching_chunk(cli_env, stub_client) -> None:
    _ingest(cli_env, "notes.txt", "Sentence one. Sentence two. Sentence three.")

    result = runner.invoke(app, ["search", "Sentence one"])

    assert result.exit_code == 0, result.output
    assert "notes.txt" in result.output
    assert "Sentence one." in result.output
    assert stub_client.calls[-1][1] == {"texts": ["Sentence one"]}


def test_search_no_metadata_hides_file_name(cli_env) -> None:
    _ingest(cli_env, "notes.txt", "Sentence one. Sentence two. Sentence three.")

    result = runner.invoke(app, ["search", "Sentence one", "--no-metadata"])

    assert result.exit_code == 0, result.output
    assert "notes.txt" not in result.output


def test_search_nothing_above_threshold(cli_env) -> None:
    _ingest(cli_env, "notes.txt", "Sentence one. Sentence two. Sentence three.")

    result = runner.invoke(app, ["search", "zzz", "--threshold", "1.0"])

    assert result.exit_code == 0
    assert "No chunks scored" in result.output


def test_search_dimension_mismatch_exits_1(cli_env, stub_client) -> None:
    _ingest(cli_env, "notes.txt", "Sentence one. Sentence two. Sentence three.")
    stub_client.vector_for = lambda text: [1.0, 0.0]

    result = runner.invoke(app, ["search", "Sentence one"])

    assert result.exit_code == 1
    assert "model mismatch" in result.output


def test_search_api_error_exits_1(cli_env, stub_client) -> None:
    _ingest(cli_env, "notes.txt", "Sentence one. Sentence two. Sentence three.")
    stub_client.fail_on_call = len(stub_client.calls) + 1

    result = runner.invoke(app, ["search", "Sentence one"])

    assert result.exit_code == 1
    assert "HTTP 500" in result.output


def test_search_empty_query_exits_1(cli_env) -> None:
    result = runner.invoke(app, ["search", "   "])
    assert result.exit_code == 1


def test_search_rejects_top_k_zero(cli_env) -> None:
    result = runner.invoke(app, ["search", "q", "--top-k", "0"])
    assert result.exit_code == 2


def test_search_out_of_range_config_exits_1(cli_env) -> None:
    (cli_env / "docrag.yaml").write_text("search:\n  top_k: 0\n", encoding="utf-8")

    result = runner.invoke(app, ["search", "q"])

    assert result.exit_code == 1
    assert "Config error" in result.output
    assert "search.top_k" in result.output
