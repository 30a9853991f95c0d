"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from poligap.cli import create_parser, load_candidate, main

POLICY_TEXT = (
    "This security procedure covers compliance and regulation of information handling. "
    "All staff must follow it. "
) * 3


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "policy.txt"
    path.write_text(POLICY_TEXT)
    return path


@pytest.fixture
def short_file(tmp_path):
    path = tmp_path / "note.txt"
    path.write_text("see attached")
    return path


def test_parser_validate_arguments():
    """validate takes one or more paths and --json."""
    args = create_parser().parse_args(["validate", "a.pdf", "b.txt", "--json"])

    assert args.command == "validate"
    assert [str(p) for p in args.paths] == ["a.pdf", "b.txt"]
    assert args.json is True


def test_parser_serve_defaults():
    """serve binds to localhost:8000 unless told otherwise."""
    args = create_parser().parse_args(["serve"])

    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_no_command_prints_help(capsys):
    """Running without a command prints help and fails."""
    assert main([]) == 1
    assert "validate" in capsys.readouterr().out


@patch("poligap.cli.detect_mime_type", return_value="text/plain")
def test_load_candidate_sniffs_type(mock_detect, policy_file):
    """The MIME type comes from the file header."""
    candidate = load_candidate(policy_file)

    assert candidate.mime_type == "text/plain"
    assert candidate.size_bytes == len(POLICY_TEXT)
    assert candidate.name == "policy.txt"
    assert mock_detect.call_args.args[0] == POLICY_TEXT.encode()[:2048]


@patch("poligap.cli.detect_mime_type", return_value="text/plain")
def test_validate_accepted(mock_detect, policy_file, capsys):
    """An accepted file exits 0 with a readable summary."""
    exit_code = main(["validate", str(policy_file)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert f"ACCEPTED: {policy_file}" in out
    assert "Keyword score: 14" in out
    assert "Confidence: 100%" in out


@patch("poligap.cli.detect_mime_type", return_value="text/plain")
def test_validate_rejected(mock_detect, short_file, capsys):
    """Any rejected file makes the exit code 1."""
    exit_code = main(["validate", str(short_file)])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert f"REJECTED: {short_file}" in out
    assert "too short" in out


@patch("poligap.cli.detect_mime_type", return_value="text/plain")
def test_validate_json_output(mock_detect, policy_file, short_file, capsys):
    """--json prints one camelCase verdict per line."""
    exit_code = main(["validate", str(policy_file), str(short_file), "--json"])

    lines = capsys.readouterr().out.strip().splitlines()
    first, second = (json.loads(line) for line in lines)
    assert exit_code == 1
    assert first["file"] == str(policy_file)
    assert first["isValid"] is True
    assert second["code"] == "DocumentTooShort"
    assert second["details"]["contentLength"] == len("see attached")


@patch("poligap.cli.detect_mime_type", return_value="application/pdf")
def test_validate_pdf(mock_detect, tmp_path, make_pdf, capsys):
    """PDFs on disk go through the PDF extractor."""
    path = tmp_path / "policy.pdf"
    path.write_bytes(make_pdf([POLICY_TEXT]))

    assert main(["validate", str(path)]) == 0


@pytest.mark.parametrize("sniffed", ["text/csv", "text/x-c", "application/zip"])
def test_load_candidate_falls_back_to_extension(tmp_path, sniffed):
    """A sniffed type outside the allow-list gives way to a known extension."""
    path = tmp_path / "policy.txt"
    path.write_text(POLICY_TEXT)

    with patch("poligap.cli.detect_mime_type", return_value=sniffed):
        candidate = load_candidate(path)

    assert candidate.mime_type == "text/plain"


@patch("poligap.cli.detect_mime_type", return_value="application/zip")
def test_validate_docx_sniffed_as_zip(mock_detect, tmp_path, capsys):
    """A .docx reported as a zip archive still reaches the classifier."""
    path = tmp_path / "policy.docx"
    path.write_text(POLICY_TEXT)

    assert main(["validate", str(path)]) == 0
    assert "ACCEPTED" in capsys.readouterr().out


def test_validate_unknown_type(tmp_path, capsys):
    """Types outside the allow-list are rejected at the gate."""
    path = tmp_path / "data.bin"
    path.write_bytes(b"\x00\x01")

    with patch("poligap.cli.detect_mime_type", return_value="application/octet-stream"):
        exit_code = main(["validate", str(path)])

    assert exit_code == 1
    assert "Invalid file type" in capsys.readouterr().out


def test_validate_missing_file(tmp_path, capsys):
    """A path that does not exist is an error."""
    exit_code = main(["validate", str(tmp_path / "nope.pdf")])

    assert exit_code == 1
    assert "File not found" in capsys.readouterr().err


def test_invalid_configuration(monkeypatch, policy_file, capsys):
    """Bad settings are reported instead of raising."""
    monkeypatch.setenv("LOG_LEVEL", "LOUD")

    assert main(["validate", str(policy_file)]) == 1
    assert "Configuration error" in capsys.readouterr().err


@patch("uvicorn.run")
def test_serve_runs_uvicorn(mock_run):
    """serve hands the app to uvicorn."""
    assert main(["serve", "--port", "9000"]) == 0

    mock_run.assert_called_once_with("poligap.main:app", host="127.0.0.1", port=9000)
