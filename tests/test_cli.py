"""Tests for release_gate.cli."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from release_gate.cli import cli


@patch("release_gate.cli.run_release")
def test_help_does_not_run_pipeline(mock_run: MagicMock) -> None:
    """-h prints usage with examples and exits 0."""
    result = CliRunner().invoke(cli, ["-h"])

    assert result.exit_code == 0
    assert "major|minor|patch" in result.output
    assert "release-gate patch" in result.output
    mock_run.assert_not_called()


@patch("release_gate.cli.run_release")
def test_long_help_flag(mock_run: MagicMock) -> None:
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    mock_run.assert_not_called()


@patch("release_gate.cli.run_release")
def test_bump_argument_passed_through(mock_run: MagicMock) -> None:
    mock_run.return_value = 0

    result = CliRunner().invoke(cli, ["minor"])

    assert result.exit_code == 0
    mock_run.assert_called_once_with("minor")


@patch("release_gate.cli.run_release")
def test_no_argument_means_no_bump(mock_run: MagicMock) -> None:
    mock_run.return_value = 0
    CliRunner().invoke(cli, [])
    mock_run.assert_called_once_with(None)


@patch("release_gate.cli.run_release")
def test_failure_exit_code(mock_run: MagicMock) -> None:
    mock_run.return_value = 1
    result = CliRunner().invoke(cli, ["patch"])
    assert result.exit_code == 1


@patch("release_gate.cli.run_release")
def test_unknown_bump_is_not_rejected_by_cli(mock_run: MagicMock) -> None:
    """Validation of the bump type belongs to the pipeline (it falls back to patch)."""
    mock_run.return_value = 0
    result = CliRunner().invoke(cli, ["huge"])
    assert result.exit_code == 0
    mock_run.assert_called_once_with("huge")


def test_version_flag() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output
