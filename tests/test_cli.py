"""
Tests for the command-line interface.
"""

import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from slotresolver import __version__
from slotresolver.cli.app import app

PROJECT_ROOT = Path(__file__).resolve().parent.parent

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    shutil.copy(PROJECT_ROOT / "roster.example.yaml", tmp_path / "roster.yaml")
    path = tmp_path / "config.yaml"
    path.write_text("data_file: roster.yaml\ntimezone: UTC\n", encoding="utf-8")
    return path


def test_version():
    """The version command prints the package version."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_resolve_json(config_file):
    """A team on-day is resolved from the rotation."""
    result = runner.invoke(
        app, ["resolve", "p1", "--config", str(config_file), "--date", "2024-01-10", "--days", "1", "--json"]
    )

    assert result.exit_code == 0
    assert '"2024-01-10"' in result.output
    assert '"status": "full"' in result.output
    assert '"source": "rotation"' in result.output


def test_resolve_table(config_file):
    """The table view lists one row per day."""
    result = runner.invoke(
        app, ["resolve", "p1", "-c", str(config_file), "-d", "2024-01-08", "-n", "3"]
    )

    assert result.exit_code == 0
    assert "Dana" in result.output
    assert "2024-01-08" in result.output


def test_resolve_unknown_person(config_file):
    """An unknown person id exits with an error."""
    result = runner.invoke(app, ["resolve", "nobody", "--config", str(config_file), "--date", "2024-01-10"])

    assert result.exit_code == 1
    assert "Unknown person id" in result.output


def test_resolve_bad_date(config_file):
    """A malformed date exits with an error."""
    result = runner.invoke(app, ["resolve", "p1", "--config", str(config_file), "--date", "10/01/2024"])

    assert result.exit_code == 1


def test_headcount(config_file):
    """Only the person on a team on-day is present."""
    result = runner.invoke(
        app, ["headcount", "--config", str(config_file), "--date", "2024-01-10", "--at", "09:00"]
    )

    assert result.exit_code == 0
    assert "1 present" in result.output
    assert "2 away" in result.output


def test_headcount_invalid_time(config_file):
    """A malformed --at time exits with an error instead of counting at midnight."""
    result = runner.invoke(
        app, ["headcount", "--config", str(config_file), "--date", "2024-01-10", "--at", "9am"]
    )

    assert result.exit_code == 1
    assert "Invalid time of day" in result.output


def test_list_people(config_file):
    """All rostered people are listed."""
    result = runner.invoke(app, ["list-people", "--config", str(config_file)])

    assert result.exit_code == 0
    for name in ("Dana", "Noam", "Yael"):
        assert name in result.output


def test_missing_config(tmp_path):
    """A missing config file exits with an error."""
    result = runner.invoke(app, ["list-people", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
