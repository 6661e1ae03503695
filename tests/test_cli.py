"""
Tests for the command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from docsync.cli import main, parse_value
from docsync.config import Config


@pytest.fixture
def config_file(tmp_path):
    """A config file for a local user."""
    path = tmp_path / "config.yaml"
    Config(storage_path=tmp_path / "docsync", uid="u1", display_name="Ada").save(path)
    return path


@pytest.fixture
def run(config_file):
    runner = CliRunner()

    def _run(*args, **kwargs):
        return runner.invoke(main, ["--config", str(config_file), *args], **kwargs)

    return _run


class TestCli:
    """Tests for CLI commands against the local backend."""

    def test_parse_value(self):
        """Test values are parsed as JSON when they can be."""
        assert parse_value("true") is True
        assert parse_value("42") == 42
        assert parse_value("dark") == "dark"

    def test_whoami(self, run):
        result = run("whoami")

        assert result.exit_code == 0
        assert "u1" in result.output

    def test_settings_set_and_get(self, run):
        """Test a setting written from the CLI reads back."""
        assert run("settings", "set", "syncHistory", "false").exit_code == 0

        result = run("settings", "get", "syncHistory")

        assert result.exit_code == 0
        assert result.output.strip() == "false"

    def test_sync_push_and_pull(self, run, tmp_path):
        """Test pushing and pulling a sync document."""
        source = tmp_path / "collections.json"
        source.write_text(json.dumps([{"name": "My Collection", "requests": []}]))

        assert run("sync", "push", "collections", str(source)).exit_code == 0
        result = run("sync", "pull", "collections")

        assert result.exit_code == 0
        assert json.loads(result.output) == [{"name": "My Collection", "requests": []}]

    def test_history_add_and_clear(self, run, tmp_path):
        """Test adding then clearing history."""
        entry = tmp_path / "entry.json"
        entry.write_text(json.dumps({"method": "GET", "url": "https://x.test", "star": False}))

        assert run("history", "add", str(entry)).exit_code == 0
        assert "x.test" in run("history", "list").output

        assert run("history", "clear", "--yes").exit_code == 0
        assert "No history entries found" in run("history", "list").output

    def test_rejects_without_identity(self, tmp_path):
        """Test commands fail cleanly when nobody is signed in."""
        path = tmp_path / "anon.yaml"
        Config(storage_path=tmp_path / "anon").save(path)

        result = CliRunner().invoke(main, ["--config", str(path), "feeds", "post", "hello"])

        assert result.exit_code == 1
        assert "No user is signed in" in result.output

    def test_history_add_keeps_unusual_values(self, run, tmp_path):
        """Test an entry with client-specific value types is added and listed."""
        entry = tmp_path / "entry.json"
        entry.write_text(json.dumps({
            "url": "https://odd.test",
            "status": "200",
            "duration": "708",
            "headers": {"a": "b"},
            "star": None,
            "date": 20200829,
        }))

        result = run("history", "add", str(entry))

        assert result.exit_code == 0
        assert result.exception is None
        assert "odd.test" in run("history", "list").output

    def test_history_add_rejects_non_object(self, run, tmp_path):
        """Test a JSON array is reported as an error, not a crash."""
        entry = tmp_path / "entry.json"
        entry.write_text(json.dumps(["https://x.test"]))

        result = run("history", "add", str(entry))

        assert result.exit_code == 1
        assert "Traceback" not in result.output
        assert "must be a mapping" in result.output
