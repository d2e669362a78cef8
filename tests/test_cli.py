"""
End-to-end tests for the ``path`` command (pathfinder/cli.py).
"""

import json
import os
import sys

import pytest

from pathfinder import __version__, render
from pathfinder.cli import build_parser, filter_records, main
from pathfinder.sources import DirectoryRecord

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="Uses POSIX permissions")


def add_tool(directory, name, data=b"#!/bin/sh\necho hi\n"):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(data)
    path.chmod(0o755)
    return path


@pytest.fixture
def fake_path(tmp_path, monkeypatch):
    """PATH of three directories: a, b, and a again."""
    a, b = tmp_path / "a", tmp_path / "b"
    add_tool(a, "foo", b"#!/usr/bin/env python3\n")
    add_tool(b, "foo", b"#!/bin/bash\n")
    add_tool(b, "bar")

    monkeypatch.setenv("PATH", os.pathsep.join([str(a), str(b), str(a)]))
    monkeypatch.setattr("pathfinder.sources.collect_sources", lambda home=None: [])
    monkeypatch.setattr("pathfinder.config.CONFIG_LOCATIONS", [])
    monkeypatch.delenv("PATHFINDER_MAX_WORKERS", raising=False)
    yield a, b
    render.set_color(False)


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert not args.list and not args.shadows and not args.dupes
        assert args.dir is None and args.top is None

    def test_short_flags(self):
        args = build_parser().parse_args(["-l", "-s", "-d", "-v"])
        assert args.list and args.shadows and args.dupes and args.verbose

    def test_top_zero(self):
        assert build_parser().parse_args(["--top", "0"]).top == 0

    @pytest.mark.parametrize("value", ["-1", "three"])
    def test_top_rejects_invalid_counts(self, value, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--top", value])
        assert exc.value.code == 2
        assert "--top" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == f"path {__version__}"


class TestFilterRecords:
    """Tests for display filters."""

    def records(self):
        return [
            DirectoryRecord(1, "/usr/bin", True),
            DirectoryRecord(2, "/usr/local/bin", True),
            DirectoryRecord(3, "/usr/bin", True, is_duplicate=True),
        ]

    def test_dupes(self):
        assert [r.index for r in filter_records(self.records(), dupes=True)] == [3]

    def test_directory(self):
        assert [r.index for r in filter_records(self.records(), directory="/usr/local/bin")] == [2]

    def test_no_filters(self):
        assert len(filter_records(self.records())) == 3


class TestMain:
    """Tests for the command modes."""

    def test_summary_json(self, fake_path, capsys):
        a, b = fake_path
        assert main(["--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        entries = data["entries"]
        assert [e["directory"] for e in entries] == [str(a), str(b), str(a)]
        assert [e["bin_count"] for e in entries] == [1, 2, 1]
        assert entries[2]["is_duplicate"] is True
        assert entries[0]["source"] == "unknown"

    def test_dupes_json(self, fake_path, capsys):
        main(["--dupes", "--json"])
        entries = json.loads(capsys.readouterr().out)["entries"]
        assert [e["index"] for e in entries] == [3]

    def test_summary_text(self, fake_path, capsys):
        assert main(["--no-color"]) == 0
        out = capsys.readouterr().out
        assert "PATH 3 entries" in out
        assert "4 executables, 1 duplicates" in out

    def test_list_json(self, fake_path, capsys):
        a, b = fake_path
        assert main(["--list", "--json"]) == 0
        directories = json.loads(capsys.readouterr().out)["directories"]
        assert len(directories) == 3

        first = directories[0]["executables"]
        assert first[0]["name"] == "foo"
        assert first[0]["classification"] == {"type": "script", "language": "python"}
        assert first[0]["shadowed"] is False

        second = {e["name"]: e for e in directories[1]["executables"]}
        assert second["foo"]["shadowed_by"] == str(a)
        assert second["foo"]["classification"] == {"type": "script", "language": "bash"}
        assert second["bar"]["shadowed"] is False

        # The duplicated entry shadows its own executables
        assert directories[2]["executables"][0]["shadowed_by"] == str(a)

    def test_shadows_json(self, fake_path, capsys):
        main(["--shadows", "--json"])
        directories = json.loads(capsys.readouterr().out)["directories"]
        names = [(d["index"], e["name"]) for d in directories for e in d["executables"]]
        assert names == [(2, "foo"), (3, "foo")]

    def test_shadows_text(self, fake_path, capsys):
        a, b = fake_path
        assert main(["--shadows", "--no-color"]) == 0
        out = capsys.readouterr().out
        assert "shadowed by" in out
        assert "bar" not in out

    def test_dir_keeps_global_shadowing(self, fake_path, capsys):
        """Test --dir filters display but owners come from the full PATH."""
        a, b = fake_path
        main(["--dir", str(b), "--json"])
        directories = json.loads(capsys.readouterr().out)["directories"]
        assert [d["directory"] for d in directories] == [str(b)]
        foo = [e for e in directories[0]["executables"] if e["name"] == "foo"][0]
        assert foo["shadowed_by"] == str(a)

    def test_list_top(self, fake_path, capsys):
        main(["--list", "--top", "1", "--no-color"])
        assert "... and 1 more" in capsys.readouterr().out

    def test_missing_directory(self, fake_path, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("PATH", str(tmp_path / "nowhere"))
        assert main(["--list", "--no-color"]) == 0
        assert "missing" in capsys.readouterr().out

    def test_bad_config(self, fake_path, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "missing.yml")]) == 2
        assert "Could not load config" in capsys.readouterr().err

    def test_config_with_non_mapping_section(self, fake_path, tmp_path, capsys):
        config_file = tmp_path / "config.yml"
        config_file.write_text("containers: [1, 2]\n")
        assert main(["--config", str(config_file), "--json"]) == 2
        assert "Could not load config" in capsys.readouterr().err

    def test_bad_user_config_falls_back_to_defaults(self, fake_path, tmp_path, monkeypatch, capsys):
        """Test a malformed user config is skipped rather than aborting the run."""
        user_file = tmp_path / "user.yml"
        user_file.write_text("scan: fast\n")
        monkeypatch.setattr("pathfinder.config.CONFIG_LOCATIONS", [str(user_file)])
        assert main(["--json"]) == 0
        assert json.loads(capsys.readouterr().out)["entries"]

    def test_config_file(self, fake_path, tmp_path, capsys):
        config_file = tmp_path / "config.yml"
        config_file.write_text("scan:\n  max_workers: 1\n")
        assert main(["--list", "--json", "--config", str(config_file)]) == 0
        assert json.loads(capsys.readouterr().out)["directories"]
