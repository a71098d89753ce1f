"""Tests for hami.cli — end-to-end command runs via CliRunner.

Each test runs in a temporary working directory with ``HAMI_HOME_DIRECTORY``
pointing at a temporary user home, so nothing touches the real ``~/.hami``.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from hami import __version__
from hami.cli.app import app
from hami.plugins.config_fs import CONFIG_FILE_NAME, USER_CONFIG_FILE_NAME
from hami.plugins.trace_fs import fetch_trace_index

runner = CliRunner()


def invoke(*args: str):
    return runner.invoke(app, list(args))


@pytest.fixture
def initialized(workspace):
    result = invoke("init")
    assert result.exit_code == 0, result.output
    return workspace


def _local_config(workspace):
    return json.loads((workspace["work"] / ".hami" / CONFIG_FILE_NAME).read_text())


# ─── Root ────────────────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = invoke("--version")
        assert result.exit_code == 0
        assert f"hami {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = invoke()
        assert "config" in result.output
        assert "trace" in result.output


# ─── init ────────────────────────────────────────────────────────────────


class TestInit:
    def test_creates_directories_and_trace(self, workspace):
        result = invoke("init")
        assert result.exit_code == 0, result.output
        assert (workspace["work"] / ".hami").is_dir()
        assert (workspace["home"] / ".hami").is_dir()

        [trace] = fetch_trace_index(workspace["work"] / ".hami")
        assert trace["data"] == {"executor": "cli", "command": "init"}

    def test_verbose(self, workspace):
        result = invoke("--verbose", "init")
        assert result.exit_code == 0, result.output
        assert ".hami directory created at" in result.output

    def test_rerun_is_harmless(self, initialized):
        assert invoke("init").exit_code == 0
        assert len(fetch_trace_index(initialized["work"] / ".hami")) == 2


# ─── config ──────────────────────────────────────────────────────────────


class TestConfigCLI:
    def test_requires_init(self, workspace):
        result = invoke("config", "get", "color")
        assert result.exit_code == 1
        assert "hami_directory does not exist" in result.output

    def test_set_get_remove(self, initialized):
        assert invoke("config", "set", "color", "blue").exit_code == 0
        assert _local_config(initialized) == {"color": "blue"}

        result = invoke("config", "get", "color")
        assert result.exit_code == 0
        assert "Configuration value: blue" in result.output

        assert invoke("config", "remove", "color").exit_code == 0
        assert _local_config(initialized) == {}

    def test_values_are_parsed_as_json(self, initialized):
        invoke("config", "set", "size", "3")
        invoke("config", "set", "tags", '["a", "b"]')
        assert _local_config(initialized) == {"size": 3, "tags": ["a", "b"]}

    def test_global_scope(self, initialized):
        assert invoke("config", "set", "-g", "editor", "vim").exit_code == 0
        global_config = initialized["home"] / ".hami" / USER_CONFIG_FILE_NAME
        assert json.loads(global_config.read_text()) == {"editor": "vim"}

        # local reads fall back to global
        assert "Configuration value: vim" in invoke("config", "get", "editor").output

    def test_list(self, initialized):
        invoke("config", "set", "color", "blue")
        invoke("config", "set", "--global", "editor", "vim")
        result = invoke("config", "list")
        assert result.exit_code == 0
        for text in ("color", "blue", "editor", "vim"):
            assert text in result.output

    def test_list_empty_verbose(self, initialized):
        result = invoke("--verbose", "config", "list")
        assert "No configuration entries found." in result.output

    def test_get_missing_key_verbose(self, initialized):
        result = invoke("--verbose", "config", "get", "ghost")
        assert result.exit_code == 0
        assert "Configuration key not found." in result.output

    def test_set_records_trace(self, initialized):
        invoke("config", "set", "color", "blue")
        trace = fetch_trace_index(initialized["work"] / ".hami")[-1]
        assert trace["data"] == {
            "executor": "cli",
            "command": "config",
            "operation": "set",
            "target": "local",
            "key": "color",
            "value": "blue",
        }


# ─── flow ────────────────────────────────────────────────────────────────


COPY_CONFIG = json.dumps({"source_pattern": "*.txt", "target_directory": "out"})


class TestFlowCLI:
    def test_init_stores_definition(self, initialized):
        result = invoke("flow", "init", "copy", "core-fs:copy-flow", "--config", COPY_CONFIG)
        assert result.exit_code == 0, result.output
        assert _local_config(initialized) == {
            "flow:copy": {
                "kind": "core-fs:copy-flow",
                "config": {"source_pattern": "*.txt", "target_directory": "out"},
            }
        }

    def test_init_rejects_bad_json(self, initialized):
        result = invoke("flow", "init", "copy", "core-fs:copy-flow", "--config", "{nope")
        assert result.exit_code == 1
        assert "--config is not valid JSON" in result.output

    def test_run(self, initialized):
        (initialized["work"] / "notes.txt").write_text("hello")
        invoke("flow", "init", "copy", "core-fs:copy-flow", "--config", COPY_CONFIG)

        result = invoke("flow", "run", "copy")

        assert result.exit_code == 0, result.output
        assert (initialized["work"] / "out" / "notes.txt").read_text() == "hello"
        trace = fetch_trace_index(initialized["work"] / ".hami")[-1]
        assert trace["data"]["operation"] == "run"
        assert trace["data"]["name"] == "flow:copy"

    def test_run_payload_overrides_inputs(self, initialized):
        (initialized["work"] / "notes.txt").write_text("hello")
        invoke("flow", "init", "copy", "core-fs:copy-flow", "--config", COPY_CONFIG)

        result = invoke("flow", "run", "copy", "--payload", '{"target_directory": "elsewhere"}')

        assert result.exit_code == 0, result.output
        assert (initialized["work"] / "elsewhere" / "notes.txt").is_file()
        assert not (initialized["work"] / "out").exists()

    def test_run_unknown_flow(self, initialized):
        result = invoke("flow", "run", "ghost")
        assert result.exit_code == 1
        assert "No node config found" in result.output

    def test_run_unknown_kind(self, initialized):
        invoke("flow", "init", "bad", "nope:nothing")
        result = invoke("flow", "run", "bad")
        assert result.exit_code == 1
        assert "No node class registered for kind: nope:nothing" in result.output

    def test_run_invalid_stored_config(self, initialized):
        invoke("flow", "init", "copy", "core-fs:copy-flow", "--config", '{"source_pattern": "*.txt"}')
        result = invoke("flow", "run", "copy")
        assert result.exit_code == 1
        assert "target_directory is required" in result.output

    def test_list_and_remove(self, initialized):
        invoke("flow", "init", "copy", "core-fs:copy-flow", "--config", COPY_CONFIG)
        invoke("config", "set", "color", "blue")

        listed = invoke("flow", "list")
        assert listed.exit_code == 0
        assert "copy" in listed.output
        assert "color" not in listed.output

        assert invoke("flow", "remove", "copy").exit_code == 0
        assert _local_config(initialized) == {"color": "blue"}
        assert "No flows configured." in invoke("--verbose", "flow", "list").output

    def test_global_flow(self, initialized):
        invoke("flow", "init", "-g", "copy", "core-fs:copy-flow", "--config", COPY_CONFIG)
        global_config = initialized["home"] / ".hami" / USER_CONFIG_FILE_NAME
        assert "flow:copy" in json.loads(global_config.read_text())


# ─── trace ───────────────────────────────────────────────────────────────


class TestTraceCLI:
    def test_list(self, initialized):
        result = invoke("trace", "list")
        assert result.exit_code == 0
        assert "(index)" in result.output

    def test_show(self, initialized):
        [trace] = fetch_trace_index(initialized["work"] / ".hami")
        result = invoke("trace", "show", trace["id"])
        assert result.exit_code == 0, result.output
        assert '"command": "init"' in result.output

    def test_show_unknown(self, initialized):
        result = invoke("trace", "show", "nope")
        assert result.exit_code == 1
        assert "Trace nope not found" in result.output

    def test_grep(self, initialized):
        invoke("config", "set", "color", "blue")
        result = invoke("trace", "grep", '"operation":"set"')
        assert result.exit_code == 0
        assert "(index)" in result.output

    def test_grep_no_match_verbose(self, initialized):
        result = invoke("--verbose", "trace", "grep", "does-not-appear")
        assert result.exit_code == 0
        assert "No traces found matching the search query." in result.output
