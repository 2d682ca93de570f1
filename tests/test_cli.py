"""Tests for the command-line interface."""

import json
import os
from unittest.mock import patch

import pytest

from elementor_abilities.cli import create_parser, main


@pytest.fixture
def seed_file(tmp_path, store):
    path = tmp_path / "site.json"
    path.write_text(json.dumps(store.snapshot()), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test from an empty directory with no config file."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    for name in list(os.environ):
        if name.startswith("ELEMENTOR_ABILITIES_"):
            monkeypatch.delenv(name)
    return workdir


class TestParser:
    def test_global_options(self):
        args = create_parser().parse_args(
            ["--store", "json", "--seed-file", "s.json", "-v", "run", "elementor/get-data"]
        )
        assert args.store == "json"
        assert args.verbose is True
        assert args.command == "run"
        assert args.name == "elementor/get-data"

    def test_mcp_transport_default(self):
        args = create_parser().parse_args(["mcp", "serve"])
        assert args.transport == "stdio"

    def test_input_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["run", "x", "--input", "{}", "--input-file", "f"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestAbilitiesCommand:
    def test_list(self, capsys):
        assert main(["abilities", "list"]) == 0
        out = capsys.readouterr().out
        assert "elementor/patch-data" in out
        assert "[ro]" in out

    def test_list_json(self, capsys):
        assert main(["abilities", "list", "--json"]) == 0
        described = json.loads(capsys.readouterr().out)
        assert len(described) == 7

    def test_show(self, capsys):
        assert main(["abilities", "show", "elementor/clear-cache"]) == 0
        assert json.loads(capsys.readouterr().out)["name"] == "elementor/clear-cache"

    def test_show_unknown(self, capsys):
        assert main(["abilities", "show", "elementor/nope"]) == 1


class TestRunCommand:
    def test_run_success(self, seed_file, capsys):
        code = main(["--seed-file", str(seed_file), "run", "elementor/get-data", "--input", '{"id": 12}'])
        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result["title"] == "Home"

    def test_run_failure_exit_code(self, seed_file, capsys):
        code = main(["--seed-file", str(seed_file), "run", "elementor/get-data", "--input", "{}"])
        assert code == 1
        assert json.loads(capsys.readouterr().out)["success"] is False

    def test_json_store_persists(self, seed_file, tmp_path, capsys):
        patch_input = tmp_path / "patch.json"
        patch_input.write_text(
            json.dumps({"id": 12, "find": "Buy now", "replace": "Get it"}), encoding="utf-8"
        )
        code = main(
            [
                "--store",
                "json",
                "--seed-file",
                str(seed_file),
                "run",
                "elementor/patch-data",
                "--input-file",
                str(patch_input),
            ]
        )
        assert code == 0
        assert "Get it" in seed_file.read_text(encoding="utf-8")

    def test_bad_input_json(self, capsys):
        assert main(["run", "elementor/get-data", "--input", "{nope"]) == 1
        assert "cannot read input" in capsys.readouterr().err

    def test_missing_seed_file(self, tmp_path, capsys):
        code = main(["--seed-file", str(tmp_path / "missing.json"), "run", "elementor/list-templates"])
        assert code == 1
        assert "Cannot read seed file" in capsys.readouterr().err


class TestConfigCommand:
    def test_show_defaults(self, capsys):
        assert main(["config", "show"]) == 0
        config = json.loads(capsys.readouterr().out)
        assert config["store"]["backend"] == "memory"

    def test_path_without_config(self, capsys):
        assert main(["config", "path"]) == 1

    def test_path_with_config(self, isolated_cwd, capsys):
        (isolated_cwd / ".elementor-abilities.toml").write_text('[store]\nbackend = "memory"\n')
        assert main(["config", "path"]) == 0
        assert capsys.readouterr().out.strip().endswith(".elementor-abilities.toml")


class TestMisc:
    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert capsys.readouterr().out.startswith("elementor-abilities ")

    def test_mcp_without_action(self, capsys):
        pytest.importorskip("mcp")
        assert main(["mcp"]) == 1

    def test_mcp_reports_missing_extra(self, capsys):
        with patch("elementor_abilities.mcp.MCP_AVAILABLE", False):
            assert main(["mcp", "serve"]) == 1
        assert "pip install elementor-abilities[mcp]" in capsys.readouterr().err
