# tests/test_cli.py

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from repomirror.errors import ConfigError
from repomirror.main import main
from repomirror.parser import build_config, find_config_file, get_sync_arguments, parse_config
from repomirror.sync.target import SyncTarget

RAW_CONFIG = {
    "cleanRepoOnRun": False,
    "onlyRunOnce": False,
    "syncIntervalSeconds": 300,
    "syncRepositories": [
        {"source": "https://example.com/a.git", "target": "git@example.org:a.git"},
    ],
}


@patch("sys.argv", ["prog", "--config", "test_config"])
def test_minimal_required_arguments():
    args = get_sync_arguments()
    assert args.get("config_file") == "test_config"
    assert args.get("once") == False
    assert args.get("clean") == False
    assert args.get("interval") == None
    assert args.get("repos_dir") == None
    assert args.get("timeout") == None
    assert args.get("verbose") == False


def test_all_arguments():
    args = get_sync_arguments(["--config", "c.yaml", "--once", "--clean", "--interval", "5",
                               "--repos-dir", "/tmp/mirrors", "--timeout", "90", "-v"])
    assert args == {
        "config_file": "c.yaml",
        "once": True,
        "clean": True,
        "interval": 5.0,
        "repos_dir": "/tmp/mirrors",
        "timeout": 90.0,
        "verbose": True,
    }


def test_config_file_is_searched(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert find_config_file() == "config.yaml"

    (tmp_path / "config.json").write_text("{}")
    assert Path(find_config_file()).name == "config.json"


def test_parse_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(RAW_CONFIG))
    assert parse_config(path) == RAW_CONFIG


def test_parse_yaml_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "onlyRunOnce: true\n"
        "syncIntervalSeconds: 10\n"
        "syncRepositories:\n"
        "  - source: https://example.com/a.git\n"
        "    target: https://example.org/a.git\n"
    )
    raw = parse_config(path)
    assert raw["onlyRunOnce"] is True
    assert raw["syncRepositories"][0]["target"] == "https://example.org/a.git"


def test_parse_missing_or_broken_config(tmp_path):
    assert parse_config(tmp_path / "absent.yaml") is None

    broken = tmp_path / "broken.yaml"
    broken.write_text("syncRepositories: [unclosed\n")
    assert parse_config(broken) is None

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just a string\n")
    assert parse_config(scalar) is None


def test_build_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = build_config(RAW_CONFIG)

    assert config.clean_repo_on_run is False
    assert config.only_run_once is False
    assert config.sync_interval_seconds == 300
    assert config.sync_repositories == (SyncTarget("https://example.com/a.git", "git@example.org:a.git"),)
    assert config.repos_dir == Path.cwd() / "repos"
    assert config.command_timeout_seconds is None


def test_arguments_override_config(tmp_path):
    args = get_sync_arguments(["--once", "--clean", "--interval", "5", "--timeout", "60",
                               "--repos-dir", str(tmp_path / "mirrors")])
    config = build_config(dict(RAW_CONFIG, reposDir="ignored"), args)

    assert config.only_run_once is True
    assert config.clean_repo_on_run is True
    assert config.sync_interval_seconds == 5
    assert config.command_timeout_seconds == 60
    assert config.repos_dir == tmp_path / "mirrors"


def test_interval_is_optional_for_single_runs():
    config = build_config({"onlyRunOnce": True, "syncRepositories": []})
    assert config.only_run_once is True
    assert config.sync_repositories == ()


@pytest.mark.parametrize("raw", [
    {},
    {"syncIntervalSeconds": 10, "syncRepositories": {"source": "a", "target": "b"}},
    {"syncIntervalSeconds": 10, "syncRepositories": [{"source": "a"}]},
    {"syncIntervalSeconds": 10, "syncRepositories": [{"target": "b"}]},
    {"syncIntervalSeconds": 10, "syncRepositories": ["a -> b"]},
    {"syncRepositories": []},
    {"syncIntervalSeconds": 0, "syncRepositories": []},
    {"syncIntervalSeconds": "often", "syncRepositories": []},
    {"syncIntervalSeconds": 10, "cleanRepoOnRun": "yes", "syncRepositories": []},
    {"syncIntervalSeconds": 10, "commandTimeoutSeconds": -1, "syncRepositories": []},
    {"syncIntervalSeconds": float("nan"), "syncRepositories": []},
    {"syncIntervalSeconds": float("inf"), "syncRepositories": []},
    {"syncIntervalSeconds": 10, "commandTimeoutSeconds": float("nan"), "syncRepositories": []},
])
def test_invalid_config(raw):
    with pytest.raises(ConfigError):
        build_config(raw)


@pytest.mark.parametrize("argv", [
    ["--interval", "nan"],
    ["--interval", "inf"],
    ["--timeout", "nan"],
])
def test_invalid_numeric_arguments(argv):
    with pytest.raises(ConfigError):
        build_config(RAW_CONFIG, get_sync_arguments(argv))


def test_yaml_nan_interval_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("syncIntervalSeconds: .nan\nsyncRepositories: []\n")
    with pytest.raises(ConfigError):
        build_config(parse_config(path))


@pytest.mark.parametrize("argv", [["--clean"], ["--once"]])
def test_switches_do_not_hide_invalid_config_values(argv):
    raw = dict(RAW_CONFIG, cleanRepoOnRun="yes", onlyRunOnce="no")
    with pytest.raises(ConfigError):
        build_config(raw, get_sync_arguments(argv))


def test_main_runs_orchestrator(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(dict(RAW_CONFIG, reposDir=str(tmp_path / "repos"))))

    with patch("repomirror.utils.shutil.which", return_value="/usr/bin/git"), \
            patch("repomirror.main.SyncOrchestrator") as orchestrator:
        orchestrator.return_value.run = AsyncMock(return_value=True)
        assert main(["--config", str(path), "--once"]) == 0

    config = orchestrator.call_args.args[0]
    assert config.only_run_once is True
    assert config.repos_dir == tmp_path / "repos"


def test_main_reports_failed_targets(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(RAW_CONFIG))

    with patch("repomirror.utils.shutil.which", return_value="/usr/bin/git"), \
            patch("repomirror.main.SyncOrchestrator") as orchestrator:
        orchestrator.return_value.run = AsyncMock(return_value=False)
        assert main(["--config", str(path)]) == 1


def test_main_without_git(tmp_path):
    with patch("repomirror.utils.shutil.which", return_value=None), \
            patch("repomirror.main.SyncOrchestrator") as orchestrator:
        assert main(["--config", str(tmp_path / "config.json")]) == 1
    orchestrator.assert_not_called()


def test_main_with_invalid_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"syncRepositories": []}))

    with patch("repomirror.utils.shutil.which", return_value="/usr/bin/git"), \
            patch("repomirror.main.SyncOrchestrator") as orchestrator:
        assert main(["--config", str(path)]) == 1
    orchestrator.assert_not_called()
