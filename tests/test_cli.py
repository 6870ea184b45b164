"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from learnmap import cli
from learnmap.cli import _build_parser, main
from learnmap.models import Project


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "list"])
    assert args.verbose is True
    assert args.command == "list"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["list", "--verbose"])
    assert args.verbose is True
    assert args.command == "list"


def test_cli_analyze_requires_exactly_one_target() -> None:
    parser = _build_parser()

    args = parser.parse_args(["analyze", "Docs", "--url", "https://example.com"])
    assert args.name == "Docs"
    assert args.url == "https://example.com"
    assert args.repo is None

    with pytest.raises(SystemExit):
        parser.parse_args(["analyze", "Docs"])
    with pytest.raises(SystemExit):
        parser.parse_args(["analyze", "Docs", "--url", "https://a", "--repo", "https://b"])


def test_cli_loader_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["loader", "--endpoint", "https://maps.example.com/lookup", "--key", "learn_abc", "-o", "p.js"]
    )
    assert args.endpoint == "https://maps.example.com/lookup"
    assert args.key == "learn_abc"
    assert args.output == Path("p.js")


class _StubOrchestrator:
    instances: list["_StubOrchestrator"] = []

    def __init__(self, *, config, store) -> None:
        self.config = config
        self.store = store
        self.created: list[dict[str, object]] = []
        _StubOrchestrator.instances.append(self)

    def create_project(self, project_name, scrape_url=None, repo_url=None) -> Project:
        self.created.append(
            {"project_name": project_name, "scrape_url": scrape_url, "repo_url": repo_url}
        )
        project_id = self.store.create_project(
            project_name,
            "learn_" + "a" * 32,
            {"main-header": "Site header"},
            scrape_url=scrape_url,
            repo_url=repo_url,
        )
        return self.store.get_project_by_id(project_id)

    def build_plugin(self, key):
        return "/* plugin */" if self.store.get_project_by_key(key) else None

    def build_loader(self, endpoint, key=None):
        return f"/* loader {endpoint} {key} */"


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LEARNMAP_CONFIG", raising=False)
    monkeypatch.setattr(cli, "Orchestrator", _StubOrchestrator)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    _StubOrchestrator.instances.clear()
    return tmp_path


def test_analyze_list_plugin_and_delete(workspace: Path, capsys) -> None:
    main(["analyze", "Docs Site", "--url", "https://example.com"])
    output = capsys.readouterr().out
    assert "Project 1 created: Docs Site" in output
    assert "learn_" + "a" * 32 in output
    assert '"main-header": "Site header"' in output
    assert (workspace / "data" / "learnmap.db").exists()

    main(["list"])
    assert "Docs Site" in capsys.readouterr().out

    main(["plugin", "learn_" + "a" * 32, "-o", "dist/plugin.js"])
    assert (workspace / "dist" / "plugin.js").read_text(encoding="utf-8") == "/* plugin */"
    capsys.readouterr()

    main(["delete", "1"])
    assert "Project 1 deleted" in capsys.readouterr().out

    with pytest.raises(SystemExit) as excinfo:
        main(["delete", "1"])
    assert excinfo.value.code == 1


def test_plugin_unknown_key_exits_with_error(workspace: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["plugin", "learn_missing"])
    assert excinfo.value.code == 1


def test_loader_writes_to_stdout(workspace: Path, capsys) -> None:
    main(["loader", "--endpoint", "https://maps.example.com/lookup"])

    assert capsys.readouterr().out == "/* loader https://maps.example.com/lookup None */"
