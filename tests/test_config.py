"""Tests for learnmap.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from learnmap.config import (
    CONFIG_ENV_VAR,
    ExtractionConfig,
    LearnMapConfig,
    LLMConfig,
    load_config,
)
from learnmap.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, LearnMapConfig)
    assert config.root == tmp_path.resolve()
    assert config.llm.runner == "gemini"
    assert config.llm.model is None
    assert config.llm.max_workers == 1
    assert config.extraction == ExtractionConfig()
    assert config.extraction.max_files == 10
    assert config.extraction.max_file_chars == 2000
    assert ".vue" in config.extraction.extensions
    assert "node_modules" in config.extraction.excluded_dirs
    assert config.plugin.marker_attribute == "data-learn-id"
    assert config.plugin.lookup_endpoint is None
    assert config.store.path == tmp_path.resolve() / "data" / "learnmap.db"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".learnmap.yml"
    config_file.write_text(
        """
llm:
  runner: "OpenAI"
  model: "llama3:8b-instruct"
  temperature: 0.15
  max_tokens: 256
  base_url: "http://localhost:12434/engines/v1"
  api_key: "test-key"
  request_timeout: 45
  max_workers: 4
extraction:
  max_files: 5
  max_file_chars: 500
  max_paragraphs: 3
  min_paragraph_chars: 0
  render_timeout: 10
  clone_timeout: 30
  extensions: [js, ".SVELTE"]
  excluded_dirs:
    - node_modules
    - generated
plugin:
  marker_attribute: data-help
  lookup_endpoint: https://maps.example.com/lookup
store:
  path: state/projects.db
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert isinstance(config.llm, LLMConfig)
    assert config.llm.runner == "openai"
    assert config.llm.model == "llama3:8b-instruct"
    assert config.llm.temperature == pytest.approx(0.15)
    assert config.llm.max_tokens == 256
    assert config.llm.base_url == "http://localhost:12434/engines/v1"
    assert config.llm.api_key == "test-key"
    assert config.llm.request_timeout == pytest.approx(45.0)
    assert config.llm.max_workers == 4

    assert config.extraction.max_files == 5
    assert config.extraction.max_file_chars == 500
    assert config.extraction.max_paragraphs == 3
    assert config.extraction.min_paragraph_chars == 0
    assert config.extraction.render_timeout == pytest.approx(10.0)
    assert config.extraction.clone_timeout == pytest.approx(30.0)
    assert config.extraction.extensions == [".js", ".svelte"]
    assert config.extraction.excluded_dirs == ["node_modules", "generated"]

    assert config.plugin.marker_attribute == "data-help"
    assert config.plugin.lookup_endpoint == "https://maps.example.com/lookup"
    assert config.store.path == tmp_path.resolve() / "state" / "projects.db"


def test_load_config_ignores_invalid_bounds(tmp_path: Path) -> None:
    config_file = tmp_path / ".learnmap.yml"
    config_file.write_text(
        "extraction:\n  max_files: 0\n  max_file_chars: -3\n  max_paragraphs: true\n",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.extraction.max_files == 10
    assert config.extraction.max_file_chars == 2000
    assert config.extraction.max_paragraphs == 10


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    config_file = tmp_path / ".learnmap.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / ".learnmap.yml"
    config_file.write_text("llm: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file)


def test_load_config_uses_environment_variable(tmp_path: Path, monkeypatch) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("llm:\n  runner: openai\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    config = load_config()

    assert config.llm.runner == "openai"
    assert config.root == tmp_path.resolve()
