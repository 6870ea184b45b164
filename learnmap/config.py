"""Configuration loading for learnmap (.learnmap.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".learnmap.yml"
CONFIG_ENV_VAR = "LEARNMAP_CONFIG"
DEFAULT_STORE_PATH = Path("data") / "learnmap.db"

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".html",
    ".vue",
    ".py",
    ".php",
)

DEFAULT_EXCLUDED_DIRS: tuple[str, ...] = (
    "node_modules",
    "dist",
    "build",
    "coverage",
    "vendor",
    "venv",
    "__pycache__",
)


@dataclass
class LLMConfig:
    """Text-generation runtime settings."""

    runner: str = "gemini"
    model: Optional[str] = None
    temperature: Optional[float] = 0.2
    max_tokens: Optional[int] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout: Optional[float] = 60.0
    max_workers: int = 1


@dataclass
class ExtractionConfig:
    """Bounds applied by the page and repository extractors."""

    max_files: int = 10
    max_file_chars: int = 2000
    max_paragraphs: int = 10
    min_paragraph_chars: int = 20
    render_timeout: float = 30.0
    clone_timeout: float = 120.0
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    excluded_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS))


@dataclass
class PluginConfig:
    """Settings baked into compiled plugin scripts."""

    marker_attribute: str = "data-learn-id"
    lookup_endpoint: Optional[str] = None


@dataclass
class StoreConfig:
    """Location of the project database."""

    path: Path = DEFAULT_STORE_PATH


@dataclass
class LearnMapConfig:
    """Represents the settings defined in .learnmap.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    plugin: PluginConfig = field(default_factory=PluginConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def load_config(config_path: Path | None = None) -> LearnMapConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return LearnMapConfig(root=root, store=StoreConfig(path=root / DEFAULT_STORE_PATH))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    llm = LLMConfig()
    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        llm.runner = (_as_str(llm_data.get("runner")) or llm.runner).lower()
        llm.model = _as_str(llm_data.get("model"))
        if "temperature" in llm_data:
            llm.temperature = _as_float(llm_data.get("temperature"))
        llm.max_tokens = _as_int(llm_data.get("max_tokens"))
        llm.base_url = _as_str(llm_data.get("base_url"))
        llm.api_key = _as_str(llm_data.get("api_key"))
        timeout = _as_float(llm_data.get("request_timeout"))
        if timeout is not None:
            llm.request_timeout = timeout
        llm.max_workers = max(1, _as_int(llm_data.get("max_workers")) or 1)

    extraction = ExtractionConfig()
    extraction_data = _as_dict(data.get("extraction"))
    if extraction_data:
        extraction.max_files = _positive_int(extraction_data.get("max_files"), extraction.max_files)
        extraction.max_file_chars = _positive_int(
            extraction_data.get("max_file_chars"), extraction.max_file_chars
        )
        extraction.max_paragraphs = _positive_int(
            extraction_data.get("max_paragraphs"), extraction.max_paragraphs
        )
        min_chars = _as_int(extraction_data.get("min_paragraph_chars"))
        if min_chars is not None and min_chars >= 0:
            extraction.min_paragraph_chars = min_chars
        render_timeout = _as_float(extraction_data.get("render_timeout"))
        if render_timeout:
            extraction.render_timeout = render_timeout
        clone_timeout = _as_float(extraction_data.get("clone_timeout"))
        if clone_timeout:
            extraction.clone_timeout = clone_timeout
        extensions = _as_str_list(extraction_data.get("extensions"))
        if extensions:
            extraction.extensions = [_normalise_extension(ext) for ext in extensions]
        excluded = _as_str_list(extraction_data.get("excluded_dirs"))
        if excluded:
            extraction.excluded_dirs = excluded

    plugin = PluginConfig()
    plugin_data = _as_dict(data.get("plugin"))
    if plugin_data:
        plugin.marker_attribute = (
            _as_str(plugin_data.get("marker_attribute")) or plugin.marker_attribute
        )
        plugin.lookup_endpoint = _as_str(plugin_data.get("lookup_endpoint"))

    store_data = _as_dict(data.get("store"))
    store_path = _as_str(store_data.get("path")) if store_data else None
    store = StoreConfig(path=root / (store_path or DEFAULT_STORE_PATH))

    return LearnMapConfig(
        root=root,
        llm=llm,
        extraction=extraction,
        plugin=plugin,
        store=store,
    )


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is None:
        env_value = os.getenv(CONFIG_ENV_VAR)
        config_path = Path(env_value) if env_value else Path.cwd()
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _positive_int(value: Any, default: int) -> int:
    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        return default
    return parsed


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ExtractionConfig",
    "LLMConfig",
    "LearnMapConfig",
    "PluginConfig",
    "StoreConfig",
    "load_config",
]
