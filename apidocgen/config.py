"""Configuration loading for apidocgen (.apidocgen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

CONFIG_FILENAME = ".apidocgen.yml"


class ConfigError(ConfigurationError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GeminiConfig:
    """Inference service settings."""

    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    request_timeout: float = 60.0


@dataclass
class BatchConfig:
    """Throttling of inference calls."""

    size: int = 10
    cooldown_seconds: float = 60.0
    item_timeout: Optional[float] = 120.0


@dataclass
class CacheConfig:
    """Task result cache location and retention."""

    path: Optional[Path] = None
    capacity: int = 10


@dataclass
class ServerConfig:
    """HTTP service binding."""

    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class AgentConfig:
    """Represents the settings defined in .apidocgen.yml plus environment overrides."""

    root: Path
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def __post_init__(self) -> None:
        if self.cache.path is None:
            self.cache.path = self.root / ".apidocgen" / "memory.json"


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> AgentConfig:
    """Load configuration from disk, then apply environment overrides."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    gemini_data = _as_dict(data.get("gemini"))
    gemini = GeminiConfig(
        model=_as_str(gemini_data.get("model")),
        api_key=_as_str(gemini_data.get("api_key")),
        base_url=_as_str(gemini_data.get("base_url")),
        request_timeout=_as_float(gemini_data.get("request_timeout"), 60.0),
    )

    batch_data = _as_dict(data.get("batch"))
    batch = BatchConfig(
        size=_as_int(batch_data.get("size"), 10),
        cooldown_seconds=_as_float(batch_data.get("cooldown_seconds"), 60.0),
        item_timeout=_as_optional_float(batch_data.get("item_timeout"), 120.0),
    )
    if batch.size < 1:
        raise ConfigError("batch.size must be at least 1")
    if batch.cooldown_seconds < 0:
        raise ConfigError("batch.cooldown_seconds must not be negative")

    cache_data = _as_dict(data.get("cache"))
    cache_path_str = env.get("APIDOCGEN_CACHE_PATH") or _as_str(cache_data.get("path"))
    cache = CacheConfig(
        path=_resolve_relative(root, cache_path_str) if cache_path_str else None,
        capacity=_as_int(cache_data.get("capacity"), 10),
    )
    if cache.capacity < 1:
        raise ConfigError("cache.capacity must be at least 1")

    server_data = _as_dict(data.get("server"))
    server = ServerConfig(
        host=_as_str(server_data.get("host")) or "0.0.0.0",
        port=_as_int(env.get("PORT") or server_data.get("port"), 3000),
    )

    return AgentConfig(root=root, gemini=gemini, batch=batch, cache=cache, server=server)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_relative(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _as_optional_float(value: Any, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, bool):
        return None if value is False else default
    number = _as_float(value, 0.0)
    # Zero or a negative timeout disables the per-item limit.
    return number if number > 0 else None


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


__all__ = [
    "AgentConfig",
    "BatchConfig",
    "CONFIG_FILENAME",
    "CacheConfig",
    "ConfigError",
    "GeminiConfig",
    "ServerConfig",
    "load_config",
]
