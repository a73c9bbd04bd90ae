from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any
import json
import os
import re

import yaml

from folio.errors import ConfigError

CONFIG_ENV_VAR = "FOLIO_CONFIG"

_ENV_PATTERN = re.compile(r"\$\{([^:}]+):-?([^}]*)\}")


@dataclass(frozen=True)
class ContentConfig:
    roots: list[str] = field(default_factory=lambda: ["content"])
    file_extensions: list[str] = field(default_factory=lambda: [".md", ".markdown", ".mdx"])


@dataclass(frozen=True)
class ParsingConfig:
    derive_defaults: bool = True


@dataclass(frozen=True)
class BuildConfig:
    state_path: str = ".folio/state.json"
    workers: int = 4
    progress: bool = True


@dataclass(frozen=True)
class OutputConfig:
    dir: str = "public"
    indent: int | None = 2


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    content: ContentConfig = field(default_factory=ContentConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_SECTIONS = {
    "content": ContentConfig,
    "parsing": ParsingConfig,
    "build": BuildConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


def _expand_env_var(value: str) -> str:
    """Expand ``${VAR:-default}`` references in a string."""

    def replace_env(match):
        return os.environ.get(match.group(1), match.group(2))

    return _ENV_PATTERN.sub(replace_env, value)


def _expand_env(value):
    """Recursively expand env vars in strings inside dicts/lists."""
    if isinstance(value, str):
        return _expand_env_var(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _coalesce(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _coalesce(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(name: str, cls, data: Any):
    if not isinstance(data, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(unknown)}")
    return cls(**data)


def _from_dict(data: dict[str, Any]) -> AppConfig:
    unknown = sorted(set(data) - _SECTIONS.keys())
    if unknown:
        raise ConfigError(f"Unknown config sections: {', '.join(unknown)}")
    config = AppConfig(
        **{name: _section(name, cls, data.get(name, {})) for name, cls in _SECTIONS.items()}
    )
    _check(config)
    return config


def _check(config: AppConfig) -> None:
    if isinstance(config.content.roots, str) or not config.content.roots:
        raise ConfigError("content.roots must be a non-empty list")
    if isinstance(config.build.workers, bool) or not isinstance(config.build.workers, int):
        raise ConfigError("build.workers must be an integer")
    if config.build.workers < 1:
        raise ConfigError("build.workers must be at least 1")
    for extension in config.content.file_extensions:
        if not str(extension).startswith("."):
            raise ConfigError(f"file extension {extension!r} must start with '.'")


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Create config from a dictionary, merged over the defaults."""
    merged = _coalesce(AppConfig().to_dict(), _expand_env(data or {}))
    build = merged.get("build")
    # Env-expanded values arrive as strings.
    if isinstance(build, dict) and isinstance(build.get("workers"), str) and build["workers"].isdigit():
        build["workers"] = int(build["workers"])
    return _from_dict(merged)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML or JSON.

    Args:
        path: Config file path. Falls back to ``$FOLIO_CONFIG``, then to the
            built-in defaults.

    Returns:
        AppConfig

    Raises:
        FileNotFoundError: If an explicit config path does not exist
        ConfigError: On unknown sections, keys or invalid values
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR)
    if path is None:
        return AppConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".json"}:
        data = json.loads(raw)
    else:
        data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return config_from_dict(data)


def resolve_path(value: str, base: Path | None = None) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    base = base or Path.cwd()
    return (base / path).resolve()
