"""Configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from modloader.errors import ConfigError, ConfigNotFoundError
from modloader.notifier import TOPIC_PREFIX
from modloader.resolver import UNBOUNDED_DEPTH

logger = logging.getLogger(__name__)

__all__ = ["Config", "LoaderConfig", "DEFAULT_FILE_SPEC", "load_loader_configs"]

DEFAULT_FILE_SPEC = "*_module.py"


def _as_spec_tuple(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return value


class LoaderConfig(BaseModel):
    """One discovery request: where to look, what to match, and how deep."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_path: Path
    file_specs: tuple[str, ...] = (DEFAULT_FILE_SPEC,)
    ignore_specs: tuple[str, ...] = ()
    depth: int = 0

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not v:
            raise ValueError("name must be a non-empty string")
        return v

    @field_validator("file_specs", mode="before")
    @classmethod
    def _normalize_file_specs(cls, v: Any) -> Any:
        v = _as_spec_tuple(v)
        if not v:
            raise ValueError("file_specs must contain at least one pattern")
        return v

    @field_validator("ignore_specs", mode="before")
    @classmethod
    def _normalize_ignore_specs(cls, v: Any) -> Any:
        return _as_spec_tuple(v)

    @field_validator("depth")
    @classmethod
    def _check_depth(cls, v: int) -> int:
        if v < 0 and v != UNBOUNDED_DEPTH:
            raise ValueError(f"depth must be >= 0 or {UNBOUNDED_DEPTH} (unbounded), got {v}")
        return v

    @property
    def topic(self) -> str:
        """Event topic on which this batch's lifecycle event is published."""
        return TOPIC_PREFIX + self.name

    @classmethod
    def create(cls, **kwargs: Any) -> LoaderConfig:
        """Build a LoaderConfig, reporting validation problems as ConfigError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigError(message=f"Invalid loader configuration: {e}", cause=e) from e


class Config:
    """Configuration accessor with dot-path key support."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load settings from a YAML mapping file."""
        return cls(_read_yaml_mapping(Path(path)))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        parts = key.split(".")
        current: Any = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigNotFoundError(config_path=str(path))

    content = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid YAML in configuration file: {path}", cause=e) from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(message=f"Configuration file must be a YAML mapping: {path}")
    return parsed


def _first_present(entry: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def load_loader_configs(path: str | Path, config: Config | None = None) -> list[LoaderConfig]:
    """Load the ``loaders:`` list from a YAML file.

    Each entry accepts ``name``, ``path``, ``file_spec``/``file_specs``,
    ``ignore_spec``/``ignore_specs`` and ``depth``. Relative paths resolve
    against the YAML file's directory. Keys missing from an entry fall back
    to ``loader.*`` settings in ``config``.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigError: If the file or any entry is invalid.
    """
    path = Path(path)
    parsed = _read_yaml_mapping(path)
    entries = parsed.get("loaders")
    if not isinstance(entries, list):
        raise ConfigError(message=f"Loader configuration must contain a 'loaders' list: {path}")

    config = config or Config()
    result: list[LoaderConfig] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(message=f"Loader entry #{index} must be a mapping")
        if "path" not in entry:
            raise ConfigError(message=f"Loader entry #{index} is missing 'path'")

        base_path = Path(entry["path"])
        if not base_path.is_absolute():
            base_path = path.parent / base_path

        file_specs = _first_present(entry, "file_specs", "file_spec")
        if file_specs is None:
            file_specs = config.get("loader.file_specs", DEFAULT_FILE_SPEC)
        ignore_specs = _first_present(entry, "ignore_specs", "ignore_spec")
        if ignore_specs is None:
            ignore_specs = config.get("loader.ignore_specs", ())

        result.append(
            LoaderConfig.create(
                name=entry.get("name", ""),
                base_path=base_path,
                file_specs=file_specs,
                ignore_specs=ignore_specs,
                depth=entry.get("depth", config.get("loader.depth", 0)),
            )
        )

    logger.info("Loaded %d loader configuration(s) from %s", len(result), path)
    return result
