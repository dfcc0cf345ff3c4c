"""Configuration loading for sxsgen (.sxsgen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILE_NAME = ".sxsgen.yml"
SNAPSHOT_ENV_VAR = "SXSGEN_SNAPSHOT"

DIRECTORY_BACKENDS = ("registry", "snapshot")


class ConfigError(RuntimeError):
    """Raised when a configuration or snapshot file cannot be parsed."""


@dataclass
class DirectoryConfig:
    """Where component registrations and binary metadata come from."""

    backend: str = "registry"
    snapshot: Optional[Path] = None


@dataclass
class SxsGenConfig:
    """Represents the settings defined in .sxsgen.yml."""

    root: Path
    inline_external_objects: bool = False
    use_common_controls: bool = False
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    output_path: Optional[Path] = None


def load_config(config_path: Path, *, environ: Optional[Dict[str, str]] = None) -> SxsGenConfig:
    """Load configuration from disk, applying environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = SxsGenConfig(
        root=root,
        inline_external_objects=_as_bool(data.get("inline_external_objects")) or False,
        use_common_controls=_as_bool(data.get("use_common_controls")) or False,
    )

    directory_data = _as_dict(data.get("directory"))
    if directory_data:
        backend = (_as_str(directory_data.get("backend")) or "registry").lower()
        if backend not in DIRECTORY_BACKENDS:
            raise ConfigError(
                f"Unknown directory backend {backend!r}; expected one of {', '.join(DIRECTORY_BACKENDS)}"
            )
        snapshot = _as_str(directory_data.get("snapshot"))
        config.directory = DirectoryConfig(
            backend=backend,
            snapshot=(root / snapshot) if snapshot else None,
        )
        if backend == "snapshot" and config.directory.snapshot is None:
            raise ConfigError("directory.snapshot is required when directory.backend is 'snapshot'")

    output_data = _as_dict(data.get("output"))
    output_path = _as_str(output_data.get("path")) if output_data else None
    if output_path:
        config.output_path = root / output_path

    snapshot_override = env.get(SNAPSHOT_ENV_VAR)
    if snapshot_override:
        config.directory = DirectoryConfig(backend="snapshot", snapshot=Path(snapshot_override).expanduser())

    return config


def read_yaml_mapping(path: Path) -> Dict[str, Any]:
    """Parse a YAML file whose root must be a mapping (empty files give {})."""
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


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    return read_yaml_mapping(path)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DirectoryConfig",
    "SNAPSHOT_ENV_VAR",
    "SxsGenConfig",
    "load_config",
    "read_yaml_mapping",
]
