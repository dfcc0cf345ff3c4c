"""YAML snapshots of a component directory and the binaries it points at.

A snapshot lets manifests be generated away from the machine that has the
components registered, e.g. on a CI host::

    typelibs:
      "{GUID}":
        "1.0": bin/Widgets.ocx
    classes:
      "{CLSID}":
        threading_model: Apartment
        prog_id: Widgets.Gauge.1
        version_independent_prog_id: Widgets.Gauge
        misc_status: {0: 131473}
    interfaces:
      "{IID}": "{PROXY-STUB-CLSID}"
    binaries:
      bin/Widgets.ocx:
        version: 1.4.0.12
        typelib:
          id: "{GUID}"
          version: "1.0"
          flags: 10
          classes:
            - id: "{CLSID}"
              flags: 34
              default_interface: {name: _Gauge, id: "{IID}"}

Relative paths are taken relative to the snapshot file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .config import ConfigError, read_yaml_mapping
from .directory import InMemoryComponentDirectory
from .introspection import FileVersion, InMemoryIntrospector, InMemoryVersionReader
from .logging import get_logger
from .models import (
    ClassRegistration,
    CoClassInfo,
    InterfaceInfo,
    TypeLibraryInfo,
    canonical_path,
)

_LOGGER = get_logger("snapshot")


@dataclass
class Snapshot:
    root: Path
    directory: InMemoryComponentDirectory
    introspector: InMemoryIntrospector
    version_reader: InMemoryVersionReader


def load_snapshot(path: Path) -> Snapshot:
    path = path.expanduser().resolve()
    if not path.is_file():
        raise ConfigError(f"Snapshot file does not exist: {path}")
    return parse_snapshot(read_yaml_mapping(path), root=path.parent)


def parse_snapshot(data: Mapping[str, Any], *, root: Path) -> Snapshot:
    directory = InMemoryComponentDirectory()
    introspector = InMemoryIntrospector()
    version_reader = InMemoryVersionReader()

    for library_id, versions in _mapping(data, "typelibs").items():
        if not isinstance(versions, dict):
            raise ConfigError(f"typelibs.{library_id} must map versions to paths")
        for hex_version, file_path in versions.items():
            directory.register_type_library(str(library_id), str(hex_version), str(file_path))

    for class_id, payload in _mapping(data, "classes").items():
        directory.register_class(str(class_id), _class_registration(str(class_id), payload))

    for interface_id, proxy_stub in _mapping(data, "interfaces").items():
        directory.register_interface(str(interface_id), str(proxy_stub))

    for raw_path, payload in _mapping(data, "binaries").items():
        if not isinstance(payload, dict):
            raise ConfigError(f"binaries.{raw_path} must be a mapping")
        file_path = canonical_path(str(raw_path), root)
        version = payload.get("version")
        if version is not None:
            version_reader.add(file_path, _file_version(str(raw_path), version))
        typelib = payload.get("typelib")
        if typelib is not None:
            introspector.add(file_path, _type_library(str(raw_path), typelib))

    _LOGGER.debug("Loaded snapshot rooted at %s", root)
    return Snapshot(root=root, directory=directory, introspector=introspector, version_reader=version_reader)


def _mapping(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Snapshot section {key!r} must be a mapping")
    return value


def _class_registration(class_id: str, payload: Any) -> ClassRegistration:
    if not isinstance(payload, dict):
        raise ConfigError(f"classes.{class_id} must be a mapping")
    misc_status: Dict[int, int] = {}
    for context, flags in (payload.get("misc_status") or {}).items():
        misc_status[_int(f"classes.{class_id}.misc_status", context)] = _int(
            f"classes.{class_id}.misc_status", flags
        )
    return ClassRegistration(
        threading_model=_optional_str(payload.get("threading_model")),
        prog_id=_optional_str(payload.get("prog_id")),
        version_independent_prog_id=_optional_str(payload.get("version_independent_prog_id")),
        current_version_prog_id=_optional_str(payload.get("current_version_prog_id")),
        misc_status=misc_status,
    )


def _file_version(raw_path: str, value: Any) -> FileVersion:
    parts = str(value).split(".")
    if len(parts) != 4:
        raise ConfigError(f"binaries.{raw_path}.version must have four parts: {value}")
    major, minor, build, private = (_int(f"binaries.{raw_path}.version", part) for part in parts)
    return (major, minor, build, private)


def _type_library(raw_path: str, payload: Any) -> TypeLibraryInfo:
    where = f"binaries.{raw_path}.typelib"
    if not isinstance(payload, dict) or "id" not in payload:
        raise ConfigError(f"{where} must be a mapping with an id")
    major, _, minor = str(payload.get("version", "1.0")).partition(".")
    classes: List[CoClassInfo] = []
    for item in payload.get("classes") or []:
        if not isinstance(item, dict) or "id" not in item:
            raise ConfigError(f"{where}.classes entries need an id")
        default_interface: Optional[InterfaceInfo] = None
        interface = item.get("default_interface")
        if isinstance(interface, dict):
            default_interface = InterfaceInfo(name=str(interface["name"]), interface_id=str(interface["id"]))
        classes.append(
            CoClassInfo(
                class_id=str(item["id"]),
                flags=_int(where, item.get("flags", 0)),
                default_interface=default_interface,
            )
        )
    return TypeLibraryInfo(
        library_id=str(payload["id"]),
        major_version=_int(where, major),
        minor_version=_int(where, minor or 0),
        flags=_int(where, payload.get("flags", 0)),
        classes=tuple(classes),
    )


def _int(where: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: expected an integer, got {value!r}") from None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


__all__ = ["Snapshot", "load_snapshot", "parse_snapshot"]
