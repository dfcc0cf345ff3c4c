"""In-memory introspection backends used by snapshots and tests."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from ..models import TypeLibraryInfo
from .base import FileVersion, IntrospectionError, TypeLibraryIntrospector, VersionReader


class InMemoryIntrospector(TypeLibraryIntrospector):
    """Returns canned type libraries keyed by case-folded path."""

    def __init__(self, typelibs: Mapping[str, TypeLibraryInfo] | None = None) -> None:
        self._typelibs: Dict[str, TypeLibraryInfo] = {}
        for path, info in (typelibs or {}).items():
            self.add(path, info)

    def add(self, path: str, info: TypeLibraryInfo) -> None:
        self._typelibs[path.casefold()] = info

    def inspect(self, path: str) -> TypeLibraryInfo:
        info = self._typelibs.get(path.casefold())
        if info is None:
            raise IntrospectionError(f"No type library recorded for {path}")
        return info


class InMemoryVersionReader(VersionReader):
    """Returns canned file versions keyed by case-folded path."""

    def __init__(self, versions: Mapping[str, FileVersion] | None = None) -> None:
        self._versions: Dict[str, FileVersion] = {}
        for path, version in (versions or {}).items():
            self.add(path, version)

    def add(self, path: str, version: FileVersion) -> None:
        self._versions[path.casefold()] = version

    def read(self, path: str) -> Optional[FileVersion]:
        return self._versions.get(path.casefold())


__all__ = ["InMemoryIntrospector", "InMemoryVersionReader"]
