"""In-memory component directory used by snapshots and tests."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..models import ClassRegistration
from .base import ComponentDirectory


class InMemoryComponentDirectory(ComponentDirectory):
    """Component directory backed by plain mappings.

    Identifiers are matched case-insensitively, the way the registry matches
    key names. Type library versions enumerate in insertion order.
    """

    def __init__(
        self,
        typelibs: Mapping[str, Mapping[str, str]] | None = None,
        classes: Mapping[str, ClassRegistration] | None = None,
        interfaces: Mapping[str, str] | None = None,
    ) -> None:
        self._typelibs: Dict[str, Dict[str, str]] = {}
        self._classes: Dict[str, ClassRegistration] = {}
        self._interfaces: Dict[str, str] = {}
        for library_id, versions in (typelibs or {}).items():
            for hex_version, path in versions.items():
                self.register_type_library(library_id, hex_version, path)
        for class_id, registration in (classes or {}).items():
            self.register_class(class_id, registration)
        for interface_id, proxy_stub in (interfaces or {}).items():
            self.register_interface(interface_id, proxy_stub)

    def register_type_library(self, library_id: str, hex_version: str, path: str) -> None:
        self._typelibs.setdefault(_key(library_id), {})[hex_version.upper()] = path

    def register_class(self, class_id: str, registration: ClassRegistration) -> None:
        self._classes[_key(class_id)] = registration

    def register_interface(self, interface_id: str, proxy_stub_class_id: str) -> None:
        self._interfaces[_key(interface_id)] = proxy_stub_class_id

    def type_library_path(self, library_id: str, hex_version: str) -> Optional[str]:
        versions = self._typelibs.get(_key(library_id), {})
        return versions.get(hex_version.upper())

    def type_library_versions(self, library_id: str) -> Iterable[Tuple[str, str]]:
        return list(self._typelibs.get(_key(library_id), {}).items())

    def class_registration(self, class_id: str) -> Optional[ClassRegistration]:
        return self._classes.get(_key(class_id))

    def proxy_stub_class_id(self, interface_id: str) -> Optional[str]:
        return self._interfaces.get(_key(interface_id))


def _key(identifier: str) -> str:
    return identifier.strip().upper()


__all__ = ["InMemoryComponentDirectory"]
