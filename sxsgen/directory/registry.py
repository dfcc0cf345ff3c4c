"""Component directory backed by the Windows registry (``HKEY_CLASSES_ROOT``).

Only importable on Windows; :func:`sxsgen.directory.create_registry_directory` imports
it on demand.
"""

from __future__ import annotations

import winreg
from typing import Dict, Iterator, List, Optional, Tuple

from ..logging import get_logger
from ..models import ClassRegistration
from .base import ComponentDirectory

_LOGGER = get_logger("directory.registry")

MISC_STATUS_CONTEXTS = range(5)


class RegistryComponentDirectory(ComponentDirectory):
    """Reads COM registrations from the 32-bit view of the classes root."""

    def __init__(
        self,
        root: int = winreg.HKEY_CLASSES_ROOT,
        *,
        access: int = winreg.KEY_READ | winreg.KEY_WOW64_32KEY,
    ) -> None:
        self._root = root
        self._access = access

    def type_library_path(self, library_id: str, hex_version: str) -> Optional[str]:
        return self._read_value(rf"TypeLib\{library_id}\{hex_version}\0\win32")

    def type_library_versions(self, library_id: str) -> List[Tuple[str, str]]:
        versions: List[Tuple[str, str]] = []
        for hex_version in self._subkeys(rf"TypeLib\{library_id}"):
            path = self.type_library_path(library_id, hex_version)
            if path:
                versions.append((hex_version, path))
        return versions

    def class_registration(self, class_id: str) -> Optional[ClassRegistration]:
        base = rf"CLSID\{class_id}"
        if not self._key_exists(base):
            return None
        prog_id = self._read_value(rf"{base}\ProgID")
        version_independent = self._read_value(rf"{base}\VersionIndependentProgID")
        lookup_prog_id = version_independent or prog_id
        current_version = self._read_value(rf"{lookup_prog_id}\CurVer") if lookup_prog_id else None
        misc_status: Dict[int, int] = {}
        for context in MISC_STATUS_CONTEXTS:
            suffix = "" if context == 0 else rf"\{context}"
            raw = self._read_value(rf"{base}\MiscStatus{suffix}")
            misc_status[context] = _parse_int(raw)
        return ClassRegistration(
            threading_model=self._read_value(rf"{base}\InprocServer32", "ThreadingModel"),
            prog_id=prog_id,
            version_independent_prog_id=version_independent,
            current_version_prog_id=current_version,
            misc_status=misc_status,
        )

    def proxy_stub_class_id(self, interface_id: str) -> Optional[str]:
        return self._read_value(rf"Interface\{interface_id}\ProxyStubClsid32")

    def _read_value(self, path: str, name: str = "") -> Optional[str]:
        try:
            with winreg.OpenKey(self._root, path, 0, self._access) as key:
                value, _ = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        if value is None:
            return None
        text = str(value)
        return text or None

    def _key_exists(self, path: str) -> bool:
        try:
            with winreg.OpenKey(self._root, path, 0, self._access):
                return True
        except FileNotFoundError:
            return False

    def _subkeys(self, path: str) -> Iterator[str]:
        try:
            key = winreg.OpenKey(self._root, path, 0, self._access)
        except FileNotFoundError:
            _LOGGER.debug("No registry key %s", path)
            return
        with key:
            index = 0
            while True:
                try:
                    yield winreg.EnumKey(key, index)
                except OSError:
                    break
                index += 1


def _parse_int(raw: Optional[str]) -> int:
    if not raw:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        return 0


__all__ = ["RegistryComponentDirectory"]
