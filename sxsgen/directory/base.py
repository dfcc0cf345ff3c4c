"""Base contract for component directory backends."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple

from ..models import ClassRegistration


class ComponentDirectory(ABC):
    """Read-only lookup of registered type libraries, classes and interfaces."""

    @abstractmethod
    def type_library_path(self, library_id: str, hex_version: str) -> Optional[str]:
        """Return the file registered for ``library_id`` at exactly ``hex_version``."""

    @abstractmethod
    def type_library_versions(self, library_id: str) -> Iterable[Tuple[str, str]]:
        """Yield ``(hex_version, path)`` for every registered version, in enumeration order."""

    @abstractmethod
    def class_registration(self, class_id: str) -> Optional[ClassRegistration]:
        """Return what is registered for ``class_id``, or None when unknown."""

    @abstractmethod
    def proxy_stub_class_id(self, interface_id: str) -> Optional[str]:
        """Return the proxy/stub class registered for ``interface_id``."""
