"""Base contracts for binary introspection backends."""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..models import TypeLibraryInfo

FileVersion = Tuple[int, int, int, int]


class IntrospectionError(RuntimeError):
    """Raised by introspectors when a type library cannot be opened."""


class TypeLibraryIntrospector(ABC):
    """Reads the embedded type library of a compiled binary."""

    @abstractmethod
    def inspect(self, path: str) -> TypeLibraryInfo:
        """Return the type library identity and classes; raise IntrospectionError on failure."""


class VersionReader(ABC):
    """Reads the fixed file version of a compiled binary."""

    @abstractmethod
    def read(self, path: str) -> Optional[FileVersion]:
        """Return ``(major, minor, build, private)`` or None when there is no version resource."""
