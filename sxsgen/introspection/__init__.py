"""Binary introspection backends: type libraries and file versions."""

from .base import FileVersion, IntrospectionError, TypeLibraryIntrospector, VersionReader
from .memory import InMemoryIntrospector, InMemoryVersionReader


def create_introspector() -> TypeLibraryIntrospector:
    """Return the platform type library introspector (requires Windows and comtypes)."""
    from .comtypes_backend import ComTypesIntrospector

    return ComTypesIntrospector()


def create_version_reader() -> VersionReader:
    """Return the PE file version reader."""
    from .pe import PeVersionReader

    return PeVersionReader()


__all__ = [
    "FileVersion",
    "InMemoryIntrospector",
    "InMemoryVersionReader",
    "IntrospectionError",
    "TypeLibraryIntrospector",
    "VersionReader",
    "create_introspector",
    "create_version_reader",
]
