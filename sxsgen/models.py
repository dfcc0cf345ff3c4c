"""Core data models shared across sxsgen components."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union


PROCESSOR_ARCHITECTURE = "X86"
ASSEMBLY_TYPE = "win32"


class ComponentType(str, Enum):
    """Kind of component a project descriptor builds."""

    EXECUTABLE = "Exe"
    ACTIVEX_LIBRARY = "OleDll"
    ACTIVEX_CONTROL = "Control"

    @property
    def is_library(self) -> bool:
        return self is not ComponentType.EXECUTABLE


@dataclass(frozen=True)
class ProjectDescriptor:
    """Structured view of a legacy project descriptor file."""

    component_type: ComponentType = ComponentType.EXECUTABLE
    major_version: int = 0
    minor_version: int = 0
    revision_version: int = 0
    description: str = ""
    output_file_name: str = ""
    output_directory: str = ""
    reference_tokens: Tuple[str, ...] = ()
    object_tokens: Tuple[str, ...] = ()

    @property
    def version(self) -> str:
        return f"{self.major_version}.{self.minor_version}.0.{self.revision_version}"

    @property
    def assembly_name(self) -> str:
        return file_stem(self.output_file_name)

    @property
    def is_library(self) -> bool:
        return self.component_type.is_library


@dataclass(frozen=True)
class ComponentReference:
    """Type library identity extracted from a reference or object line."""

    type_library_id: str
    type_library_version: str


class ResolutionKind(str, Enum):
    BINARY = "binary"
    TYPE_LIBRARY = "typelib"


@dataclass(frozen=True)
class ResolvedComponent:
    """A dependency resolved to a canonical file on disk."""

    file_path: str
    kind: ResolutionKind = ResolutionKind.BINARY

    @property
    def key(self) -> str:
        """Dedupe key: two paths naming the same file share a key."""
        return self.file_path.casefold()

    @property
    def file_name(self) -> str:
        return file_name(self.file_path)


@dataclass(frozen=True)
class AssemblyIdentity:
    """Identity attributes of an ``assemblyIdentity`` element."""

    name: str
    version: str
    public_key_token: Optional[str] = None
    processor_architecture: str = PROCESSOR_ARCHITECTURE
    type: str = ASSEMBLY_TYPE


@dataclass(frozen=True)
class InterfaceRecord:
    """An interface that needs a ``comInterfaceExternalProxyStub`` element."""

    name: str
    interface_id: str
    proxy_stub_class_id: str = ""


@dataclass(frozen=True)
class ComClassRecord:
    """Attributes of a ``comClass`` element."""

    class_id: str
    type_library_id: str
    prog_id: Optional[str] = None
    nested_prog_id: Optional[str] = None
    threading_model: Optional[str] = None
    misc_status: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class TypeLibraryRecord:
    """Attributes of a ``typelib`` element plus the classes it exposes."""

    library_id: str
    version: str
    flags: str
    classes: Tuple[ComClassRecord, ...] = ()


# Collaborator payloads


@dataclass(frozen=True)
class ClassRegistration:
    """What the component directory knows about a COM class."""

    threading_model: Optional[str] = None
    prog_id: Optional[str] = None
    version_independent_prog_id: Optional[str] = None
    current_version_prog_id: Optional[str] = None
    misc_status: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class InterfaceInfo:
    name: str
    interface_id: str


@dataclass(frozen=True)
class CoClassInfo:
    class_id: str
    flags: int = 0
    default_interface: Optional[InterfaceInfo] = None


@dataclass(frozen=True)
class TypeLibraryInfo:
    """Type library identity and classes as reported by an introspector."""

    library_id: str
    major_version: int
    minor_version: int
    flags: int = 0
    classes: Tuple[CoClassInfo, ...] = ()


# Manifest entries


@dataclass(frozen=True)
class DependentAssemblyEntry:
    identity: AssemblyIdentity


@dataclass(frozen=True)
class RawDependentAssemblyEntry:
    """Caller-supplied ``assemblyIdentity`` markup emitted verbatim."""

    xml: str


@dataclass(frozen=True)
class FileEntry:
    name: str
    typelib: TypeLibraryRecord


ManifestEntry = Union[DependentAssemblyEntry, RawDependentAssemblyEntry, FileEntry]


@dataclass
class DependencySet:
    """Ordered manifest entries plus the deduplicated interfaces of one run."""

    entries: List[ManifestEntry] = field(default_factory=list)
    interfaces: List[InterfaceRecord] = field(default_factory=list)


@dataclass
class ManifestDocument:
    identity: AssemblyIdentity
    description: str
    entries: List[ManifestEntry] = field(default_factory=list)
    interfaces: List[InterfaceRecord] = field(default_factory=list)


def file_name(path: str) -> str:
    """Return the final component of a Windows or POSIX path."""
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def file_stem(path: str) -> str:
    name = file_name(path)
    if "." not in name.lstrip("."):
        return name
    return name.rsplit(".", 1)[0]


def file_extension(path: str) -> str:
    name = file_name(path)
    if "." not in name.lstrip("."):
        return ""
    return "." + name.rsplit(".", 1)[1].lower()


def canonical_path(path: str | Path, base: Path | None = None) -> str:
    """Return an absolute, normalised path string for ``path``.

    Relative paths are taken relative to ``base`` (or the working directory).
    Windows separators are accepted on every platform.
    """
    raw = str(path)
    if os.sep != "\\":
        raw = raw.replace("\\", "/")
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute() and base is not None:
        candidate = base / candidate
    return str(candidate.resolve())


__all__ = [
    "ASSEMBLY_TYPE",
    "AssemblyIdentity",
    "ClassRegistration",
    "CoClassInfo",
    "ComClassRecord",
    "ComponentReference",
    "ComponentType",
    "DependencySet",
    "DependentAssemblyEntry",
    "FileEntry",
    "InterfaceInfo",
    "InterfaceRecord",
    "ManifestDocument",
    "ManifestEntry",
    "PROCESSOR_ARCHITECTURE",
    "ProjectDescriptor",
    "RawDependentAssemblyEntry",
    "ResolutionKind",
    "ResolvedComponent",
    "TypeLibraryInfo",
    "TypeLibraryRecord",
    "canonical_path",
    "file_extension",
    "file_name",
    "file_stem",
]
