"""Identity and COM metadata extraction for resolved binaries."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .directory import ComponentDirectory
from .errors import TypeLibraryUnavailable, VersionInfoUnavailable
from .introspection import IntrospectionError, TypeLibraryIntrospector, VersionReader
from .logging import get_logger
from .models import (
    AssemblyIdentity,
    CoClassInfo,
    ComClassRecord,
    InterfaceRecord,
    TypeLibraryInfo,
    TypeLibraryRecord,
    file_stem,
)

LIBFLAGS: Tuple[Tuple[str, int], ...] = (
    ("restricted", 0x1),
    ("control", 0x2),
    ("hidden", 0x4),
    ("hasDiskImage", 0x8),
)

# Attribute names double as manifest attribute names; the capitalisation matters.
MISC_STATUS_ATTRIBUTES: Tuple[Tuple[int, str], ...] = (
    (0, "miscStatus"),
    (1, "miscStatusContent"),
    (2, "miscStatusThumbnail"),
    (3, "miscStatusIcon"),
    (4, "miscStatusDocPrint"),
)

OLEMISC: Tuple[Tuple[str, int], ...] = (
    ("recomposeOnResize", 0x1),
    ("onlyIconic", 0x2),
    ("insertNotReplace", 0x4),
    ("Static", 0x8),
    ("cantLinkInside", 0x10),
    ("canLinkByOle1", 0x20),
    ("isLinkObject", 0x40),
    ("insideOut", 0x80),
    ("activateWhenVisible", 0x100),
    ("renderingIsDeviceIndependent", 0x200),
    ("invisibleAtRuntime", 0x400),
    ("alwaysRun", 0x800),
    ("actsLikeButton", 0x1000),
    ("actsLikeLabel", 0x2000),
    ("noUiActivate", 0x4000),
    ("alignable", 0x8000),
    ("simpleFrame", 0x10000),
    ("setClientSiteFirst", 0x20000),
    ("imeMode", 0x40000),
    ("ignoreActivateWhenVisible", 0x80000),
    ("wantsToMenuMerge", 0x100000),
    ("supportsMultiLevelUndo", 0x200000),
)

TYPEFLAG_FHIDDEN = 0x10

_INTROSPECTION_HINT = (
    "ensure that the type library introspection component is installed and correctly registered"
)


def format_flags(value: int, names: Iterable[Tuple[str, int]]) -> str:
    """Render a flag set as comma-joined names in ascending bit order.

    Zero renders as an empty string; a value with bits outside ``names``
    renders as its decimal number.
    """
    if value == 0:
        return ""
    parts: List[str] = []
    remaining = value
    for name, bit in names:
        if value & bit:
            parts.append(name)
            remaining &= ~bit
    if remaining:
        return str(value)
    return ",".join(parts)


class IdentityExtractor:
    """Turns resolved binaries into assembly identities and COM metadata."""

    def __init__(
        self,
        directory: ComponentDirectory,
        introspector: TypeLibraryIntrospector,
        version_reader: VersionReader,
    ) -> None:
        self.directory = directory
        self.introspector = introspector
        self.version_reader = version_reader
        self.logger = get_logger("identity")

    def file_version(self, path: str) -> str:
        version = self.version_reader.read(path)
        if version is None:
            raise VersionInfoUnavailable(f"No version information found in {path}")
        return ".".join(str(part) for part in version)

    def dependent_identity(self, path: str) -> AssemblyIdentity:
        return AssemblyIdentity(name=file_stem(path), version=self.file_version(path))

    def inspect(self, path: str) -> TypeLibraryInfo:
        try:
            return self.introspector.inspect(path)
        except IntrospectionError as exc:
            raise TypeLibraryUnavailable(
                f"Error getting type library information for {path} - {_INTROSPECTION_HINT}: {exc}"
            ) from exc

    def type_library(self, info: TypeLibraryInfo, *, include_classes: bool = True) -> TypeLibraryRecord:
        classes: List[ComClassRecord] = []
        if include_classes:
            for coclass in info.classes:
                record = self.com_class(info.library_id, coclass)
                if record is not None:
                    classes.append(record)
        return TypeLibraryRecord(
            library_id=info.library_id,
            version=f"{info.major_version}.{info.minor_version}",
            flags=format_flags(info.flags, LIBFLAGS),
            classes=tuple(classes),
        )

    def com_class(self, library_id: str, coclass: CoClassInfo) -> Optional[ComClassRecord]:
        """Build the ``comClass`` record, or None when the class has no in-process server."""
        registration = self.directory.class_registration(coclass.class_id)
        if registration is None or not registration.threading_model:
            self.logger.debug("Skipping class %s: no in-process threading model", coclass.class_id)
            return None

        prog_id: Optional[str] = None
        nested_prog_id: Optional[str] = None
        if not coclass.flags & TYPEFLAG_FHIDDEN:
            resolved = registration.version_independent_prog_id or registration.prog_id
            if registration.current_version_prog_id:
                prog_id = registration.current_version_prog_id
                nested_prog_id = resolved or None
            elif resolved:
                prog_id = resolved

        misc_status: List[Tuple[str, str]] = []
        for context, attribute in MISC_STATUS_ATTRIBUTES:
            flags = registration.misc_status.get(context, 0)
            if flags:
                misc_status.append((attribute, format_flags(flags, OLEMISC)))

        return ComClassRecord(
            class_id=coclass.class_id,
            type_library_id=library_id,
            prog_id=prog_id,
            nested_prog_id=nested_prog_id,
            threading_model=registration.threading_model,
            misc_status=tuple(misc_status),
        )

    def interfaces(self, info: TypeLibraryInfo) -> List[InterfaceRecord]:
        """Return the default interfaces of every class in ``info``."""
        records: List[InterfaceRecord] = []
        for coclass in info.classes:
            interface = coclass.default_interface
            if interface is not None:
                records.append(InterfaceRecord(name=interface.name, interface_id=interface.interface_id))
        return records


class InterfaceRegistry:
    """Insertion-ordered interface set keyed by interface id; first occurrence wins."""

    def __init__(self) -> None:
        self._records: Dict[str, InterfaceRecord] = {}

    def add(self, record: InterfaceRecord) -> bool:
        key = record.interface_id.upper()
        if key in self._records:
            return False
        self._records[key] = record
        return True

    def extend(self, records: Iterable[InterfaceRecord]) -> None:
        for record in records:
            self.add(record)

    def records(self) -> List[InterfaceRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


__all__ = [
    "IdentityExtractor",
    "InterfaceRegistry",
    "LIBFLAGS",
    "MISC_STATUS_ATTRIBUTES",
    "OLEMISC",
    "TYPEFLAG_FHIDDEN",
    "format_flags",
]
