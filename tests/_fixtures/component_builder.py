"""Helper utilities for laying out registered components in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Optional, Sequence

from sxsgen.dependencies import DependencySetBuilder
from sxsgen.directory import InMemoryComponentDirectory
from sxsgen.identity import IdentityExtractor
from sxsgen.introspection import FileVersion, InMemoryIntrospector, InMemoryVersionReader
from sxsgen.models import (
    ClassRegistration,
    CoClassInfo,
    InterfaceInfo,
    TypeLibraryInfo,
    canonical_path,
)
from sxsgen.orchestrator import ManifestOrchestrator
from sxsgen.resolver import ComponentResolver

WIDGETS_LIB = "{5A1B2C3D-0001-4E5F-8A9B-0C1D2E3F4A5B}"
GAUGE_CLSID = "{5A1B2C3D-0002-4E5F-8A9B-0C1D2E3F4A5B}"
GAUGE_IID = "{5A1B2C3D-0003-4E5F-8A9B-0C1D2E3F4A5B}"
DIAL_CLSID = "{5A1B2C3D-0004-4E5F-8A9B-0C1D2E3F4A5B}"

ENGINE_LIB = "{7D0E1F20-0001-4A2B-9C3D-4E5F60718293}"
ENGINE_CLSID = "{7D0E1F20-0002-4A2B-9C3D-4E5F60718293}"
ENGINE_IID = "{7D0E1F20-0003-4A2B-9C3D-4E5F60718293}"

SHAPES_LIB = "{9B8A7C6D-0001-4F3E-8D2C-1B0A99887766}"

STDOLE_LIB = "{00020430-0000-0000-C000-000000000046}"
COMCTL_LIB = "{6B7E6392-850A-101B-AFC0-4210102A8DA7}"

PROXY_STUB_CLSID = "{00020424-0000-0000-C000-000000000046}"


def reference_line(library_id: str, version: str, path: str = "C:\\lib.dll") -> str:
    """Format a ``Reference=`` value the way the IDE writes it."""
    return f"*\\G{library_id}#{version}#0#{path}#Library"


def object_line(library_id: str, version: str, file_name: str = "lib.ocx") -> str:
    return f"{library_id}#{version}#0; {file_name}"


class ComponentBuilder:
    """Writes fake binaries and descriptors under tmp_path and registers them in memory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "components"
        self.root.mkdir()
        self.directory = InMemoryComponentDirectory()
        self.introspector = InMemoryIntrospector()
        self.version_reader = InMemoryVersionReader()

    def binary(
        self,
        relative: str,
        *,
        version: Optional[FileVersion] = (1, 0, 0, 0),
        typelib: Optional[TypeLibraryInfo] = None,
    ) -> str:
        """Create an empty file standing in for a binary and return its canonical path."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"MZ")
        key = canonical_path(path)
        if version is not None:
            self.version_reader.add(key, version)
        if typelib is not None:
            self.introspector.add(key, typelib)
        return key

    def register(self, library_id: str, hex_version: str, path: str) -> None:
        self.directory.register_type_library(library_id, hex_version, path)

    def register_class(self, class_id: str, **fields: object) -> None:
        fields.setdefault("threading_model", "Apartment")
        self.directory.register_class(class_id, ClassRegistration(**fields))  # type: ignore[arg-type]

    def widgets_control(self, relative: str = "Widgets.ocx") -> str:
        """A registered control exposing one visible class with a default interface."""
        path = self.binary(
            relative,
            version=(2, 1, 0, 7),
            typelib=TypeLibraryInfo(
                library_id=WIDGETS_LIB,
                major_version=2,
                minor_version=1,
                flags=0x2,
                classes=(
                    CoClassInfo(
                        class_id=GAUGE_CLSID,
                        default_interface=InterfaceInfo(name="_Gauge", interface_id=GAUGE_IID),
                    ),
                ),
            ),
        )
        self.register(WIDGETS_LIB, "2.1", path)
        self.register_class(GAUGE_CLSID, prog_id="Widgets.Gauge")
        self.directory.register_interface(GAUGE_IID, PROXY_STUB_CLSID)
        return path

    def engine_library(self, relative: str = "Engine.dll", *, interface_id: str = ENGINE_IID) -> str:
        path = self.binary(
            relative,
            version=(3, 0, 0, 12),
            typelib=TypeLibraryInfo(
                library_id=ENGINE_LIB,
                major_version=1,
                minor_version=0,
                classes=(
                    CoClassInfo(
                        class_id=ENGINE_CLSID,
                        default_interface=InterfaceInfo(name="_Engine", interface_id=interface_id),
                    ),
                ),
            ),
        )
        self.register(ENGINE_LIB, "1.0", path)
        self.register_class(ENGINE_CLSID, prog_id="Engine.Core")
        return path

    def descriptor(self, relative: str, content: str) -> Path:
        """Write a descriptor file; content is dedented and CRLF-free."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    def project(
        self,
        relative: str,
        *,
        component_type: str = "Exe",
        exe_name: str = "App.exe",
        references: Sequence[str] = (),
        objects: Sequence[str] = (),
        description: str = "Demo",
        version: Sequence[int] = (1, 2, 3),
    ) -> Path:
        lines = [f"Type={component_type}"]
        lines.extend(f"Reference={token}" for token in references)
        lines.extend(f"Object={token}" for token in objects)
        lines.extend(
            [
                f"MajorVer={version[0]}",
                f"MinorVer={version[1]}",
                f"RevisionVer={version[2]}",
                f'ExeName32="{exe_name}"',
                f'Description="{description}"',
            ]
        )
        return self.descriptor(relative, "\n".join(lines) + "\n")

    def extractor(self) -> IdentityExtractor:
        return IdentityExtractor(self.directory, self.introspector, self.version_reader)

    def dependency_builder(self) -> DependencySetBuilder:
        return DependencySetBuilder(ComponentResolver(self.directory), self.extractor())

    def orchestrator(self) -> ManifestOrchestrator:
        return ManifestOrchestrator(self.directory, self.introspector, self.version_reader)


__all__ = [
    "COMCTL_LIB",
    "ComponentBuilder",
    "DIAL_CLSID",
    "ENGINE_CLSID",
    "ENGINE_IID",
    "ENGINE_LIB",
    "GAUGE_CLSID",
    "GAUGE_IID",
    "PROXY_STUB_CLSID",
    "SHAPES_LIB",
    "STDOLE_LIB",
    "WIDGETS_LIB",
    "object_line",
    "reference_line",
]
