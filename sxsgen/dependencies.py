"""Aggregation of dependencies into an ordered list of manifest entries."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Set

from .descriptor import load_descriptor
from .errors import InputFileMissing, InvalidComponentType, MalformedDescriptor
from .identity import IdentityExtractor, InterfaceRegistry
from .logging import get_logger
from .models import (
    AssemblyIdentity,
    DependencySet,
    DependentAssemblyEntry,
    FileEntry,
    ManifestEntry,
    ProjectDescriptor,
    RawDependentAssemblyEntry,
    ResolutionKind,
    ResolvedComponent,
    canonical_path,
    file_extension,
)
from .resolver import ComponentResolver, find_guid

COMMON_CONTROLS_IDENTITY = AssemblyIdentity(
    name="Microsoft.Windows.Common-Controls",
    version="6.0.0.0",
    public_key_token="6595b64144ccf1df",
)

# COMCTL32.OCX (Microsoft Windows Common Controls 5.0), which themes through comctl32 v6.
COMMON_CONTROLS_TYPE_LIBRARIES: FrozenSet[str] = frozenset(
    {"{6B7E6392-850A-101B-AFC0-4210102A8DA7}"}
)

BINARY_EXTENSIONS = frozenset({".dll", ".ocx"})
PROJECT_EXTENSION = ".vbp"


@dataclass
class _BuildState:
    """Mutable state owned by a single build call."""

    entries: List[ManifestEntry] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)
    interfaces: InterfaceRegistry = field(default_factory=InterfaceRegistry)

    def result(self) -> DependencySet:
        return DependencySet(entries=list(self.entries), interfaces=self.interfaces.records())


class DependencySetBuilder:
    """Builds the dependency section of a manifest for each entry mode."""

    def __init__(self, resolver: ComponentResolver, extractor: IdentityExtractor) -> None:
        self.resolver = resolver
        self.extractor = extractor
        self.logger = get_logger("dependencies")

    def build_for_project(
        self,
        descriptor: ProjectDescriptor,
        project_dir: Path,
        *,
        inline: bool = False,
        use_common_controls: bool = False,
        overrides: Optional[Sequence[str]] = None,
    ) -> DependencySet:
        """Dependencies of one project, in descriptor order.

        Libraries and controls additionally inline their own output binary so
        the manifest describes the classes they expose.
        """
        state = _BuildState()

        if needs_common_controls(descriptor, use_common_controls) and not _overrides_name(
            overrides, COMMON_CONTROLS_IDENTITY.name
        ):
            self.logger.debug("Adding %s dependency", COMMON_CONTROLS_IDENTITY.name)
            state.entries.append(DependentAssemblyEntry(COMMON_CONTROLS_IDENTITY))

        if overrides is not None:
            self._add_overrides(state, overrides)
        else:
            for token in descriptor.reference_tokens:
                component = self.resolver.resolve_reference(token)
                if component is not None:
                    self._emit(state, component, inline=inline)
            for token in descriptor.object_tokens:
                self._emit(state, self.resolver.resolve_object(token), inline=inline)

        if descriptor.is_library:
            own_binary = ResolvedComponent(project_output_path(descriptor, project_dir))
            self._emit(state, own_binary, inline=True)

        return state.result()

    def build_for_binary(self, path: str) -> DependencySet:
        state = _BuildState()
        self._emit(state, ResolvedComponent(canonical_path(path)), inline=True)
        return state.result()

    def build_for_files(
        self,
        paths: Iterable[str],
        *,
        inline: bool = False,
        base_dir: Path | None = None,
    ) -> DependencySet:
        """Dependencies of a multi-file assembly; every member is inlined."""
        state = _BuildState()
        for component in self.collect_files(paths, inline=inline, base_dir=base_dir):
            self._emit(state, component, inline=True)
        return state.result()

    def build_for_identities(self, overrides: Sequence[str]) -> DependencySet:
        state = _BuildState()
        self._add_overrides(state, overrides)
        return state.result()

    def collect_files(
        self,
        paths: Iterable[str],
        *,
        inline: bool = False,
        base_dir: Path | None = None,
    ) -> List[ResolvedComponent]:
        """Merge project and binary files into an ordered, duplicate-free member list.

        When ``inline`` is set, each project's references and objects are
        pulled in as members too.
        """
        members: List[ResolvedComponent] = []
        seen: Set[str] = set()

        def include(component: ResolvedComponent) -> None:
            if component.key in seen:
                self.logger.debug("Ignoring duplicate assembly file %s", component.file_path)
                return
            seen.add(component.key)
            members.append(component)

        for raw in paths:
            path = canonical_path(raw, base_dir)
            if not Path(path).is_file():
                raise InputFileMissing(f"Project file or object file does not exist: {path}")
            extension = file_extension(path)
            if extension in BINARY_EXTENSIONS:
                include(ResolvedComponent(path))
            elif extension == PROJECT_EXTENSION:
                self._collect_project(Path(path), inline, include)
            else:
                raise InvalidComponentType(
                    f"Invalid filename: must be a project file, a dll or an ocx file: {path}"
                )
        return members

    def _collect_project(
        self,
        path: Path,
        inline: bool,
        include: Callable[[ResolvedComponent], None],
    ) -> None:
        descriptor = load_descriptor(path)
        if not descriptor.is_library:
            raise InvalidComponentType(
                f"Invalid project type: must be ActiveX Dll or ActiveX Control: {path}"
            )
        include(ResolvedComponent(project_output_path(descriptor, path.parent)))
        if not inline:
            return
        for token in descriptor.reference_tokens:
            component = self.resolver.resolve_reference(token)
            if component is not None:
                include(component)
        for token in descriptor.object_tokens:
            include(self.resolver.resolve_object(token))

    def _emit(self, state: _BuildState, component: ResolvedComponent, *, inline: bool) -> None:
        if component.key in state.seen:
            self.logger.debug("Already emitted %s", component.file_path)
            return
        if not Path(component.file_path).is_file():
            raise InputFileMissing(f"Object file does not exist: {component.file_path}")
        state.seen.add(component.key)

        if component.kind is ResolutionKind.TYPE_LIBRARY:
            info = self.extractor.inspect(component.file_path)
            typelib = self.extractor.type_library(info, include_classes=False)
            state.entries.append(FileEntry(name=component.file_name, typelib=typelib))
        elif inline:
            info = self.extractor.inspect(component.file_path)
            state.entries.append(
                FileEntry(name=component.file_name, typelib=self.extractor.type_library(info))
            )
            state.interfaces.extend(self.extractor.interfaces(info))
        else:
            identity = self.extractor.dependent_identity(component.file_path)
            state.entries.append(DependentAssemblyEntry(identity))
        self.logger.debug(
            "Emitted %s entry for %s", type(state.entries[-1]).__name__, component.file_path
        )

    def _add_overrides(self, state: _BuildState, overrides: Sequence[str]) -> None:
        for xml in overrides:
            state.entries.append(RawDependentAssemblyEntry(validate_identity_markup(xml)))


def needs_common_controls(descriptor: ProjectDescriptor, requested: bool) -> bool:
    """Executables get the v6 Common Controls when asked or when they embed COMCTL32."""
    if descriptor.is_library:
        return False
    if requested:
        return True
    for token in descriptor.object_tokens:
        guid = find_guid(token)
        if guid is not None and guid.upper() in COMMON_CONTROLS_TYPE_LIBRARIES:
            return True
    return False


def project_output_path(descriptor: ProjectDescriptor, project_dir: Path) -> str:
    """Canonical path of the binary a project builds (``Path32`` + ``ExeName32``)."""
    parts = [part for part in (descriptor.output_directory, descriptor.output_file_name) if part]
    return canonical_path("\\".join(parts), project_dir)


def validate_identity_markup(xml: str) -> str:
    """Check that ``xml`` is a single well-formed ``assemblyIdentity`` element."""
    text = xml.strip()
    _parse_identity_markup(text)
    return text


def identity_markup_name(xml: str) -> Optional[str]:
    """Return the ``name`` attribute of an ``assemblyIdentity`` override."""
    return _parse_identity_markup(xml.strip()).get("name")


def _overrides_name(overrides: Optional[Sequence[str]], name: str) -> bool:
    if not overrides:
        return False
    return any(identity_markup_name(xml) == name for xml in overrides)


def _parse_identity_markup(text: str) -> ET.Element:
    try:
        element = ET.fromstring(text)
    except ET.ParseError as exc:
        raise MalformedDescriptor(
            f"Dependent assembly identity is not well-formed XML: {text} ({exc})"
        ) from exc
    tag = element.tag.rsplit("}", 1)[-1]
    if tag != "assemblyIdentity":
        raise MalformedDescriptor(f"Expected an assemblyIdentity element, found <{tag}>: {text}")
    return element


__all__ = [
    "COMMON_CONTROLS_IDENTITY",
    "COMMON_CONTROLS_TYPE_LIBRARIES",
    "DependencySetBuilder",
    "identity_markup_name",
    "needs_common_controls",
    "project_output_path",
    "validate_identity_markup",
]
