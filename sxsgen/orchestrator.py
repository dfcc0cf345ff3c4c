"""Pipeline orchestration: one entry point for every manifest source mode."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .assembler import ManifestAssembler
from .config import SxsGenConfig
from .dependencies import DependencySetBuilder
from .descriptor import load_descriptor
from .directory import ComponentDirectory, create_registry_directory
from .errors import InputFileMissing, ManifestError
from .identity import IdentityExtractor
from .introspection import (
    TypeLibraryIntrospector,
    VersionReader,
    create_introspector,
    create_version_reader,
)
from .logging import get_logger
from .models import AssemblyIdentity, DependencySet, ManifestDocument, canonical_path, file_stem
from .resolver import ComponentResolver
from .snapshot import load_snapshot


class SourceMode(str, Enum):
    PROJECT = "project"
    BINARY = "binary"
    FILE_SET = "fileSet"
    EXPLICIT_IDENTITIES = "explicitIdentities"


@dataclass(frozen=True)
class GenerationRequest:
    """Everything one generation run needs, already validated by the caller.

    ``source`` is the project file (``PROJECT``) or binary (``BINARY``);
    ``files`` lists the members of a ``FILE_SET``. ``assembly_name``,
    ``assembly_version`` and ``description`` name the assembly for
    ``FILE_SET`` and ``EXPLICIT_IDENTITIES``; ``description`` is also used in
    ``BINARY`` mode.
    """

    mode: SourceMode
    source: Optional[Path] = None
    files: Tuple[str, ...] = ()
    base_dir: Optional[Path] = None
    assembly_name: str = ""
    assembly_version: str = ""
    description: str = ""
    inline: bool = False
    use_common_controls: bool = False
    dependency_overrides: Optional[Tuple[str, ...]] = None


@dataclass
class GenerationResult:
    """Rendered manifest bytes and the document they were rendered from."""

    document: ManifestDocument
    data: io.BytesIO = field(repr=False)


class ManifestOrchestrator:
    """Coordinates descriptor parsing, resolution, extraction and assembly."""

    def __init__(
        self,
        directory: ComponentDirectory,
        introspector: TypeLibraryIntrospector,
        version_reader: VersionReader,
        *,
        resolver_base_dir: Path | None = None,
        assembler: ManifestAssembler | None = None,
    ) -> None:
        self.directory = directory
        self.resolver = ComponentResolver(directory, base_dir=resolver_base_dir)
        self.extractor = IdentityExtractor(directory, introspector, version_reader)
        self.builder = DependencySetBuilder(self.resolver, self.extractor)
        self.assembler = assembler or ManifestAssembler(directory)
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_config(cls, config: SxsGenConfig) -> "ManifestOrchestrator":
        """Wire up the collaborators selected by ``config``."""
        if config.directory.backend == "snapshot" and config.directory.snapshot is not None:
            snapshot = load_snapshot(config.directory.snapshot)
            return cls(
                snapshot.directory,
                snapshot.introspector,
                snapshot.version_reader,
                resolver_base_dir=snapshot.root,
            )
        return cls(create_registry_directory(), create_introspector(), create_version_reader())

    def generate(self, request: GenerationRequest) -> io.BytesIO:
        """Generate the manifest for ``request`` as a rewound UTF-8 byte buffer."""
        return self.run(request).data

    def run(self, request: GenerationRequest) -> GenerationResult:
        self.logger.info("Generating %s manifest", request.mode.value)
        try:
            document = self._build_document(request)
            data = self.assembler.assemble(document)
        except ManifestError as exc:
            self.logger.error("Manifest generation failed (%s): %s", exc.kind, exc)
            raise
        self.logger.info(
            "Manifest for %s %s has %d entries",
            document.identity.name,
            document.identity.version,
            len(document.entries),
        )
        return GenerationResult(document=document, data=data)

    def _build_document(self, request: GenerationRequest) -> ManifestDocument:
        if request.mode is SourceMode.PROJECT:
            return self._project_document(request)
        if request.mode is SourceMode.BINARY:
            return self._binary_document(request)
        if request.mode is SourceMode.FILE_SET:
            dependencies = self.builder.build_for_files(
                request.files, inline=request.inline, base_dir=request.base_dir
            )
            return _document(request.assembly_name, request.assembly_version, request.description, dependencies)
        if request.mode is SourceMode.EXPLICIT_IDENTITIES:
            dependencies = self.builder.build_for_identities(request.dependency_overrides or ())
            return _document(request.assembly_name, request.assembly_version, request.description, dependencies)
        raise ValueError(f"Unsupported source mode: {request.mode!r}")  # pragma: no cover

    def _project_document(self, request: GenerationRequest) -> ManifestDocument:
        project_file = _require_file(request.source, "Project file")
        descriptor = load_descriptor(project_file)
        dependencies = self.builder.build_for_project(
            descriptor,
            project_file.parent,
            inline=request.inline,
            use_common_controls=request.use_common_controls,
            overrides=request.dependency_overrides,
        )
        return _document(descriptor.assembly_name, descriptor.version, descriptor.description, dependencies)

    def _binary_document(self, request: GenerationRequest) -> ManifestDocument:
        binary = _require_file(request.source, "Object file")
        path = canonical_path(binary)
        version = self.extractor.file_version(path)
        dependencies = self.builder.build_for_binary(path)
        return _document(file_stem(path), version, request.description, dependencies)


def _document(name: str, version: str, description: str, dependencies: DependencySet) -> ManifestDocument:
    return ManifestDocument(
        identity=AssemblyIdentity(name=name, version=version),
        description=description,
        entries=list(dependencies.entries),
        interfaces=list(dependencies.interfaces),
    )


def _require_file(path: Optional[Path], label: str) -> Path:
    if path is None or not Path(path).is_file():
        raise InputFileMissing(f"{label} does not exist: {path}")
    return Path(path)


def merge_override_lines(*sources: Sequence[str]) -> Optional[Tuple[str, ...]]:
    """Union dependency identity lines from several files, in order.

    Blank lines and ``//`` comments are dropped; returns None when no source
    was supplied at all so that descriptor-driven resolution applies.
    """
    if not sources:
        return None
    merged: List[str] = []
    seen = set()
    for lines in sources:
        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("//") or stripped in seen:
                continue
            seen.add(stripped)
            merged.append(stripped)
    return tuple(merged)


__all__ = [
    "GenerationRequest",
    "GenerationResult",
    "ManifestOrchestrator",
    "SourceMode",
    "merge_override_lines",
]
