"""Renders manifest documents to canonical side-by-side manifest XML."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, List, Tuple

from jinja2 import Environment, FileSystemLoader

from .directory import ComponentDirectory
from .logging import get_logger
from .models import (
    AssemblyIdentity,
    ComClassRecord,
    DependentAssemblyEntry,
    FileEntry,
    InterfaceRecord,
    ManifestDocument,
    ManifestEntry,
    RawDependentAssemblyEntry,
    TypeLibraryRecord,
)

Attributes = List[Tuple[str, str]]

MANIFEST_TEMPLATE = "manifest.xml.j2"
ENCODING = "utf-8"


class ManifestAssembler:
    """Serialises a :class:`ManifestDocument` through the manifest template.

    Proxy/stub classes are looked up in the component directory while
    rendering; interfaces without one get an empty ``proxyStubClsid32``.
    """

    def __init__(self, directory: ComponentDirectory, templates_dir: Path | None = None) -> None:
        self.directory = directory
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.logger = get_logger("assembler")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, document: ManifestDocument) -> str:
        template = self._env.get_template(MANIFEST_TEMPLATE)
        rendered = template.render(
            identity=identity_attributes(document.identity),
            description=document.description,
            entries=[self._entry_context(entry) for entry in document.entries],
            interfaces=[self._interface_attributes(record) for record in document.interfaces],
        )
        self.logger.debug(
            "Rendered manifest %s with %d entries and %d interfaces",
            document.identity.name,
            len(document.entries),
            len(document.interfaces),
        )
        return rendered

    def assemble(self, document: ManifestDocument) -> io.BytesIO:
        """Render ``document`` into a rewound UTF-8 byte buffer."""
        buffer = io.BytesIO(self.render(document).encode(ENCODING))
        buffer.seek(0)
        return buffer

    def _entry_context(self, entry: ManifestEntry) -> Dict[str, object]:
        if isinstance(entry, FileEntry):
            return {
                "kind": "file",
                "name": entry.name,
                "typelib": typelib_attributes(entry.typelib),
                "classes": [
                    {"attributes": com_class_attributes(record), "progid": record.nested_prog_id}
                    for record in entry.typelib.classes
                ],
            }
        if isinstance(entry, RawDependentAssemblyEntry):
            return {"kind": "raw", "xml": entry.xml}
        if isinstance(entry, DependentAssemblyEntry):
            return {"kind": "dependency", "identity": identity_attributes(entry.identity)}
        raise TypeError(f"Unsupported manifest entry: {entry!r}")

    def _interface_attributes(self, record: InterfaceRecord) -> Attributes:
        proxy_stub = (
            record.proxy_stub_class_id
            or self.directory.proxy_stub_class_id(record.interface_id)
            or ""
        )
        return [
            ("name", record.name),
            ("iid", record.interface_id),
            ("proxyStubClsid32", proxy_stub),
        ]


def identity_attributes(identity: AssemblyIdentity) -> Attributes:
    attributes = [
        ("name", identity.name),
        ("processorArchitecture", identity.processor_architecture),
        ("type", identity.type),
        ("version", identity.version),
    ]
    if identity.public_key_token:
        attributes.append(("publicKeyToken", identity.public_key_token))
    return attributes


def typelib_attributes(typelib: TypeLibraryRecord) -> Attributes:
    return [
        ("tlbid", typelib.library_id),
        ("version", typelib.version),
        ("flags", typelib.flags),
        ("helpdir", ""),
    ]


def com_class_attributes(record: ComClassRecord) -> Attributes:
    attributes = [("clsid", record.class_id), ("tlbid", record.type_library_id)]
    if record.prog_id:
        attributes.append(("progid", record.prog_id))
    if record.threading_model:
        attributes.append(("threadingModel", record.threading_model))
    attributes.extend(record.misc_status)
    return attributes


__all__ = [
    "ENCODING",
    "MANIFEST_TEMPLATE",
    "ManifestAssembler",
    "com_class_attributes",
    "identity_attributes",
    "typelib_attributes",
]
