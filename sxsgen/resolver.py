"""Resolution of reference and object lines to components on disk."""

from __future__ import annotations

import re
from pathlib import Path
from typing import FrozenSet, Optional

from .directory import ComponentDirectory
from .errors import ComponentNotResolvable, IdentifierNotFound, VersionTokenNotFound
from .logging import get_logger
from .models import ComponentReference, ResolutionKind, ResolvedComponent, canonical_path

_GUID_PATTERN = re.compile(
    r"\{[0-9A-F]{8}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{12}\}",
    re.IGNORECASE,
)
_VERSION_PATTERN = re.compile(r"#([0-9]+)\.([0-9]+)#")

# Platform type libraries that never need to be side-by-sided.
EXCLUDED_TYPE_LIBRARIES: FrozenSet[str] = frozenset(
    guid.upper()
    for guid in (
        "{00020430-0000-0000-C000-000000000046}",  # stdole2
        "{420B2830-E718-11CF-893D-00A0C9054228}",  # scrrun
        "{3F4DACA7-160D-11D2-A8E9-00104B365C9F}",  # vbscript regexp
        "{F5078F18-C551-11D3-89B9-0000F81FE221}",  # msxml6
        "{7C0FFAB0-CD84-11D0-949A-00A0C91110ED}",  # msdatsrc
        "{2A75196C-D9EB-4129-B803-931327F72D5C}",  # msado28
    )
)

TYPE_LIBRARY_EXTENSION = ".tlb"


def find_guid(token: str) -> Optional[str]:
    """Return the first braced GUID in ``token``, braces included, or None."""
    match = _GUID_PATTERN.search(token)
    return match.group(0) if match else None


def extract_guid(token: str) -> str:
    guid = find_guid(token)
    if guid is None:
        raise IdentifierNotFound(f"No GUID found in string {token}")
    return guid


def extract_hex_version(token: str) -> str:
    """Return the ``#major.minor#`` marker of ``token`` as ``HEX.HEX``.

    Each number is converted on its own to uppercase hexadecimal without
    padding, which is how type library versions are keyed in the directory.
    """
    match = _VERSION_PATTERN.search(token)
    if match is None:
        raise VersionTokenNotFound(f"No typelib version found in string {token}")
    major, minor = (int(group) for group in match.groups())
    return f"{major:X}.{minor:X}"


def parse_token(token: str) -> ComponentReference:
    return ComponentReference(
        type_library_id=extract_guid(token),
        type_library_version=extract_hex_version(token),
    )


def is_excluded(type_library_id: str) -> bool:
    return type_library_id.upper() in EXCLUDED_TYPE_LIBRARIES


class ComponentResolver:
    """Maps reference and object lines to files via a component directory."""

    def __init__(self, directory: ComponentDirectory, *, base_dir: Path | None = None) -> None:
        self.directory = directory
        self.base_dir = base_dir
        self.logger = get_logger("resolver")

    def resolve_object(self, token: str) -> ResolvedComponent:
        """Resolve an embedded object at exactly the version its line declares."""
        reference = parse_token(token)
        path = self.directory.type_library_path(
            reference.type_library_id, reference.type_library_version
        )
        if not path:
            raise ComponentNotResolvable(
                f"Can't find filename for object {reference.type_library_id} "
                f"version {reference.type_library_version}"
            )
        self.logger.debug(
            "Object %s %s resolved to %s",
            reference.type_library_id,
            reference.type_library_version,
            path,
        )
        return self._resolved(path)

    def resolve_reference(self, token: str) -> Optional[ResolvedComponent]:
        """Resolve a type library reference to its latest registered version.

        Reference lines may carry stale versions, so the declared version is
        ignored and the last version enumerated by the directory wins.
        Returns None for platform libraries that are never side-by-sided.
        """
        reference = parse_token(token)
        if is_excluded(reference.type_library_id):
            self.logger.debug("Skipping platform type library %s", reference.type_library_id)
            return None

        path = ""
        for hex_version, candidate in self.directory.type_library_versions(reference.type_library_id):
            if candidate:
                path = candidate
                self.logger.debug(
                    "Reference %s version %s registered at %s",
                    reference.type_library_id,
                    hex_version,
                    candidate,
                )
        if not path:
            raise ComponentNotResolvable(f"Can't find filename for guid {reference.type_library_id}")
        return self._resolved(path)

    def _resolved(self, path: str) -> ResolvedComponent:
        kind = (
            ResolutionKind.TYPE_LIBRARY
            if path.lower().endswith(TYPE_LIBRARY_EXTENSION)
            else ResolutionKind.BINARY
        )
        return ResolvedComponent(file_path=canonical_path(path, self.base_dir), kind=kind)


__all__ = [
    "ComponentResolver",
    "EXCLUDED_TYPE_LIBRARIES",
    "extract_guid",
    "extract_hex_version",
    "find_guid",
    "is_excluded",
    "parse_token",
]
