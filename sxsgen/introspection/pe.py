"""File version reader for PE binaries, built on ``pefile``."""

from __future__ import annotations

from typing import Optional

import pefile

from ..logging import get_logger
from .base import FileVersion, VersionReader

_LOGGER = get_logger("introspection.pe")

_RESOURCE_DIRECTORY = pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_RESOURCE"]


class PeVersionReader(VersionReader):
    """Reads ``VS_FIXEDFILEINFO`` from the resource section of a PE file."""

    def read(self, path: str) -> Optional[FileVersion]:
        try:
            pe = pefile.PE(path, fast_load=True)
        except (pefile.PEFormatError, OSError) as exc:
            _LOGGER.debug("Cannot parse %s as a PE image: %s", path, exc)
            return None
        try:
            pe.parse_data_directories(directories=[_RESOURCE_DIRECTORY])
            fixed = getattr(pe, "VS_FIXEDFILEINFO", None)
            if not fixed:
                return None
            # Newer pefile releases expose a list with one entry per version resource.
            info = fixed[0] if isinstance(fixed, list) else fixed
            return (
                info.FileVersionMS >> 16,
                info.FileVersionMS & 0xFFFF,
                info.FileVersionLS >> 16,
                info.FileVersionLS & 0xFFFF,
            )
        finally:
            pe.close()


__all__ = ["PeVersionReader"]
