"""Parser for legacy ``Key=Value`` project descriptor files (``.vbp``)."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .errors import InputFileMissing, MalformedDescriptor
from .logging import get_logger
from .models import ComponentType, ProjectDescriptor

_LOGGER = get_logger("descriptor")

_TYPE_VALUES: Dict[str, ComponentType] = {member.value: member for member in ComponentType}

_VERSION_KEYS = {
    "MajorVer": "major_version",
    "MinorVer": "minor_version",
    "RevisionVer": "revision_version",
}

_QUOTED_KEYS = {
    "Description": "description",
    "ExeName32": "output_file_name",
    "Path32": "output_directory",
}


def parse_descriptor(text: str) -> ProjectDescriptor:
    """Parse descriptor text into a :class:`ProjectDescriptor`.

    Unrecognised keys, blank lines and lines without ``=`` are ignored.
    ``Reference`` and ``Object`` lines accumulate in file order.
    """
    fields: Dict[str, object] = {}
    references: List[str] = []
    objects: List[str] = []

    for line_number, line in enumerate(_split_lines(text), start=1):
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue

        if key == "Type":
            fields["component_type"] = _parse_type(value, line_number)
        elif key in _VERSION_KEYS:
            fields[_VERSION_KEYS[key]] = _parse_version_part(key, value, line_number)
        elif key in _QUOTED_KEYS:
            fields[_QUOTED_KEYS[key]] = trim_delimiters(value)
        elif key == "Reference":
            references.append(value)
        elif key == "Object":
            objects.append(value)

    descriptor = ProjectDescriptor(
        reference_tokens=tuple(references),
        object_tokens=tuple(objects),
        **fields,  # type: ignore[arg-type]
    )
    _LOGGER.debug(
        "Parsed %s descriptor %s with %d references and %d objects",
        descriptor.component_type.value,
        descriptor.output_file_name or "(unnamed)",
        len(references),
        len(objects),
    )
    return descriptor


def load_descriptor(path: Path) -> ProjectDescriptor:
    """Read and parse a descriptor file from disk."""
    if not path.is_file():
        raise InputFileMissing(f"Project file does not exist: {path}")
    # Legacy descriptors are ANSI encoded; undecodable bytes only ever appear in free text.
    # A leading byte-order mark would otherwise stick to the first key.
    text = path.read_text(encoding="utf-8-sig", errors="replace")
    return parse_descriptor(text)


def trim_delimiters(value: str) -> str:
    """Drop the first and last character of ``value``.

    The characters are not checked: descriptors quote string values, and
    whatever delimits them is discarded as-is.
    """
    return value[1:-1]


def _split_lines(text: str) -> List[str]:
    """Split on CR, LF and CRLF only; other control characters stay inside values."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def _parse_type(value: str, line_number: int) -> ComponentType:
    component_type = _TYPE_VALUES.get(value)
    if component_type is None:
        raise MalformedDescriptor(
            f"Wrong project type {value!r} on line {line_number}: expected Exe, OleDll or Control"
        )
    return component_type


def _parse_version_part(key: str, value: str, line_number: int) -> int:
    try:
        number = int(value.strip())
    except ValueError:
        raise MalformedDescriptor(
            f"{key} on line {line_number} is not an integer: {value!r}"
        ) from None
    if number < 0:
        raise MalformedDescriptor(f"{key} on line {line_number} is negative: {number}")
    return number


__all__ = ["load_descriptor", "parse_descriptor", "trim_delimiters"]
