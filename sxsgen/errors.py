"""Error taxonomy for manifest generation.

Every error here is terminal for the current run: the pipeline is a single
pass and a failure leaves no manifest output behind.
"""

from __future__ import annotations


class ManifestError(RuntimeError):
    """Base class for failures raised by the generation pipeline."""

    kind = "ManifestError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MalformedDescriptor(ManifestError):
    """A recognised descriptor key carries a value that cannot be parsed."""

    kind = "MalformedDescriptor"


class IdentifierNotFound(ManifestError):
    """No GUID could be extracted from a reference or object line."""

    kind = "IdentifierNotFound"


class VersionTokenNotFound(ManifestError):
    """No ``#major.minor#`` marker could be extracted from a reference or object line."""

    kind = "VersionTokenNotFound"


class InvalidComponentType(ManifestError):
    """The project or file type is not valid for the requested operation."""

    kind = "InvalidComponentType"


class ComponentNotResolvable(ManifestError):
    """The component directory has no file for a required type library."""

    kind = "ComponentNotResolvable"


class VersionInfoUnavailable(ManifestError):
    """A binary carries no version resource."""

    kind = "VersionInfoUnavailable"


class TypeLibraryUnavailable(ManifestError):
    """The type library of a binary could not be opened."""

    kind = "TypeLibraryUnavailable"


class InputFileMissing(ManifestError):
    """A declared project, binary or descriptor path does not exist."""

    kind = "InputFileMissing"


__all__ = [
    "ComponentNotResolvable",
    "IdentifierNotFound",
    "InputFileMissing",
    "InvalidComponentType",
    "MalformedDescriptor",
    "ManifestError",
    "TypeLibraryUnavailable",
    "VersionInfoUnavailable",
    "VersionTokenNotFound",
]
