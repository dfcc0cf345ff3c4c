"""Component directory backends."""

from .base import ComponentDirectory
from .memory import InMemoryComponentDirectory


def create_registry_directory() -> ComponentDirectory:
    """Return the Windows registry backed directory."""
    from .registry import RegistryComponentDirectory

    return RegistryComponentDirectory()


__all__ = ["ComponentDirectory", "InMemoryComponentDirectory", "create_registry_directory"]
