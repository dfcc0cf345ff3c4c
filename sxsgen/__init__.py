"""Side-by-side assembly manifest generation for COM components."""

from .orchestrator import GenerationRequest, ManifestOrchestrator, SourceMode

__version__ = "0.1.0"

__all__ = ["GenerationRequest", "ManifestOrchestrator", "SourceMode", "__version__"]
