"""HTTP service mode for sxsgen."""

from .app import ManifestRequest, create_app, run_service

__all__ = ["ManifestRequest", "create_app", "run_service"]
