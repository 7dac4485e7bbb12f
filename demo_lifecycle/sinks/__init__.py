"""Sink implementations for per-run manifests."""

from .manifest_sink import FileManifestSink, LoggingSink, load_manifest

__all__ = ["FileManifestSink", "LoggingSink", "load_manifest"]
