"""Manifest store errors."""


class ManifestError(Exception):
    """Base exception for manifest store operations."""


class MissingManifestError(ManifestError):
    """Raised when a directory has no manifest yet."""


class CorruptManifestError(ManifestError):
    """Raised when a manifest exists but cannot be parsed or validated."""
