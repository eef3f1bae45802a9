"""Directory walking and incremental generation."""

from .discovery import DirectoryListing, DirectoryScanner
from .fingerprint import HashComputer
from .models import GenerationResult
from .pipeline import GenerationError, GenerationPipeline
from .progress import TreeReporter

__all__ = [
    "DirectoryListing",
    "DirectoryScanner",
    "HashComputer",
    "GenerationResult",
    "GenerationError",
    "GenerationPipeline",
    "TreeReporter",
]
