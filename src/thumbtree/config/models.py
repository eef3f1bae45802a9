"""Configuration models describing thumbtree settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_THUMBNAIL_SIZES = [100, 200, 300, 640, 800, 1024, 1920]
DEFAULT_THUMBNAIL_QUALITIES = [75, 75, 75, 88, 88, 88, 88]


class ThumbtreeBaseModel(BaseModel):
    """Shared configuration for thumbtree Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class GenerationOptions(ThumbtreeBaseModel):
    """Options governing thumbnail and manifest generation.

    Attributes:
        generate_thumbnails: Whether thumbnails are rendered; when False only metadata
            is refreshed and every recorded size list is empty.
        compare_by_hash: Reserved switch for content-hash invalidation. Accepted but
            not consulted; modification time is the only staleness signal.
        thumbnail_sizes: Long-edge target sizes, in output order.
        thumbnail_qualities: JPEG qualities paired index-wise with ``thumbnail_sizes``.
        image_extensions: Case-sensitive file extensions (without dot) treated as images.
        hidden_dirs: Directory base names that are never descended into.
        max_workers: Size of the run-wide render pool; ``None`` uses the CPU count.
    """

    generate_thumbnails: bool = True
    compare_by_hash: bool = False
    thumbnail_sizes: List[int] = Field(default_factory=lambda: list(DEFAULT_THUMBNAIL_SIZES))
    thumbnail_qualities: List[int] = Field(
        default_factory=lambda: list(DEFAULT_THUMBNAIL_QUALITIES)
    )
    image_extensions: List[str] = Field(default_factory=lambda: ["jpg", "JPG"])
    hidden_dirs: List[str] = Field(default_factory=lambda: ["0-sterne", "raw"])
    max_workers: Optional[int] = None

    @field_validator("thumbnail_sizes")
    @classmethod
    def _distinct_positive_sizes(cls, value: List[int]) -> List[int]:
        if any(size <= 0 for size in value):
            raise ValueError("thumbnail sizes must be positive integers")
        if len(set(value)) != len(value):
            raise ValueError("thumbnail sizes must not repeat; each size names one output file")
        return value

    @field_validator("thumbnail_qualities")
    @classmethod
    def _quality_range(cls, value: List[int]) -> List[int]:
        if any(quality < 1 or quality > 100 for quality in value):
            raise ValueError("thumbnail qualities must lie between 1 and 100")
        return value

    @field_validator("image_extensions")
    @classmethod
    def _strip_dots(cls, value: List[str]) -> List[str]:
        return [extension.lstrip(".") for extension in value]

    @field_validator("max_workers")
    @classmethod
    def _worker_count(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    @model_validator(mode="after")
    def _paired_lists(self) -> "GenerationOptions":
        if len(self.thumbnail_sizes) != len(self.thumbnail_qualities):
            raise ValueError(
                "thumbnail_sizes and thumbnail_qualities must have the same length "
                f"({len(self.thumbnail_sizes)} != {len(self.thumbnail_qualities)})"
            )
        return self

    def renditions(self) -> list[tuple[int, int]]:
        """Return the configured (size, quality) pairs in output order."""
        return list(zip(self.thumbnail_sizes, self.thumbnail_qualities))


class LoggingSettings(ThumbtreeBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(ThumbtreeBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class ThumbtreeConfig(ThumbtreeBaseModel):
    """Top-level configuration struct for thumbtree.

    Attributes:
        generation: Thumbnail and manifest generation settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    generation: GenerationOptions = Field(default_factory=GenerationOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ThumbtreeBaseModel",
    "GenerationOptions",
    "LoggingSettings",
    "CLIOptions",
    "ThumbtreeConfig",
    "DEFAULT_THUMBNAIL_SIZES",
    "DEFAULT_THUMBNAIL_QUALITIES",
]
