"""Configuration for the spritesheet cutter."""

from dataclasses import dataclass, replace as _replace

# Pixels at or below this alpha count as transparent
ALPHA_EMPTY_THRESHOLD = 10

# Mean luminance jump (0-255) between neighbouring columns/rows that marks an edge
EDGE_MAGNITUDE_THRESHOLD = 40.0

# Empty ratio a line must exceed to become a fallback strip boundary
FALLBACK_EMPTY_RATIO = 0.85

# Output settings
DEFAULT_OUTPUT_DIR = "assets2"
DEFAULT_NAME_TEMPLATE = "{name}_frame_{index:03d}.png"
OUTPUT_FORMAT = "PNG"

# Supported input formats
SUPPORTED_INPUT_FORMATS = [".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"]


@dataclass(frozen=True)
class CutterConfig:
    """Settings for one cutting run. Read-only once created."""
    min_sprite_size: int = 8
    max_sprite_size: int = 1024
    background_tolerance: int = 20
    remove_background: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR
    name_template: str = DEFAULT_NAME_TEMPLATE
    corner_sample_size: int = 10
    empty_ratio_threshold: float = 0.80
    min_content_ratio: float = 0.05
    edge_threshold: float = EDGE_MAGNITUDE_THRESHOLD
    fallback_detection: bool = True
    keep_unsplit: bool = False  # Emit the whole image when no frames are found
    workers: int = 1

    def __post_init__(self):
        if self.min_sprite_size < 1:
            raise ValueError(f"min_sprite_size must be positive, got {self.min_sprite_size}")
        if self.max_sprite_size < self.min_sprite_size:
            raise ValueError(
                f"max_sprite_size ({self.max_sprite_size}) must be >= "
                f"min_sprite_size ({self.min_sprite_size})"
            )
        if not 0 <= self.background_tolerance <= 255:
            raise ValueError(
                f"background_tolerance must be 0-255, got {self.background_tolerance}"
            )
        if self.corner_sample_size < 1:
            raise ValueError(
                f"corner_sample_size must be positive, got {self.corner_sample_size}"
            )
        if not 0.0 < self.empty_ratio_threshold <= 1.0:
            raise ValueError(
                f"empty_ratio_threshold must be in (0, 1], got {self.empty_ratio_threshold}"
            )
        if not 0.0 <= self.min_content_ratio <= 1.0:
            raise ValueError(
                f"min_content_ratio must be in [0, 1], got {self.min_content_ratio}"
            )
        if self.edge_threshold < 0:
            raise ValueError(f"edge_threshold must be non-negative, got {self.edge_threshold}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if "{index" not in self.name_template:
            raise ValueError(
                f"name_template must contain an {{index}} field, got {self.name_template!r}"
            )
        try:
            sample = self.name_template.format(name="sheet", index=1)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"name_template must only use {{name}} and {{index}} fields, "
                f"got {self.name_template!r}: {e!r}"
            ) from e
        if not sample.lower().endswith(".png"):
            raise ValueError(f"name_template must end in .png, got {self.name_template!r}")

    def replace(self, **changes) -> "CutterConfig":
        """Return a copy with the given fields changed."""
        return _replace(self, **changes)
