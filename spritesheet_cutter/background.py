"""Background color detection by corner sampling."""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .buffer import Color, ImageBuffer
from .errors import BackgroundDetectionFailure


@dataclass(frozen=True)
class BackgroundMatcher:
    """Reference color plus a per-channel tolerance."""
    color: Color
    tolerance: int

    def matches(self, pixel) -> bool:
        """True if every RGBA channel is within tolerance of the reference."""
        return all(abs(int(p) - c) <= self.tolerance for p, c in zip(pixel, self.color))

    def mask(self, pixels: np.ndarray) -> np.ndarray:
        """Boolean mask of background pixels for an (..., 4) uint8 array."""
        reference = np.array(self.color, dtype=np.int16)
        diff = np.abs(pixels.astype(np.int16) - reference)
        return np.all(diff <= self.tolerance, axis=-1)


def corner_regions(buffer: ImageBuffer, sample_size: int):
    """Corner regions in scan order: top-left, top-right, bottom-left, bottom-right.

    Each corner is a square whose side is capped at half the image so the
    four regions never overlap. Returns an empty list when the side is zero.
    """
    side = min(sample_size, buffer.width // 2, buffer.height // 2)
    if side < 1:
        return []

    w, h = buffer.width, buffer.height
    return [
        buffer.region(0, 0, side, side),
        buffer.region(w - side, 0, side, side),
        buffer.region(0, h - side, side, side),
        buffer.region(w - side, h - side, side, side),
    ]


def dominant_color(samples: np.ndarray) -> Color:
    """Most frequent RGBA color in an (N, 4) array.

    Ties go to whichever color appears first in the array.
    """
    packed = samples.astype(np.uint32)
    keys = (packed[:, 0] << 24) | (packed[:, 1] << 16) | (packed[:, 2] << 8) | packed[:, 3]
    unique, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    tied = np.flatnonzero(counts == counts.max())
    winner = tied[np.argmin(first_index[tied])]
    r, g, b, a = samples[first_index[winner]]
    return int(r), int(g), int(b), int(a)


def detect_background(
    buffer: ImageBuffer,
    tolerance: int,
    sample_size: int = 10,
    strict: bool = False
) -> Optional[BackgroundMatcher]:
    """Infer the background color from the image corners.

    Args:
        buffer: Source image
        tolerance: Per-channel tolerance for the returned matcher (0-255)
        sample_size: Side length of each corner region in pixels
        strict: Raise instead of returning None when detection fails

    Returns:
        BackgroundMatcher for the dominant corner color, or None if the image
        is too small to sample

    Raises:
        BackgroundDetectionFailure: If strict and no corner could be sampled
    """
    regions = corner_regions(buffer, sample_size) if not buffer.is_empty else []
    if not regions:
        if strict:
            raise BackgroundDetectionFailure(
                f"Cannot sample corners of {buffer.width}x{buffer.height} image"
            )
        return None

    samples = np.concatenate([region.reshape(-1, 4) for region in regions])
    return BackgroundMatcher(color=dominant_color(samples), tolerance=tolerance)
