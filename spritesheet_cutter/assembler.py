"""Turn split lines into validated frame rectangles."""

import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .boundaries import Axis, SplitLine, empty_ratios
from .config import FALLBACK_EMPTY_RATIO, CutterConfig


@dataclass(frozen=True)
class FrameRect:
    """A frame region in source-image coordinates."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) as used by PIL's crop."""
        return self.x, self.y, self.right, self.bottom


def span_edges(splits: Iterable[int], extent: int, min_size: int) -> List[int]:
    """Edges of the spans along one axis, always starting at 0 and ending at extent.

    Interior splits closer than min_size to the previously kept edge are
    dropped. If the last span comes out too small, the last interior split
    is dropped so the final span absorbs it. The image bounds are never
    dropped.

    Args:
        splits: Split coordinates (any order, may include 0 or extent)
        extent: Image width or height
        min_size: Minimum span size

    Returns:
        Ascending edge coordinates, at least [0, extent]
    """
    edges = [0]
    for split in sorted(set(splits)):
        if split <= 0 or split >= extent:
            continue
        if split - edges[-1] >= min_size:
            edges.append(split)

    if len(edges) > 1 and extent - edges[-1] < min_size:
        edges.pop()
    edges.append(extent)
    return edges


def content_ratio(empty: np.ndarray, rect: FrameRect) -> float:
    """Fraction of non-empty pixels inside rect."""
    region = empty[rect.y:rect.bottom, rect.x:rect.right]
    if region.size == 0:
        return 0.0
    return 1.0 - float(region.mean())


def is_valid_frame(rect: FrameRect, empty: np.ndarray, config: CutterConfig) -> bool:
    """Check the size bounds, image bounds and content threshold."""
    height, width = empty.shape
    if not config.min_sprite_size <= rect.width <= config.max_sprite_size:
        return False
    if not config.min_sprite_size <= rect.height <= config.max_sprite_size:
        return False
    if rect.x < 0 or rect.y < 0 or rect.right > width or rect.bottom > height:
        return False
    return content_ratio(empty, rect) >= config.min_content_ratio


def rects_from_edges(xs: Sequence[int], ys: Sequence[int]) -> List[FrameRect]:
    """Every cell of the grid formed by the edges, in row-major order."""
    rects = []
    for top, bottom in zip(ys, ys[1:]):
        for left, right in zip(xs, xs[1:]):
            rects.append(FrameRect(x=left, y=top, width=right - left, height=bottom - top))
    return rects


def assemble_frames(
    vertical: Sequence[SplitLine],
    horizontal: Sequence[SplitLine],
    empty: np.ndarray,
    config: CutterConfig
) -> List[FrameRect]:
    """Intersect split lines into frames and keep the valid ones.

    Args:
        vertical: Column splits from the boundary scanner
        horizontal: Row splits from the boundary scanner
        empty: Boolean empty-pixel mask of the source (height, width)
        config: Size and content thresholds

    Returns:
        Valid frames, top to bottom then left to right
    """
    height, width = empty.shape
    if width == 0 or height == 0:
        return []

    xs = span_edges((line.coordinate for line in vertical), width, config.min_sprite_size)
    ys = span_edges((line.coordinate for line in horizontal), height, config.min_sprite_size)

    return [rect for rect in rects_from_edges(xs, ys) if is_valid_frame(rect, empty, config)]


def strip_edges(empty: np.ndarray, axis: Axis, min_size: int) -> List[int]:
    """Edges for strip detection: every strongly empty line is a boundary."""
    ratios = empty_ratios(empty, axis)
    extent = len(ratios)
    boundaries = np.flatnonzero(ratios > FALLBACK_EMPTY_RATIO)
    # First and last lines are image bounds already
    boundaries = [int(b) for b in boundaries if 0 < b < extent - 1]
    return span_edges(boundaries, extent, min_size)


def fallback_frames(empty: np.ndarray, config: CutterConfig) -> List[FrameRect]:
    """Detect single-row or single-column strips of frames.

    Tried when the grid pass finds nothing: first full-height vertical
    strips, then full-width horizontal strips.
    """
    height, width = empty.shape
    if width == 0 or height == 0:
        return []

    xs = strip_edges(empty, Axis.VERTICAL, config.min_sprite_size)
    if len(xs) > 2:
        frames = [rect for rect in rects_from_edges(xs, [0, height])
                  if is_valid_frame(rect, empty, config)]
        if frames:
            return frames

    ys = strip_edges(empty, Axis.HORIZONTAL, config.min_sprite_size)
    if len(ys) > 2:
        return [rect for rect in rects_from_edges([0, width], ys)
                if is_valid_frame(rect, empty, config)]

    return []
