"""Candidate split detection along image columns and rows.

A column (or row) is a split candidate when it is mostly empty, meaning
transparent or background-colored, or when its luminance jumps sharply
against the previous column. Runs of adjacent candidates collapse to a
single split at the run's midpoint so one physical gap yields one split.
"""

import cv2
import numpy as np
from concurrent.futures import Executor
from dataclasses import dataclass
from enum import Enum
from scipy import ndimage
from typing import List, Optional, Tuple

from .background import BackgroundMatcher
from .buffer import ImageBuffer
from .config import ALPHA_EMPTY_THRESHOLD, EDGE_MAGNITUDE_THRESHOLD, CutterConfig


class Axis(Enum):
    VERTICAL = "vertical"      # split at a column (x coordinate)
    HORIZONTAL = "horizontal"  # split at a row (y coordinate)


class SplitKind(Enum):
    TRANSPARENCY = "transparency"
    EDGE = "edge"


@dataclass(frozen=True)
class SplitLine:
    """A candidate frame boundary."""
    axis: Axis
    coordinate: int
    kind: SplitKind


def empty_mask(buffer: ImageBuffer, matcher: Optional[BackgroundMatcher] = None) -> np.ndarray:
    """Boolean (height, width) mask of transparent or background pixels."""
    mask = buffer.pixels[:, :, 3] <= ALPHA_EMPTY_THRESHOLD
    if matcher is not None:
        mask |= matcher.mask(buffer.pixels)
    return mask


def luminance(buffer: ImageBuffer) -> np.ndarray:
    """Alpha-premultiplied luma as float32 (height, width).

    Premultiplying keeps the RGB of invisible pixels from registering as edges.
    """
    if buffer.is_empty:
        return np.zeros((buffer.height, buffer.width), dtype=np.float32)
    pixels = np.ascontiguousarray(buffer.pixels)
    # BT.601 weights (0.299, 0.587, 0.114)
    gray = cv2.cvtColor(pixels, cv2.COLOR_RGBA2GRAY).astype(np.float32)
    alpha = pixels[:, :, 3].astype(np.float32) / 255.0
    return gray * alpha


def empty_ratios(empty: np.ndarray, axis: Axis) -> np.ndarray:
    """Fraction of empty pixels per column (VERTICAL) or per row (HORIZONTAL)."""
    return empty.mean(axis=0 if axis is Axis.VERTICAL else 1)


def edge_magnitudes(luma: np.ndarray, axis: Axis) -> np.ndarray:
    """Mean absolute luma change of each line against the previous one.

    The first line has no predecessor and gets 0. luma must be non-empty.
    """
    if axis is Axis.VERTICAL:
        steps = np.abs(np.diff(luma, axis=1)).mean(axis=0)
    else:
        steps = np.abs(np.diff(luma, axis=0)).mean(axis=1)
    return np.concatenate([np.zeros(1, dtype=steps.dtype), steps])


def collapse_runs(
    candidates: np.ndarray,
    transparent: np.ndarray,
    axis: Axis
) -> List[SplitLine]:
    """Reduce each run of consecutive candidates to its midpoint."""
    labeled, num_runs = ndimage.label(candidates)
    if num_runs == 0:
        return []

    splits = []
    for run in ndimage.find_objects(labeled):
        start, stop = run[0].start, run[0].stop
        midpoint = (start + stop - 1) // 2
        kind = SplitKind.TRANSPARENCY if transparent[start:stop].any() else SplitKind.EDGE
        splits.append(SplitLine(axis=axis, coordinate=midpoint, kind=kind))

    return splits


def scan_axis(
    empty: np.ndarray,
    luma: np.ndarray,
    axis: Axis,
    empty_threshold: float = 0.80,
    edge_threshold: float = EDGE_MAGNITUDE_THRESHOLD
) -> List[SplitLine]:
    """Find split lines along one axis, in ascending coordinate order.

    Args:
        empty: Boolean empty-pixel mask (height, width)
        luma: Alpha-premultiplied luminance (height, width)
        axis: VERTICAL scans columns, HORIZONTAL scans rows
        empty_threshold: Minimum empty ratio for a transparency candidate
        edge_threshold: Edge magnitude a line must exceed to be a candidate

    Returns:
        List of SplitLine sorted by coordinate
    """
    if empty.size == 0:
        return []

    transparent = empty_ratios(empty, axis) >= empty_threshold
    edges = edge_magnitudes(luma, axis) > edge_threshold

    return collapse_runs(transparent | edges, transparent, axis)


def scan_boundaries(
    buffer: ImageBuffer,
    matcher: Optional[BackgroundMatcher],
    config: CutterConfig,
    executor: Optional[Executor] = None,
    empty: Optional[np.ndarray] = None
) -> Tuple[List[SplitLine], List[SplitLine]]:
    """Scan both axes of an image.

    Args:
        buffer: Source image
        matcher: Background matcher, or None to rely on alpha only
        config: Cutter settings (thresholds)
        executor: If given, the two axes are scanned concurrently on it
        empty: Precomputed empty_mask(buffer, matcher), computed if None

    Returns:
        (vertical splits, horizontal splits)
    """
    if empty is None:
        empty = empty_mask(buffer, matcher)
    luma = luminance(buffer)
    args = (config.empty_ratio_threshold, config.edge_threshold)

    if executor is None:
        vertical = scan_axis(empty, luma, Axis.VERTICAL, *args)
        horizontal = scan_axis(empty, luma, Axis.HORIZONTAL, *args)
        return vertical, horizontal

    vertical_job = executor.submit(scan_axis, empty, luma, Axis.VERTICAL, *args)
    horizontal_job = executor.submit(scan_axis, empty, luma, Axis.HORIZONTAL, *args)
    return vertical_job.result(), horizontal_job.result()
