"""Spritesheet cutting pipeline: background, boundaries, frames, rendering."""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple

from .assembler import FrameRect, assemble_frames, fallback_frames
from .background import BackgroundMatcher, detect_background
from .boundaries import empty_mask, scan_boundaries
from .buffer import ImageBuffer
from .config import CutterConfig
from .errors import EmptySourceError, NoFramesFoundError
from .renderer import render_frame


@dataclass
class Detection:
    """What the detection stage found in one image."""
    background: Optional[BackgroundMatcher]
    frames: List[FrameRect]
    used_fallback: bool = False


class SpritesheetCutter:
    """Splits spritesheets into individual frames."""

    _executor: ClassVar[Optional[ThreadPoolExecutor]] = None
    _executor_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, config: Optional[CutterConfig] = None, parallel_axes: bool = True):
        """Initialize cutter.

        Args:
            config: Cutter settings (defaults if None)
            parallel_axes: Scan columns and rows on a shared two-thread pool
        """
        self.config = config or CutterConfig()
        self.parallel_axes = parallel_axes

    @classmethod
    def get_executor(cls) -> ThreadPoolExecutor:
        """Get or create the thread pool shared by all axis scans."""
        with cls._executor_lock:
            if cls._executor is None:
                cls._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="axis_scan")
            return cls._executor

    def detect(self, buffer: ImageBuffer) -> Detection:
        """Find the background and the frame rectangles of an image.

        Raises:
            EmptySourceError: If the image has a zero dimension
        """
        buffer.require_content()

        background = detect_background(
            buffer,
            tolerance=self.config.background_tolerance,
            sample_size=self.config.corner_sample_size,
        )
        empty = empty_mask(buffer, background)
        executor = self.get_executor() if self.parallel_axes else None
        vertical, horizontal = scan_boundaries(buffer, background, self.config, executor, empty)

        frames = assemble_frames(vertical, horizontal, empty, self.config)
        if frames or not self.config.fallback_detection:
            return Detection(background=background, frames=frames)

        frames = fallback_frames(empty, self.config)
        return Detection(background=background, frames=frames, used_fallback=bool(frames))

    def removal_matcher(self, detection: Detection) -> Optional[BackgroundMatcher]:
        """Matcher to apply while rendering, or None when removal is off."""
        return detection.background if self.config.remove_background else None

    def cut(self, buffer: ImageBuffer, strict: bool = False) -> List[Tuple[int, ImageBuffer]]:
        """Extract every frame of a spritesheet.

        Args:
            buffer: Decoded source image (left unmodified)
            strict: Raise NoFramesFoundError instead of returning []

        Returns:
            List of (frame_index, frame) in row-major order, 1-indexed

        Raises:
            NoFramesFoundError: If strict and nothing was found
        """
        try:
            detection = self.detect(buffer)
        except EmptySourceError:
            if strict:
                raise NoFramesFoundError(buffer.width, buffer.height)
            return []

        if not detection.frames:
            if strict:
                raise NoFramesFoundError(buffer.width, buffer.height)
            return []

        matcher = self.removal_matcher(detection)
        return [
            (index, render_frame(buffer, rect, matcher))
            for index, rect in enumerate(detection.frames, start=1)
        ]

    def render_whole(self, buffer: ImageBuffer) -> ImageBuffer:
        """Render the entire image as a single frame, background removed if enabled."""
        buffer.require_content()
        matcher = None
        if self.config.remove_background:
            matcher = detect_background(
                buffer,
                tolerance=self.config.background_tolerance,
                sample_size=self.config.corner_sample_size,
            )
        whole = FrameRect(x=0, y=0, width=buffer.width, height=buffer.height)
        return render_frame(buffer, whole, matcher)


def process(buffer: ImageBuffer, config: Optional[CutterConfig] = None) -> List[Tuple[int, ImageBuffer]]:
    """Cut a decoded spritesheet into frames.

    Args:
        buffer: Decoded source image
        config: Cutter settings (defaults if None)

    Returns:
        List of (frame_index, frame), 1-indexed, row-major. Empty when the
        image is degenerate or holds no frames.
    """
    return SpritesheetCutter(config).cut(buffer)
