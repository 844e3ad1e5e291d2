"""Automatic spritesheet frame extraction."""

from .assembler import FrameRect
from .background import BackgroundMatcher, detect_background
from .buffer import ImageBuffer
from .config import CutterConfig
from .cutter import SpritesheetCutter, process
from .errors import (
    BackgroundDetectionFailure,
    CutterError,
    DecodeError,
    EmptySourceError,
    NoFramesFoundError,
)

__all__ = [
    "BackgroundDetectionFailure",
    "BackgroundMatcher",
    "CutterConfig",
    "CutterError",
    "DecodeError",
    "EmptySourceError",
    "FrameRect",
    "ImageBuffer",
    "NoFramesFoundError",
    "SpritesheetCutter",
    "detect_background",
    "process",
]
