"""Exceptions raised by the spritesheet cutter."""

from pathlib import Path
from typing import Optional


class CutterError(Exception):
    """Base class for spritesheet cutter errors."""


class DecodeError(CutterError):
    """A source file could not be read as an image."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to decode {self.path.name}: {reason}")


class EmptySourceError(CutterError):
    """The source image has a zero dimension."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(f"Source image is empty ({width}x{height})")


class NoFramesFoundError(CutterError):
    """Boundary detection produced no valid frames."""

    def __init__(self, width: int, height: int, name: Optional[str] = None):
        self.width = width
        self.height = height
        label = f"{name} " if name else ""
        super().__init__(f"No frames found in {label}({width}x{height})")


class BackgroundDetectionFailure(CutterError):
    """Corner sampling could not establish a background color."""
