"""RGBA image buffers and pixel access."""

import numpy as np
from PIL import Image
from typing import Tuple

from .errors import EmptySourceError

Color = Tuple[int, int, int, int]


class ImageBuffer:
    """Row-major RGBA pixels backed by an (height, width, 4) uint8 array.

    The buffer does not copy the array it is given. Operations that produce
    new images (crop, to_pil) never write to it.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected (height, width, 4) array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        self.pixels = pixels

    @classmethod
    def from_pil(cls, image: Image.Image) -> "ImageBuffer":
        """Build a buffer from a PIL image, converting to RGBA."""
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        return cls(np.array(image, dtype=np.uint8))

    @classmethod
    def blank(cls, width: int, height: int, color: Color = (0, 0, 0, 0)) -> "ImageBuffer":
        """Create a buffer filled with a single color."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls(pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def require_content(self) -> None:
        """Raise EmptySourceError if either dimension is zero."""
        if self.is_empty:
            raise EmptySourceError(self.width, self.height)

    def pixel(self, x: int, y: int) -> Color:
        """Read the RGBA value at (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """Read-only view of a rectangular region."""
        if x < 0 or y < 0 or x + width > self.width or y + height > self.height:
            raise ValueError(
                f"Region ({x}, {y}, {width}, {height}) exceeds "
                f"{self.width}x{self.height} image"
            )
        view = self.pixels[y:y + height, x:x + width]
        view.flags.writeable = False
        return view

    def crop(self, x: int, y: int, width: int, height: int) -> "ImageBuffer":
        """Copy a rectangular region into a new, independent buffer."""
        return ImageBuffer(self.region(x, y, width, height).copy())

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"ImageBuffer({self.width}x{self.height})"
