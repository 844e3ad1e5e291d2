"""Tests for ImageBuffer pixel access."""

import numpy as np
import pytest
from PIL import Image
from spritesheet_cutter.buffer import ImageBuffer
from spritesheet_cutter.errors import EmptySourceError


def test_from_pil_converts_to_rgba():
    img = Image.new('RGB', (6, 4), (10, 20, 30))

    buffer = ImageBuffer.from_pil(img)

    assert buffer.size == (6, 4)
    assert buffer.pixels.shape == (4, 6, 4)
    assert buffer.pixel(5, 3) == (10, 20, 30, 255)


def test_pixel_reads_row_major():
    pixels = np.zeros((3, 5, 4), dtype=np.uint8)
    pixels[2, 4] = [1, 2, 3, 4]  # row 2, column 4

    buffer = ImageBuffer(pixels)

    assert buffer.pixel(4, 2) == (1, 2, 3, 4)
    with pytest.raises(IndexError):
        buffer.pixel(5, 0)


def test_rejects_wrong_shape_and_dtype():
    with pytest.raises(ValueError, match="shape"):
        ImageBuffer(np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(ValueError, match="uint8"):
        ImageBuffer(np.zeros((4, 4, 4), dtype=np.float32))


def test_crop_is_independent_copy():
    buffer = ImageBuffer.blank(8, 8, (50, 60, 70, 255))

    cropped = buffer.crop(2, 2, 4, 3)
    cropped.pixels[:, :] = 0

    assert cropped.size == (4, 3)
    assert buffer.pixel(3, 3) == (50, 60, 70, 255)
    assert not np.shares_memory(cropped.pixels, buffer.pixels)


def test_region_is_read_only_and_bounds_checked():
    buffer = ImageBuffer.blank(8, 8)

    view = buffer.region(0, 0, 8, 8)
    with pytest.raises(ValueError):
        view[0, 0] = 1
    with pytest.raises(ValueError, match="exceeds"):
        buffer.region(4, 4, 5, 2)


def test_empty_buffer():
    buffer = ImageBuffer(np.zeros((0, 10, 4), dtype=np.uint8))

    assert buffer.is_empty
    with pytest.raises(EmptySourceError):
        buffer.require_content()


def test_to_pil_roundtrip_keeps_alpha():
    buffer = ImageBuffer.blank(3, 2, (255, 0, 0, 128))

    img = buffer.to_pil()

    assert img.mode == 'RGBA'
    assert img.getpixel((2, 1)) == (255, 0, 0, 128)
    assert ImageBuffer.from_pil(img) == buffer
