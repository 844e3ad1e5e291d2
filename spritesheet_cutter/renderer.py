"""Crop frames out of a source image and clear their background."""

from typing import Optional

from .assembler import FrameRect
from .background import BackgroundMatcher
from .buffer import ImageBuffer

TRANSPARENT = (0, 0, 0, 0)


def render_frame(
    source: ImageBuffer,
    rect: FrameRect,
    matcher: Optional[BackgroundMatcher] = None
) -> ImageBuffer:
    """Copy rect out of source, making background pixels fully transparent.

    Pixels that do not match the background keep their original RGBA,
    including partial alpha. Without a matcher the crop is copied verbatim.
    The source buffer is never written to.

    Args:
        source: Source image
        rect: Frame region, must lie inside source
        matcher: Background matcher, or None to skip removal

    Returns:
        New buffer of size rect.width x rect.height
    """
    frame = source.crop(rect.x, rect.y, rect.width, rect.height)

    if matcher is not None:
        frame.pixels[matcher.mask(frame.pixels)] = TRANSPARENT

    return frame
