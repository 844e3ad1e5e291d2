"""End-to-end tests for the spritesheet cutting pipeline."""

import numpy as np
import pytest
from spritesheet_cutter.assembler import content_ratio
from spritesheet_cutter.boundaries import empty_mask
from spritesheet_cutter.buffer import ImageBuffer
from spritesheet_cutter.config import CutterConfig
from spritesheet_cutter.cutter import SpritesheetCutter, process
from spritesheet_cutter.errors import NoFramesFoundError

MAGENTA = (255, 0, 255, 255)

CELL_COLORS = [
    (200, 60, 60, 255),
    (60, 150, 60, 255),
    (60, 60, 200, 255),
    (150, 150, 30, 255),
    (30, 120, 120, 255),
    (120, 90, 30, 255),
    (90, 90, 90, 255),
    (140, 100, 60, 255),
]


def make_grid_sheet(cols=4, rows=2, cell=64, margin=12):
    """Uniform grid of square sprites on a magenta background."""
    buffer = ImageBuffer.blank(cols * cell, rows * cell, MAGENTA)
    for index in range(cols * rows):
        row, col = divmod(index, cols)
        top = row * cell + margin
        left = col * cell + margin
        buffer.pixels[top:top + cell - 2 * margin, left:left + cell - 2 * margin] = CELL_COLORS[index % len(CELL_COLORS)]
    return buffer


def make_gap_pair():
    """64x32 transparent image with two 16x16 squares split by a 1px column."""
    buffer = ImageBuffer.blank(64, 32, (0, 0, 0, 0))
    buffer.pixels[8:24, 15:31] = (255, 0, 0, 255)
    buffer.pixels[8:24, 32:48] = (255, 0, 0, 255)
    return buffer


def opaque_colors(frame):
    visible = frame.pixels[frame.pixels[:, :, 3] > 0]
    return {tuple(int(c) for c in p) for p in visible}


def test_grid_yields_eight_frames_in_row_major_order():
    sheet = make_grid_sheet()

    frames = process(sheet, CutterConfig())

    assert [index for index, _ in frames] == list(range(1, 9))
    for (index, frame), color in zip(frames, CELL_COLORS):
        # Each frame holds exactly its own 40x40 sprite; the background is gone
        assert opaque_colors(frame) == {color}
        assert np.sum(frame.pixels[:, :, 3] > 0) == 40 * 40


def test_grid_frames_tile_the_sheet():
    sheet = make_grid_sheet()

    detection = SpritesheetCutter(CutterConfig()).detect(sheet)

    top_row = [f for f in detection.frames if f.y == 0]
    assert sum(f.width for f in top_row) == sheet.width
    assert detection.background.color == MAGENTA
    assert not detection.used_fallback


def test_one_pixel_gap_gives_exactly_two_frames():
    frames = process(make_gap_pair())

    assert len(frames) == 2
    for _, frame in frames:
        assert frame.width >= 8
        assert np.sum(frame.pixels[:, :, 3] == 255) == 16 * 16


def test_fully_transparent_image_yields_no_frames():
    blank = ImageBuffer.blank(100, 100, (0, 0, 0, 0))

    assert process(blank) == []
    with pytest.raises(NoFramesFoundError):
        SpritesheetCutter().cut(blank, strict=True)


def test_zero_size_image_yields_no_frames():
    empty = ImageBuffer(np.zeros((0, 0, 4), dtype=np.uint8))

    assert process(empty) == []
    with pytest.raises(NoFramesFoundError):
        SpritesheetCutter().cut(empty, strict=True)


def test_pipeline_is_idempotent():
    sheet = make_grid_sheet()

    first = process(sheet)
    second = process(sheet)

    assert len(first) == len(second)
    for (i1, f1), (i2, f2) in zip(first, second):
        assert i1 == i2
        assert f1 == f2


def test_source_buffer_unchanged():
    sheet = make_grid_sheet()
    before = sheet.pixels.copy()

    process(sheet)

    assert np.array_equal(sheet.pixels, before)


def test_background_kept_when_removal_disabled():
    sheet = make_grid_sheet()

    frames = process(sheet, CutterConfig(remove_background=False))

    assert len(frames) == 8
    assert MAGENTA in opaque_colors(frames[0][1])


def test_sequential_axes_match_parallel_axes():
    sheet = make_grid_sheet()

    parallel = SpritesheetCutter(parallel_axes=True).detect(sheet)
    sequential = SpritesheetCutter(parallel_axes=False).detect(sheet)

    assert parallel.frames == sequential.frames


def test_frame_invariants_hold():
    config = CutterConfig()
    for sheet in (make_grid_sheet(), make_grid_sheet(cols=3, rows=3, cell=48, margin=6), make_gap_pair()):
        cutter = SpritesheetCutter(config)
        detection = cutter.detect(sheet)
        empty = empty_mask(sheet, detection.background)

        assert detection.frames
        for f in detection.frames:
            assert config.min_sprite_size <= f.width <= config.max_sprite_size
            assert config.min_sprite_size <= f.height <= config.max_sprite_size
            assert f.x >= 0 and f.y >= 0
            assert f.right <= sheet.width and f.bottom <= sheet.height
            assert content_ratio(empty, f) >= config.min_content_ratio


def test_render_whole_removes_background():
    sheet = make_grid_sheet()

    whole = SpritesheetCutter().render_whole(sheet)

    assert whole.size == sheet.size
    assert MAGENTA not in opaque_colors(whole)
    assert np.sum(whole.pixels[:, :, 3] > 0) == 8 * 40 * 40


@pytest.mark.parametrize("background, sprite", [
    ((0, 0, 0, 255), (255, 255, 255, 255)),
    ((255, 255, 255, 255), (0, 0, 0, 255)),
    ((0, 0, 0, 0), (255, 255, 255, 255)),
])
def test_high_contrast_grid_yields_eight_frames(background, sprite):
    """Strong sprite outlines must not split cells into extra frames."""
    sheet = ImageBuffer.blank(256, 128, background)
    for row in range(2):
        for col in range(4):
            sheet.pixels[row * 64 + 12:row * 64 + 52, col * 64 + 12:col * 64 + 52] = sprite

    frames = process(sheet)

    assert len(frames) == 8
    for _, frame in frames:
        assert frame.size == (64, 64)
        assert np.sum(frame.pixels[:, :, 3] > 0) == 40 * 40
