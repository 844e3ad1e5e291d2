"""File I/O around the cutter: finding, decoding, saving, batch reporting."""

import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from .buffer import ImageBuffer
from .config import DEFAULT_NAME_TEMPLATE, OUTPUT_FORMAT, SUPPORTED_INPUT_FORMATS, CutterConfig
from .cutter import SpritesheetCutter
from .errors import DecodeError

SUPPORTED_EXTENSIONS = frozenset(SUPPORTED_INPUT_FORMATS)


class OutcomeStatus(Enum):
    FRAMES = "frames"
    EMPTY = "empty"
    DECODE_FAILED = "decode_failed"
    SAVE_FAILED = "save_failed"


@dataclass
class ImageOutcome:
    """Result of processing one source file."""
    source: Path
    status: OutcomeStatus
    paths: List[Path] = field(default_factory=list)
    reason: Optional[str] = None
    unsplit: bool = False

    @property
    def frame_count(self) -> int:
        return len(self.paths)

    @property
    def failed(self) -> bool:
        return self.status in (OutcomeStatus.DECODE_FAILED, OutcomeStatus.SAVE_FAILED)


@dataclass
class BatchReport:
    """Outcomes of a batch run, in input order."""
    outcomes: List[ImageOutcome] = field(default_factory=list)
    missing: List[Path] = field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def total_frames(self) -> int:
        return sum(outcome.frame_count for outcome in self.outcomes)

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and all(outcome.failed for outcome in self.outcomes)

    def summary(self) -> str:
        failed = self.count(OutcomeStatus.DECODE_FAILED) + self.count(OutcomeStatus.SAVE_FAILED)
        return (
            f"{len(self.outcomes)} images: "
            f"{self.count(OutcomeStatus.FRAMES)} split into {self.total_frames} frames, "
            f"{self.count(OutcomeStatus.EMPTY)} without frames, "
            f"{failed} failed"
        )


def is_supported(path: Path) -> bool:
    """True if the file extension is a supported image format (case-insensitive)."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def find_image_files(directory: Path) -> List[Path]:
    """List supported image files directly inside directory, sorted by name."""
    directory = Path(directory)
    return sorted(
        path for path in directory.iterdir()
        if path.is_file() and is_supported(path)
    )


def decode(path: Path) -> ImageBuffer:
    """Read an image file into an RGBA buffer.

    Animated formats (GIF, multi-page TIFF) contribute their first frame.

    Raises:
        DecodeError: If the file is missing, unsupported or corrupt
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.seek(0)
            return ImageBuffer.from_pil(img.convert('RGBA'))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DecodeError(path, str(e) or type(e).__name__) from e


def frame_filename(name: str, index: int, template: str = DEFAULT_NAME_TEMPLATE) -> str:
    """Output filename for frame index (1-based) of source stem name."""
    return template.format(name=name, index=index)


def save_frames(
    frames: Sequence[Tuple[int, ImageBuffer]],
    output_dir: Path,
    name: str,
    template: str = DEFAULT_NAME_TEMPLATE
) -> List[Path]:
    """Write frames as PNG files.

    Args:
        frames: (frame_index, frame) pairs from the cutter
        output_dir: Directory to write into (created if needed)
        name: Source file stem used in the filenames
        template: Filename template with {name} and {index} fields

    Returns:
        Paths of the written files, in frame order
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for index, frame in frames:
        path = output_dir / frame_filename(name, index, template)
        frame.to_pil().save(path, OUTPUT_FORMAT)
        paths.append(path)

    return paths


def process_file(path: Path, output_dir: Path, cutter: SpritesheetCutter) -> ImageOutcome:
    """Cut one file and save its frames. Never raises for per-file problems."""
    path = Path(path)
    config = cutter.config

    try:
        buffer = decode(path)
    except DecodeError as e:
        return ImageOutcome(source=path, status=OutcomeStatus.DECODE_FAILED, reason=e.reason)

    frames = cutter.cut(buffer)
    unsplit = False
    if not frames and config.keep_unsplit and not buffer.is_empty:
        frames = [(1, cutter.render_whole(buffer))]
        unsplit = True

    if not frames:
        return ImageOutcome(
            source=path,
            status=OutcomeStatus.EMPTY,
            reason=f"no frames found in {buffer.width}x{buffer.height} image",
        )

    try:
        paths = save_frames(frames, output_dir, path.stem, config.name_template)
    except OSError as e:
        return ImageOutcome(source=path, status=OutcomeStatus.SAVE_FAILED, reason=str(e))

    return ImageOutcome(source=path, status=OutcomeStatus.FRAMES, paths=paths, unsplit=unsplit)


def collect_jobs(inputs: Sequence[Path], output_root: Path) -> Tuple[List[Tuple[Path, Path]], List[Path]]:
    """Pair every source file with its output directory.

    A lone directory input writes straight into output_root; with several
    inputs each directory gets its own subfolder named after it. File
    inputs always write into output_root.

    Returns:
        ((source, output_dir) jobs, missing inputs)
    """
    output_root = Path(output_root)
    mirror = len(inputs) > 1

    jobs = []
    missing = []
    for item in map(Path, inputs):
        if item.is_dir():
            target = output_root / item.resolve().name if mirror else output_root
            jobs.extend((path, target) for path in find_image_files(item))
        elif item.is_file():
            jobs.append((item, output_root))
        else:
            missing.append(item)

    return jobs, missing


def report_outcome(outcome: ImageOutcome, position: int, total: int) -> None:
    print(f"Processing {position}/{total}: {outcome.source.name}")
    if outcome.status == OutcomeStatus.FRAMES:
        if outcome.unsplit:
            print("   → Copied as single sprite")
        else:
            print(f"   → Extracted {outcome.frame_count} frames")
    elif outcome.status == OutcomeStatus.EMPTY:
        print(f"   Warning: {outcome.reason}")
    else:
        print(f"   Error processing {outcome.source.name}: {outcome.reason}", file=sys.stderr)


def run_batch(
    inputs: Sequence[Path],
    output_root: Optional[Path] = None,
    config: Optional[CutterConfig] = None,
    quiet: bool = False
) -> BatchReport:
    """Cut every image found in inputs.

    Args:
        inputs: Image files and/or directories (directories are not recursed)
        output_root: Where frames go (defaults to config.output_dir)
        config: Cutter settings (defaults if None)
        quiet: Suppress progress output

    Returns:
        BatchReport with one outcome per source file, in input order
    """
    config = config or CutterConfig()
    output_root = Path(output_root if output_root is not None else config.output_dir)
    cutter = SpritesheetCutter(config)

    jobs, missing = collect_jobs(inputs, output_root)
    if not quiet:
        for item in missing:
            print(f"Warning: {item} not found, skipping")
        if not jobs:
            print("No image files found.")
        else:
            print(f"Found {len(jobs)} image files to process")

    def run(job):
        source, target = job
        return process_file(source, target, cutter)

    def collect(results: Iterable[ImageOutcome]) -> List[ImageOutcome]:
        outcomes = []
        for position, outcome in enumerate(results, start=1):
            if not quiet:
                report_outcome(outcome, position, len(jobs))
            outcomes.append(outcome)
        return outcomes

    # Results arrive in input order, each reported as soon as it is done
    if config.workers > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            outcomes = collect(pool.map(run, jobs))
    else:
        outcomes = collect(map(run, jobs))

    return BatchReport(outcomes=outcomes, missing=missing)
