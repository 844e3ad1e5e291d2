"""Command-line interface for the spritesheet cutter."""

import argparse
import sys
from pathlib import Path

from .batch import run_batch
from .config import DEFAULT_OUTPUT_DIR, CutterConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Spritesheet Cutter - automatic sprite frame extraction',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Cut every image in the current directory into ./assets2/
  python -m spritesheet_cutter

  # Several folders, each mirrored into its own output subfolder
  python -m spritesheet_cutter Base Ships Space -o assets2

  # Keep the background, allow smaller sprites
  python -m spritesheet_cutter sheet.png --no-remove-background --min-size 4
        """,
    )
    defaults = CutterConfig()

    parser.add_argument('inputs', type=Path, nargs='*', default=[Path('.')],
                        help='Image files or directories (default: current directory)')
    parser.add_argument('--output', '-o', type=Path, default=Path(DEFAULT_OUTPUT_DIR),
                        help='Output directory')
    parser.add_argument('--min-size', type=int, default=defaults.min_sprite_size,
                        help='Minimum frame width/height in pixels')
    parser.add_argument('--max-size', type=int, default=defaults.max_sprite_size,
                        help='Maximum frame width/height in pixels')
    parser.add_argument('--tolerance', type=int, default=defaults.background_tolerance,
                        help='Per-channel background color tolerance (0-255)')
    parser.add_argument('--no-remove-background', action='store_true',
                        help='Keep background pixels in the output frames')
    parser.add_argument('--no-fallback', action='store_true',
                        help='Disable strip detection when the grid pass finds nothing')
    parser.add_argument('--keep-unsplit', action='store_true',
                        help='Write images without detectable frames as a single sprite')
    parser.add_argument('--workers', '-j', type=int, default=defaults.workers,
                        help='Number of images processed in parallel')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Only print errors')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = CutterConfig(
            min_sprite_size=args.min_size,
            max_sprite_size=args.max_size,
            background_tolerance=args.tolerance,
            remove_background=not args.no_remove_background,
            output_dir=str(args.output),
            fallback_detection=not args.no_fallback,
            keep_unsplit=args.keep_unsplit,
            workers=args.workers,
        )
    except ValueError as e:
        parser.error(str(e))

    if not args.quiet:
        print("Spritesheet Cutter - Automatic Sprite Frame Extraction")
        print("=" * 54)

    report = run_batch(args.inputs, args.output, config, quiet=args.quiet)

    if not args.quiet:
        print("\n=== Processing Complete! ===")
        print(report.summary())
        print(f"Check the '{args.output}' directory for results.")

    return 1 if report.all_failed else 0


if __name__ == '__main__':
    sys.exit(main())
