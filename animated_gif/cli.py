import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .config import DEFAULT_CONFIG, CodecConfig, parse_size
from .frames import AnimatedFrameSequence
from .gif_decoder import decode
from .transformer import transform


def parse_arguments(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Decode an animated GIF, optionally scale-and-crop every frame to a "
            "fixed size, and report its frames and timing."
        )
    )
    parser.add_argument(
        "input_file",
        type=Path,
        help="Path to a GIF file.",
    )
    parser.add_argument(
        "--size",
        type=str,
        default=None,
        help=(
            "Target frame size formatted as WIDTHxHEIGHT. Frames are scaled to cover "
            "the size and the overflow is cropped around the centre."
        ),
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=None,
        help="Display density factor applied to --size (default: 1.0). Requires --size.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_CONFIG.max_workers,
        help=f"Threads used to resample frames (default: {DEFAULT_CONFIG.max_workers}).",
    )
    parser.add_argument(
        "--default-duration",
        type=int,
        default=DEFAULT_CONFIG.default_duration,
        help=(
            "Duration in milliseconds for frames whose delay is 0 "
            f"(default: {DEFAULT_CONFIG.default_duration})."
        ),
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Accept files that end without a GIF trailer.",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Write every frame as a PNG into this folder.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log decoding details.",
    )
    return parser.parse_args(argv)


def resolve_unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    stem = path.stem
    suffix = path.suffix
    index = 1
    while True:
        candidate = path.with_name(f"{stem}-{index}{suffix}")
        if not candidate.exists():
            return candidate
        index += 1


def describe(sequence: AnimatedFrameSequence) -> List[str]:
    width, height = sequence.size
    loops = "infinite" if sequence.loops_forever else str(sequence.loop_count)
    lines = [
        f"Frames: {sequence.frame_count()}",
        f"Size: {width}x{height}",
        f"Loop count: {loops}",
    ]
    for index, duration in sequence.durations().items():
        lines.append(f"  frame {index}: {duration} ms")
    lines.append(f"Total duration: {sequence.total_duration()} ms")
    return lines


def export_frames(sequence: AnimatedFrameSequence, folder: Path, stem: str) -> List[Path]:
    folder.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for index, image in enumerate(sequence.images()):
        target_path = resolve_unique_path(folder / f"{stem}-{index:03d}.png")
        image.save(target_path, format="PNG")
        written.append(target_path)
    return written


def main(argv: Iterable[str]) -> int:
    try:
        args = parse_arguments(argv)
        if args.verbose:
            logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        if args.scale is not None and not args.size:
            raise ValueError("--scale only applies together with --size.")
        config = CodecConfig(
            default_duration=args.default_duration,
            require_trailer=not args.lenient,
            max_workers=args.workers,
        )
        if not args.input_file.is_file():
            raise FileNotFoundError(f"Input file not found: {args.input_file}")

        sequence = decode(args.input_file.read_bytes(), config)
        if args.size:
            scale = 1.0 if args.scale is None else args.scale
            sequence = transform(sequence, parse_size(args.size), scale, config)

        for line in describe(sequence):
            print(line)

        if args.export_dir is not None:
            written = export_frames(sequence, args.export_dir, args.input_file.stem)
            print(f"Wrote {len(written)} frame(s) to {args.export_dir}")
        return 0
    except FileNotFoundError as not_found_err:
        print(f"Error: {not_found_err}", file=sys.stderr)
    except ValueError as value_err:
        print(f"Error: {value_err}", file=sys.stderr)
    except Exception as unexpected_err:  # noqa: BLE001
        print(f"Unexpected error: {unexpected_err}", file=sys.stderr)
    return 1


def run(argv: Optional[List[str]] = None) -> int:
    return main(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    raise SystemExit(run())
