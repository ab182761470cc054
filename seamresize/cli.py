"""
Batch command-line front end.

    seamresize photos/*.jpg --output resized --width 640 --carve --type png

Each input is decoded, resized and written next to the others in the output
directory (or to a single output file). Files that fail are logged and
skipped; an existing output file is never overwritten.
"""

import argparse
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from .config import Config, ResizeOptions
from .exceptions import ConfigurationError, SeamResizeError
from .io import load_image, save_image
from .logging_config import setup_logging
from .resizing import resize

logger = logging.getLogger("seamresize.cli")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILED_FILES = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seamresize",
        description="Batch resize and convert images, optionally by seam carving",
    )
    parser.add_argument(
        "inputs", nargs="*",
        help="Input image files. A single '*' in the file name matches files in that directory."
    )
    parser.add_argument(
        "--type", default=Config.DEFAULT_OUTPUT_TYPE,
        help="The file type of the output images (%(default)s)"
    )
    parser.add_argument(
        "--output", default=".",
        help="The path of the output file(s). Can be a file name or a directory."
    )
    parser.add_argument(
        "--width", type=int, default=None,
        help="The width to resize the output images to (unchanged if not specified)"
    )
    parser.add_argument(
        "--height", type=int, default=None,
        help="The height to resize the output images to (unchanged if not specified)"
    )
    parser.add_argument(
        "--scale", type=float, default=None,
        help="The factor by which to scale the input images"
    )
    parser.add_argument(
        "--quality", type=int, default=Config.DEFAULT_QUALITY,
        help="JPEG encoding quality, 0-100 (%(default)s)"
    )
    parser.add_argument(
        "--carve", action="store_true",
        help="Shrink using seam carving instead of scaling"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for seam tie-breaking (time-based if not specified)"
    )
    parser.add_argument(
        "--jobs", type=int, default=1,
        help="Number of images to process concurrently (%(default)s)"
    )
    parser.add_argument(
        "--log-level", default="INFO",
        help="DEBUG, INFO, WARNING or ERROR (%(default)s)"
    )
    return parser


def expand_inputs(patterns: List[str]) -> List[Path]:
    """
    Expand input patterns into file paths.

    A pattern without '*' is taken as is. A pattern with one '*' in its file name
    matches every file in that directory with the same prefix and suffix.
    Other wildcard uses are skipped with a warning.
    """
    paths = []
    for pattern in patterns:
        count = pattern.count("*")
        if count == 0:
            paths.append(Path(pattern))
            continue
        if count > 1:
            logger.warning("Input '%s' contains multiple wildcards, which is not supported. Skipping...", pattern)
            continue

        pattern_path = Path(pattern)
        if "*" in str(pattern_path.parent):
            logger.warning("Input '%s' has a wildcard in a directory name, which is not supported. Skipping...", pattern)
            continue

        directory = pattern_path.parent
        prefix, suffix = pattern_path.name.split("*")
        if not directory.is_dir():
            logger.warning("Failed to open input directory: %s. Skipping...", directory)
            continue

        for candidate in sorted(directory.iterdir()):
            name = candidate.name
            if len(name) < len(prefix) + len(suffix):
                continue
            if not (name.startswith(prefix) and name.endswith(suffix)):
                continue
            if candidate.is_dir():
                logger.warning("Input %s matched '%s' but is a directory. Skipping...", candidate, pattern)
                continue
            paths.append(candidate)
    return paths


def resolve_output_path(input_path: Path, output: Path, output_type: str,
                        output_is_dir: bool) -> Path:
    """Output path for one input: <dir>/<stem>.<type>, or output with its suffix replaced."""
    if output_is_dir:
        return output / f"{input_path.stem}.{output_type}"
    return output.with_suffix(f".{output_type}")


def process_file(input_path: Path, output_path: Path, options: ResizeOptions,
                 quality: int = Config.DEFAULT_QUALITY) -> bool:
    """
    Load, resize and save one image.

    Returns:
        True if the output was written
    """
    if output_path.exists():
        logger.warning(
            "There is already a file at the output path: %s. Skipping %s to avoid data loss...",
            output_path, input_path)
        return False

    try:
        buffer = load_image(input_path)
        resized = resize(buffer, options)
        save_image(resized, output_path, quality=quality, exclusive=True)
    except SeamResizeError as exc:
        logger.warning("%s. Skipping %s...", exc, input_path)
        return False

    logger.info("Processed %s -> %s (%dx%d -> %dx%d)", input_path, output_path,
                buffer.width, buffer.height, resized.width, resized.height)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    output_type = args.type.lower().lstrip(".")
    if output_type not in Config.OUTPUT_TYPES:
        logger.error("Invalid output type '%s', supported types are: %s",
                     args.type, ", ".join(Config.OUTPUT_TYPES))
        return EXIT_USAGE

    try:
        options = ResizeOptions(
            use_seam_carving=args.carve,
            width=args.width,
            height=args.height,
            scale=args.scale,
            seed=args.seed,
        )
    except (ConfigurationError, ValueError) as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    if args.jobs < 1:
        logger.error("--jobs must be at least 1, got %d", args.jobs)
        return EXIT_USAGE

    output = Path(args.output)
    output_is_dir = output.is_dir()
    if not output_is_dir and len(args.inputs) > 1:
        logger.error("Output is not a directory and multiple inputs were given. "
                     "Either give a directory as output or only a single input file.")
        return EXIT_USAGE

    inputs = expand_inputs(args.inputs)
    if not output_is_dir and len(inputs) > 1:
        logger.error("Input pattern matched %d files but output is not a directory.", len(inputs))
        return EXIT_USAGE

    jobs = []
    claimed = {}
    skipped = 0
    for path in inputs:
        target = resolve_output_path(path, output, output_type, output_is_dir)
        if target in claimed:
            logger.warning("Output path %s is already used by %s. Skipping %s to avoid data loss...",
                           target, claimed[target], path)
            skipped += 1
            continue
        claimed[target] = path
        jobs.append((path, target))

    if args.jobs == 1:
        results = [process_file(src, dst, options, args.quality) for src, dst in jobs]
    else:
        with ThreadPoolExecutor(max_workers=args.jobs) as pool:
            results = list(pool.map(
                lambda job: process_file(job[0], job[1], options, args.quality), jobs))

    failed = results.count(False) + skipped
    if failed:
        logger.warning("%d of %d files were not processed", failed, len(inputs))
        return EXIT_FAILED_FILES
    return EXIT_OK


if __name__ == '__main__':
    raise SystemExit(main())
