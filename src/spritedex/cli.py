"""
Command line entry points, one per pipeline stage.

Each command takes only optional positional path overrides; defaults come
from :class:`spritedex.config.PipelinePaths`.

Usage:
    spritedex-split   [sheets_dir] [output_dir]
    spritedex-extract [input_dir] [output_file]
    spritedex-import  [input_file] [output_file]
    spritedex-resolve [input_file] [output_file] [reference_file]
    spritedex-fill    [archive_dir] [split_dir] [mapping_file] [log_file]
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from .config import PipelinePaths
from .importers import RosterImportError
from .naming import NamingRulesError
from .pipeline import extract_stage, fill_stage, import_stage, resolve_stage, split_stage
from .report import RunReport
from .storage import StageInputError

logger = logging.getLogger("spritedex")

RULE = "=" * 50

# Failures that stop the invoking stage
FATAL_ERRORS = (StageInputError, RosterImportError, NamingRulesError)


def configure_logging(log_file: Path | None = None) -> logging.Handler | None:
    """Log to stderr and, optionally, to a run log file.

    Returns:
        The file handler, so the caller can detach it when done
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.setLevel(logging.INFO)
    if log_file is None:
        return None
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return handler


def _parser(prog: str, description: str, positionals: Sequence[tuple[str, Path]]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    for name, default in positionals:
        parser.add_argument(name, nargs="?", type=Path, default=default, help=f"(default: {default})")
    return parser


def _run(title: str, action: Callable[[], int]) -> int:
    print(title)
    print(RULE)
    try:
        return action()
    except FATAL_ERRORS as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def split_main(argv: Sequence[str] | None = None) -> int:
    """Split 4-up sprite sheets into front / back / shiny sprites."""
    paths = PipelinePaths()
    args = _parser(
        "spritedex-split",
        "Split sprite sheets into individual sprites",
        [("sheets_dir", paths.sheets_dir), ("output_dir", paths.split_dir)],
    ).parse_args(argv)
    configure_logging()

    def action() -> int:
        report = split_stage(args.sheets_dir, args.output_dir)
        print(RULE)
        print(report.format())
        print(f"\nOutput saved to: {args.output_dir}")
        return 0

    return _run("Sprite Sheet Splitter", action)


def extract_main(argv: Sequence[str] | None = None) -> int:
    """Stage 1: map dex numbers to sprite form keys."""
    paths = PipelinePaths()
    args = _parser(
        "spritedex-extract",
        "Map dex numbers to sprite form keys",
        [("input_dir", paths.front_dir), ("output_file", paths.raw_mapping)],
    ).parse_args(argv)
    configure_logging()

    def action() -> int:
        result = extract_stage(args.input_dir, args.output_file)
        print(RULE)
        print("Mapping created successfully!")
        print(f"  Processed: {result.processed}")
        print(f"  Warnings: {len(result.rejected)}")
        print(f"  Unique Dex IDs: {len(result.groups)}")
        report = RunReport(rejected=result.rejected)
        if report.has_warnings:
            print(RULE)
            print(report.format())
        return 0

    return _run("Sprite Mapping Generator", action)


def import_main(argv: Sequence[str] | None = None) -> int:
    """Stage 2: map dex numbers to roster entries."""
    paths = PipelinePaths()
    args = _parser(
        "spritedex-import",
        "Map dex numbers to roster entries",
        [("input_file", paths.roster_source), ("output_file", paths.reference_mapping)],
    ).parse_args(argv)
    configure_logging()

    def action() -> int:
        summary = import_stage(args.input_file, args.output_file)
        print(RULE)
        print(summary.format())
        return 0

    return _run("Roster Importer", action)


def resolve_main(argv: Sequence[str] | None = None) -> int:
    """Stage 3: assign canonical names to every sprite form."""
    paths = PipelinePaths()
    args = _parser(
        "spritedex-resolve",
        "Assign canonical names to sprite forms",
        [
            ("input_file", paths.raw_mapping),
            ("output_file", paths.processed_mapping),
            ("reference_file", paths.reference_mapping),
        ],
    ).parse_args(argv)
    configure_logging()

    def action() -> int:
        report = resolve_stage(args.input_file, args.output_file, args.reference_file)
        print(RULE)
        print("Processing complete!\n")
        print(report.format())
        return 0

    return _run("Sprite Mapping Processor", action)


def fill_main(argv: Sequence[str] | None = None) -> int:
    """Fill missing base, mega and regional forms from a second archive."""
    paths = PipelinePaths()
    args = _parser(
        "spritedex-fill",
        "Fill missing forms from a second sprite archive",
        [
            ("archive_dir", paths.archive_dir),
            ("split_dir", paths.split_dir),
            ("mapping_file", paths.processed_mapping),
            ("log_file", paths.fill_log),
        ],
    ).parse_args(argv)
    log_handler = configure_logging(args.log_file)

    def action() -> int:
        logger.info(f"Started: {datetime.now().isoformat()}")
        run = fill_stage(args.archive_dir, args.split_dir, args.mapping_file)
        result = run.result
        logger.info(RULE)
        logger.info(f"Total files split: {len(result.split)}")
        logger.info(f"Total files skipped: {len(result.skipped)}")
        for item in result.split:
            logger.info(f"  + {item}")
        for item in result.skipped:
            logger.info(f"  = {item} (already exists)")
        for error in result.errors:
            logger.error(f"  ERROR {error}")
        logger.info(f"Completed: {datetime.now().isoformat()}")
        print(f"\nLog written to: {args.log_file}")
        return 0

    try:
        return _run("Fill Missing Sprites", action)
    finally:
        logger.removeHandler(log_handler)
        log_handler.close()


def _entry(main: Callable[[Sequence[str] | None], int]) -> Callable[[], None]:
    def run() -> None:
        sys.exit(main(None))
    return run


split = _entry(split_main)
extract = _entry(extract_main)
import_roster = _entry(import_main)
resolve = _entry(resolve_main)
fill = _entry(fill_main)
