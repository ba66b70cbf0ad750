"""
Pipeline stages. Each reads one complete input and writes one complete output.

Stages:
- split:   sprite sheets -> per-view sprite directories
- extract: sprite filenames -> dex number to form records (stage 1)
- import:  roster data file -> dex number to reference entries (stage 2)
- resolve: stage 1 + stage 2 -> dex number to named forms (stage 3)
- fill:    stage 3 + second archive -> sprites for missing forms
"""

import logging
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field

from .extractor import ExtractionResult, extract_keys, list_sprite_files
from .gap_filler import FillResult, GapReport, MappingSummary, fill_gaps, identify_gaps, scan_archive, summarize_mapping
from .importers import ImportSummary, ReferenceTable, build_reference_table, load_roster_file
from .models import FormRecord, RejectedFile, ResolvedForm
from .naming import NameResolver
from .report import RunReport
from .slicer import SheetSplitter, SplitReport
from .storage import StageInputError, dump_grouped, load_grouped, write_json_atomic

logger = logging.getLogger("spritedex")


class ResolutionRun(BaseModel):
    """Stage-3 output plus the run report."""

    groups: dict[int, list[ResolvedForm]] = Field(default_factory=dict)
    report: RunReport = Field(default_factory=RunReport)


class FillRun(BaseModel):
    summary: MappingSummary
    gaps: GapReport
    result: FillResult


def split_stage(sheets_dir: Path, output_dir: Path) -> SplitReport:
    """Split every sheet under ``sheets_dir`` into ``output_dir``."""
    logger.info(f"Splitting sprite sheets from {sheets_dir}")
    return SheetSplitter(output_dir).split_directory(sheets_dir)


def extract_stage(input_dir: Path, output_file: Path) -> ExtractionResult:
    """Stage 1: group the sprite files of ``input_dir`` by dex number.

    Raises:
        StageInputError: If ``input_dir`` does not exist
    """
    if not input_dir.is_dir():
        raise StageInputError(f"Directory '{input_dir}' not found")

    logger.info(f"Reading files from: {input_dir}")
    filenames = list_sprite_files(input_dir)
    logger.info(f"Found {len(filenames)} image files")

    result = extract_keys(filenames)
    write_json_atomic(output_file, dump_grouped(result.groups))
    logger.info(f"Full mapping saved to: {output_file}")
    return result


def import_stage(input_file: Path, output_file: Path) -> ImportSummary:
    """Stage 2: re-key the roster data file by dex number.

    Raises:
        StageInputError: If ``input_file`` does not exist
        RosterImportError: If the data file cannot be parsed
    """
    logger.info(f"Reading {input_file}...")
    data = load_roster_file(input_file)
    entries = build_reference_table(data["species"])
    write_json_atomic(output_file, dump_grouped(entries))
    logger.info(f"Full mapping saved to: {output_file}")
    return ImportSummary.from_table(entries, regional_dex=ReferenceTable(entries).regional_dex_count)


def resolve_mapping(
    groups: dict[int, Iterable[FormRecord]],
    reference: ReferenceTable | None = None,
    resolver: NameResolver | None = None,
    rejected: Iterable[RejectedFile] = (),
) -> ResolutionRun:
    """Resolve every dex group.

    Args:
        groups: Stage-1 records per dex number
        reference: Roster names and regional forms; names fall back to "Dex-{id}"
        resolver: Resolver to use; one with the packaged rules by default
        rejected: Rejected files to carry into the report

    Returns:
        ResolutionRun with groups in ascending dex order
    """
    reference = reference or ReferenceTable()
    resolver = resolver or NameResolver()

    resolved: dict[int, list[ResolvedForm]] = {}
    resolutions = []
    for creature_id in sorted(groups):
        group = resolver.resolve_group(
            creature_id,
            groups[creature_id],
            canonical_name=reference.canonical_name(creature_id),
            regional_codes=reference.regional_codes(creature_id),
        )
        resolutions.append(group)
        resolved[creature_id] = group.forms

    return ResolutionRun(groups=resolved, report=RunReport.from_resolutions(resolutions, rejected))


def resolve_stage(
    input_file: Path,
    output_file: Path,
    reference_file: Path | None = None,
    resolver: NameResolver | None = None,
) -> RunReport:
    """Stage 3: name every form of the stage-1 mapping.

    The reference file is optional; when it is missing, names fall back to
    "Dex-{id}" and a warning is logged.

    Raises:
        StageInputError: If ``input_file`` is missing or malformed
    """
    logger.info(f"Reading {input_file}...")
    groups = load_grouped(input_file, FormRecord)

    reference = ReferenceTable()
    if reference_file is None:
        logger.info("No reference file given, using Dex-<id> names")
    elif reference_file.exists():
        logger.info(f"Loading names from {reference_file}...")
        reference = ReferenceTable.from_file(reference_file)
        logger.info(f"Found regional forms for {reference.regional_dex_count} dex numbers")
    else:
        logger.warning(f"Reference file '{reference_file}' not found, using Dex-<id> names")

    run = resolve_mapping(groups, reference, resolver)
    write_json_atomic(output_file, dump_grouped(run.groups))
    logger.info(f"Processed mapping saved to: {output_file}")
    return run.report


def fill_stage(archive_dir: Path, split_dir: Path, mapping_file: Path, resolver: NameResolver | None = None) -> FillRun:
    """Split archive sheets for forms the processed mapping lacks.

    Raises:
        StageInputError: If the archive or the mapping file is missing
    """
    rules = (resolver or NameResolver()).rules

    inventory = scan_archive(archive_dir)
    mapping = load_grouped(mapping_file, ResolvedForm)
    summary = summarize_mapping(mapping)
    logger.info(f"Total dex IDs in mapping: {summary.total_dex_ids}")

    gaps = identify_gaps(inventory, mapping, rules)
    logger.info(f"Missing base forms: {len(gaps.missing_base)}")
    logger.info(f"Missing mega forms: {len(gaps.missing_mega)}")
    logger.info(f"Missing regional forms: {len(gaps.missing_regional)}")

    result = fill_gaps(gaps, inventory, SheetSplitter(split_dir), rules)
    return FillRun(summary=summary, gaps=gaps, result=result)
