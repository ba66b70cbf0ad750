"""
Fill missing forms from a second sprite archive.

The archive uses its own layout and naming:

- ``<root>/0025.png``: base form sheets
- ``<root>/115-M.png``, ``<root>/052-A.png``: mega / regional sheets
- ``<root>/Megas/006-MX.png``, ``<root>/Megas/003-f-M.png``
- ``<root>/Regional Forms/052-G.png``
- ``<root>/Unown/201-a.png``

Sheets for forms the processed mapping lacks are split into the sprite
directories under filenames the key extractor understands, using the same
form-key vocabulary ("(m)", "(mx)", "(ra)", ...) the naming rules read.
"""

import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field

from .models import ResolvedForm
from .naming.rules import NamingRules
from .slicer import SheetSplitter
from .storage import StageInputError

logger = logging.getLogger("spritedex")

MEGAS_FOLDER = "Megas"
REGIONAL_FOLDER = "Regional Forms"
UNOWN_FOLDER = "Unown"
UNOWN_DEX = 201

_BASE_RE = re.compile(r"^\d+\.png$")
_SPECIAL_RE = re.compile(r"^(\d+)-([A-Z])\.png$")
_MEGA_RE = re.compile(r"^(\d+)(-[a-z]+)?-(M[XY]?)\.png$", re.IGNORECASE)
_REGIONAL_RE = re.compile(r"^(\d+)-([AGHP])\.png$")
_UNOWN_RE = re.compile(r"^201-([a-z]+|exclamation|question)\.png$", re.IGNORECASE)

_MEGA_KEYS = {"M": "(m)", "MX": "(mx)", "MY": "(my)"}

# A dex group "has a base form" when some name carries none of these
BASE_EXCLUDED_MARKERS: tuple[str, ...] = ("-Mega", "-Alola", "-Galar", "-Hisui")


class ArchiveInventory(BaseModel):
    """Sheets found in the second archive, as paths relative to ``root``."""

    root: Path
    base: dict[int, str] = Field(default_factory=dict)
    mega: dict[int, list[str]] = Field(default_factory=dict)
    regional: dict[int, dict[str, str]] = Field(default_factory=dict, description="dex -> region letter -> sheet")
    unown: list[str] = Field(default_factory=list)


class MissingBase(BaseModel):
    dex_id: int
    reason: str
    available: str


class MissingMega(BaseModel):
    dex_id: int
    available: list[str]


class MissingRegional(BaseModel):
    dex_id: int
    region: str
    region_code: str
    available: str


class GapReport(BaseModel):
    """Forms the archive offers that the processed mapping lacks."""

    missing_base: list[MissingBase] = Field(default_factory=list)
    missing_mega: list[MissingMega] = Field(default_factory=list)
    missing_regional: list[MissingRegional] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.missing_base) + len(self.missing_mega) + len(self.missing_regional)


class MappingSummary(BaseModel):
    """Form coverage of the processed mapping."""

    total_dex_ids: int = 0
    with_base: int = 0
    with_mega: int = 0
    with_regional: int = 0
    with_alola: int = 0
    with_galar: int = 0
    with_hisui: int = 0


class FillResult(BaseModel):
    split: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


def _has_base(forms: list[ResolvedForm]) -> bool:
    return any(
        not any(marker in form.assigned_name for marker in BASE_EXCLUDED_MARKERS)
        for form in forms
    )


def _has_name_part(forms: list[ResolvedForm], part: str) -> bool:
    return any(part in form.assigned_name for form in forms)


def _png_names(folder: Path) -> list[str]:
    return sorted(p.name for p in folder.iterdir() if p.is_file() and p.name.endswith(".png"))


def scan_archive(root: Path) -> ArchiveInventory:
    """Inventory the base, mega, regional and Unown sheets of the archive.

    Raises:
        StageInputError: If ``root`` does not exist
    """
    if not root.is_dir():
        raise StageInputError(f"Sprite archive not found: {root}")

    inventory = ArchiveInventory(root=root)
    main_files = _png_names(root)

    for name in main_files:
        if _BASE_RE.match(name):
            inventory.base[int(name[:-4])] = name
    logger.info(f"Found {len(inventory.base)} base form sprites in main folder")

    special = [name for name in main_files if _SPECIAL_RE.match(name)]
    logger.info(f"Found {len(special)} special form sprites in main folder")
    for name in special:
        match = _SPECIAL_RE.match(name)
        dex_id, form_type = int(match.group(1)), match.group(2)
        if form_type == "M":
            inventory.mega.setdefault(dex_id, []).append(name)
        elif form_type in ("A", "G", "H", "P"):
            inventory.regional.setdefault(dex_id, {})[form_type] = name

    megas_dir = root / MEGAS_FOLDER
    if megas_dir.is_dir():
        mega_files = _png_names(megas_dir)
        logger.info(f"Found {len(mega_files)} mega form sprites in {MEGAS_FOLDER} folder")
        for name in mega_files:
            match = _MEGA_RE.match(name)
            if match:
                inventory.mega.setdefault(int(match.group(1)), []).append(f"{MEGAS_FOLDER}/{name}")

    regional_dir = root / REGIONAL_FOLDER
    if regional_dir.is_dir():
        regional_files = _png_names(regional_dir)
        logger.info(f"Found {len(regional_files)} regional form sprites in {REGIONAL_FOLDER} folder")
        for name in regional_files:
            match = _REGIONAL_RE.match(name)
            if match:
                inventory.regional.setdefault(int(match.group(1)), {})[match.group(2)] = f"{REGIONAL_FOLDER}/{name}"

    unown_dir = root / UNOWN_FOLDER
    if unown_dir.is_dir():
        inventory.unown = [f"{UNOWN_FOLDER}/{name}" for name in _png_names(unown_dir)]
        logger.info(f"Found {len(inventory.unown)} Unown form sprites in {UNOWN_FOLDER} folder")

    return inventory


def summarize_mapping(mapping: dict[int, list[ResolvedForm]]) -> MappingSummary:
    summary = MappingSummary(total_dex_ids=len(mapping))
    for forms in mapping.values():
        alola = _has_name_part(forms, "-Alola")
        galar = _has_name_part(forms, "-Galar")
        hisui = _has_name_part(forms, "-Hisui")
        summary.with_base += _has_base(forms)
        summary.with_mega += _has_name_part(forms, "-Mega")
        summary.with_regional += alola or galar or hisui
        summary.with_alola += alola
        summary.with_galar += galar
        summary.with_hisui += hisui
    return summary


def identify_gaps(
    inventory: ArchiveInventory,
    mapping: dict[int, list[ResolvedForm]],
    rules: NamingRules,
) -> GapReport:
    """Compare the archive inventory against the processed mapping.

    Args:
        inventory: Result of :func:`scan_archive`
        mapping: Stage-3 output, dex number -> resolved forms
        rules: Naming rules (archive region letters)

    Returns:
        GapReport listing every base, mega and regional sheet worth splitting
    """
    report = GapReport()

    for dex_id, sheet in sorted(inventory.base.items()):
        existing = mapping.get(dex_id) or []
        if not existing:
            report.missing_base.append(MissingBase(dex_id=dex_id, reason="No entry in mapping", available=sheet))
        elif not _has_base(existing):
            report.missing_base.append(MissingBase(dex_id=dex_id, reason="Has forms but no base", available=sheet))

    for dex_id, sheets in sorted(inventory.mega.items()):
        existing = mapping.get(dex_id) or []
        if not _has_name_part(existing, "-Mega"):
            report.missing_mega.append(MissingMega(dex_id=dex_id, available=list(sheets)))

    for dex_id, regions in sorted(inventory.regional.items()):
        existing = mapping.get(dex_id) or []
        for code, sheet in regions.items():
            region = rules.archive_region_codes.get(code)
            if region is None:
                logger.warning(f"Dex {dex_id}: unknown archive region code '{code}' ({sheet})")
                continue
            if not _has_name_part(existing, f"-{region}"):
                report.missing_regional.append(MissingRegional(
                    dex_id=dex_id, region=region, region_code=code, available=sheet,
                ))

    return report


def mega_key(sheet: str) -> str | None:
    """Form key for a mega sheet, e.g. "Megas/003-f-M.png" -> "-f(m)"."""
    match = _MEGA_RE.match(Path(sheet).name)
    if not match:
        return None
    variant = match.group(2) or ""
    return f"{variant}{_MEGA_KEYS[match.group(3).upper()]}"


def unown_key(sheet: str) -> str | None:
    """Form key for an Unown sheet, e.g. "Unown/201-a.png" -> "(a)"."""
    match = _UNOWN_RE.match(Path(sheet).name)
    if not match:
        return None
    return f"({match.group(1)})"


def sprite_filename(dex_id: int, key: str) -> str:
    return f"{dex_id:04d}{key}.png"


def fill_gaps(
    report: GapReport,
    inventory: ArchiveInventory,
    splitter: SheetSplitter,
    rules: NamingRules,
) -> FillResult:
    """Split the archive sheets that fill the reported gaps.

    Sprites that already exist are skipped, so re-running is safe. Every
    Unown sheet is split regardless of gaps.
    """
    result = FillResult()

    def split(sheet: str, dex_id: int, key: str) -> None:
        outcome = splitter.split(inventory.root / sheet, sprite_filename(dex_id, key), skip_existing=True)
        result.split.extend(outcome.written)
        result.skipped.extend(outcome.skipped)
        if outcome.error:
            result.errors.append(f"{sheet}: {outcome.error}")
        elif outcome.written:
            logger.info(f"    Split to: {', '.join(outcome.written)}")

    if report.missing_base:
        logger.info(f"Processing {len(report.missing_base)} missing base forms...")
    for gap in report.missing_base:
        logger.info(f"  Processing Dex {gap.dex_id}...")
        split(gap.available, gap.dex_id, "")

    if report.missing_mega:
        logger.info(f"Processing {len(report.missing_mega)} missing mega forms...")
    for gap in report.missing_mega:
        logger.info(f"  Processing Dex {gap.dex_id} megas...")
        for sheet in gap.available:
            key = mega_key(sheet)
            if key is None:
                continue
            logger.info(f"    Mega key: {key}")
            split(sheet, gap.dex_id, key)

    if report.missing_regional:
        logger.info(f"Processing {len(report.missing_regional)} missing regional forms...")
    for gap in report.missing_regional:
        key = rules.region_keys.get(gap.region)
        if key is None:
            logger.warning(f"  Dex {gap.dex_id}: no form key configured for region {gap.region}")
            continue
        logger.info(f"  Processing Dex {gap.dex_id} {gap.region}...")
        split(gap.available, gap.dex_id, key)

    if inventory.unown:
        logger.info(f"Processing {len(inventory.unown)} Unown forms (Dex {UNOWN_DEX})...")
    for sheet in inventory.unown:
        key = unown_key(sheet)
        if key is None:
            continue
        logger.info(f"  Processing Unown-{key[1:-1]}...")
        split(sheet, UNOWN_DEX, key)

    return result
