"""
Split 4-up sprite sheets into individual sprites.

Each sheet holds four equal-width sprites in one row: front, front shiny,
back, back shiny. Each one is written to a subdirectory of the same name.
"""

import logging
import re
from pathlib import Path

from PIL import Image
from pydantic import BaseModel, Field

from .extractor import is_image_file
from .storage import StageInputError

logger = logging.getLogger("spritedex")

SPRITE_VIEWS: tuple[str, ...] = ("front", "front shiny", "back", "back shiny")


class SplitOutcome(BaseModel):
    """Files produced (or skipped) for one sheet."""

    sheet: str
    output_name: str
    written: list[str] = Field(default_factory=list, description="'view/filename' per written sprite")
    skipped: list[str] = Field(default_factory=list, description="'view/filename' per existing sprite")
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RenamedSheet(BaseModel):
    """A sheet whose basename collided with an earlier one."""

    original: str
    unique: str
    path: str
    conflicts_with: str


class SplitReport(BaseModel):
    """Results of splitting a whole sheets directory."""

    processed: int = 0
    failed: list[SplitOutcome] = Field(default_factory=list)
    renamed: list[RenamedSheet] = Field(default_factory=list)

    def format(self) -> str:
        lines = [
            f"Successfully processed: {self.processed}",
            f"Failed: {len(self.failed)}",
            f"Duplicates renamed: {len(self.renamed)}",
        ]
        if self.renamed:
            lines.append("")
            lines.append("Duplicate filenames (renamed):")
            for item in self.renamed:
                lines.append(f"  {item.original} -> {item.unique}")
                lines.append(f"    Location: {item.path}")
                lines.append(f"    Conflicts with: {item.conflicts_with}")
        if self.failed:
            lines.append("")
            lines.append("Errors encountered:")
            for outcome in self.failed:
                lines.append(f"  {outcome.sheet}: {outcome.error}")
        return "\n".join(lines)


class SheetSplitter:
    """Crops sprite sheets into the four view directories under ``output_dir``.

    Example:
        >>> splitter = SheetSplitter(Path("moemon-sprites-split"))
        >>> outcome = splitter.split(Path("sheets/0006.png"))
        >>> outcome.written
        ['front/0006.png', 'front shiny/0006.png', 'back/0006.png', 'back shiny/0006.png']
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def view_dir(self, view: str) -> Path:
        return self.output_dir / view

    def ensure_directories(self) -> None:
        for view in SPRITE_VIEWS:
            self.view_dir(view).mkdir(parents=True, exist_ok=True)

    def split(self, sheet_path: Path, output_name: str | None = None, skip_existing: bool = False) -> SplitOutcome:
        """Split one sheet into its four sprites.

        Args:
            sheet_path: Sheet image to split
            output_name: Filename for the sprites; defaults to the sheet's name
            skip_existing: Leave sprites that already exist untouched

        Returns:
            SplitOutcome; read errors are reported in ``error``, not raised
        """
        output_name = output_name or sheet_path.name
        outcome = SplitOutcome(sheet=str(sheet_path), output_name=output_name)

        try:
            with Image.open(sheet_path) as sheet:
                width, height = sheet.size
                sprite_width = width // len(SPRITE_VIEWS)
                if sprite_width == 0:
                    raise ValueError(f"sheet is too narrow to split ({width}px)")

                for index, view in enumerate(SPRITE_VIEWS):
                    target_dir = self.view_dir(view)
                    target = target_dir / output_name
                    label = f"{view}/{output_name}"
                    if skip_existing and target.exists():
                        outcome.skipped.append(label)
                        logger.debug(f"Skipped {label} (already exists)")
                        continue

                    target_dir.mkdir(parents=True, exist_ok=True)
                    left = index * sprite_width
                    sprite = sheet.crop((left, 0, left + sprite_width, height))
                    sprite.save(target)
                    outcome.written.append(label)
        except (OSError, ValueError) as e:
            outcome.error = str(e)
            logger.error(f"Error processing {sheet_path}: {e}")

        return outcome

    def split_directory(self, sheets_dir: Path) -> SplitReport:
        """Split every sheet found in the folders of ``sheets_dir``.

        Only images inside subfolders are processed (one folder per sheet
        set). Sheets sharing a basename get a name derived from their folder
        so no sprite is overwritten.

        Raises:
            StageInputError: If ``sheets_dir`` does not exist
        """
        if not sheets_dir.is_dir():
            raise StageInputError(f"Spritesets directory not found: {sheets_dir}")

        self.ensure_directories()
        report = SplitReport()
        registry: dict[str, Path] = {}

        folders = sorted(p for p in sheets_dir.iterdir() if p.is_dir())
        logger.info(f"Found {len(folders)} folders to process")

        for folder in folders:
            sheets = sorted(p for p in folder.rglob("*") if p.is_file() and is_image_file(p.name))
            logger.info(f"  {folder.name}: {len(sheets)} images")

            for sheet_path in sheets:
                output_name = self._unique_name(sheet_path, sheets_dir, registry, report)
                outcome = self.split(sheet_path, output_name)
                if outcome.ok:
                    report.processed += 1
                    if report.processed % 50 == 0:
                        logger.info(f"Processed {report.processed} files...")
                else:
                    report.failed.append(outcome)

        return report

    @staticmethod
    def _unique_name(
        sheet_path: Path,
        sheets_dir: Path,
        registry: dict[str, Path],
        report: SplitReport,
    ) -> str:
        name = sheet_path.name
        if name not in registry:
            registry[name] = sheet_path
            return name

        relative_folder = sheet_path.parent.relative_to(sheets_dir)
        folder_part = re.sub(r"\s+", "_", "-".join(relative_folder.parts))
        unique = f"{sheet_path.stem}_{folder_part}{sheet_path.suffix}"
        counter = 1
        while unique in registry:
            unique = f"{sheet_path.stem}_{folder_part}_{counter}{sheet_path.suffix}"
            counter += 1

        registry[unique] = sheet_path
        report.renamed.append(RenamedSheet(
            original=name,
            unique=unique,
            path=str(sheet_path.relative_to(sheets_dir)),
            conflicts_with=str(registry[name].relative_to(sheets_dir)),
        ))
        return unique
