"""
Tests for sprite sheet splitting.
"""

from pathlib import Path

import pytest
from PIL import Image

from spritedex.slicer import SPRITE_VIEWS, SheetSplitter
from spritedex.storage import StageInputError


class TestSplit:
    """Test splitting a single sheet."""

    def test_writes_four_views(self, tmp_path: Path, make_sheet) -> None:
        sheet = make_sheet(tmp_path / "sheets" / "0006.png")
        splitter = SheetSplitter(tmp_path / "out")

        outcome = splitter.split(sheet)

        assert outcome.ok
        assert outcome.written == [f"{view}/0006.png" for view in SPRITE_VIEWS]
        with Image.open(sheet) as source:
            expected = [source.convert("RGBA").getpixel((index * 4 + 1, 1)) for index in range(4)]
        assert len(set(expected)) == 4
        for view, color in zip(SPRITE_VIEWS, expected):
            with Image.open(tmp_path / "out" / view / "0006.png") as sprite:
                assert sprite.size == (4, 4)
                assert sprite.convert("RGBA").getpixel((1, 1)) == color

    def test_output_name(self, tmp_path: Path, make_sheet) -> None:
        sheet = make_sheet(tmp_path / "sheet.png")
        outcome = SheetSplitter(tmp_path / "out").split(sheet, "0003(m).png")
        assert (tmp_path / "out" / "back shiny" / "0003(m).png").exists()
        assert outcome.output_name == "0003(m).png"

    def test_skip_existing(self, tmp_path: Path, make_sheet) -> None:
        sheet = make_sheet(tmp_path / "sheet.png")
        splitter = SheetSplitter(tmp_path / "out")
        splitter.split(sheet, "0001.png")

        outcome = splitter.split(sheet, "0001.png", skip_existing=True)

        assert outcome.written == []
        assert len(outcome.skipped) == 4

    def test_unreadable_sheet_reported(self, tmp_path: Path) -> None:
        sheet = tmp_path / "broken.png"
        sheet.write_bytes(b"not an image")
        outcome = SheetSplitter(tmp_path / "out").split(sheet)
        assert not outcome.ok
        assert outcome.written == []

    def test_too_narrow_sheet_reported(self, tmp_path: Path) -> None:
        sheet = tmp_path / "narrow.png"
        Image.new("RGBA", (3, 3)).save(sheet)
        outcome = SheetSplitter(tmp_path / "out").split(sheet)
        assert "too narrow" in outcome.error


class TestSplitDirectory:
    """Test walking a sheets directory."""

    def test_processes_subfolders_only(self, tmp_path: Path, make_sheet) -> None:
        sheets = tmp_path / "sheets"
        make_sheet(sheets / "Gen 1" / "0001.png")
        make_sheet(sheets / "Gen 1" / "nested" / "0002.png")
        make_sheet(sheets / "loose.png")
        (sheets / "Gen 1" / "notes.txt").write_text("x")

        report = SheetSplitter(tmp_path / "out").split_directory(sheets)

        assert report.processed == 2
        assert report.failed == []
        assert (tmp_path / "out" / "front" / "0002.png").exists()
        assert not (tmp_path / "out" / "front" / "loose.png").exists()

    def test_duplicate_names_renamed(self, tmp_path: Path, make_sheet) -> None:
        sheets = tmp_path / "sheets"
        make_sheet(sheets / "Gen 1" / "0025.png")
        make_sheet(sheets / "Gen 2" / "0025.png")

        report = SheetSplitter(tmp_path / "out").split_directory(sheets)

        assert report.processed == 2
        assert [(r.original, r.unique) for r in report.renamed] == [("0025.png", "0025_Gen_2.png")]
        assert report.renamed[0].conflicts_with == str(Path("Gen 1") / "0025.png")
        assert (tmp_path / "out" / "front" / "0025.png").exists()
        assert (tmp_path / "out" / "front" / "0025_Gen_2.png").exists()
        assert "Duplicates renamed: 1" in report.format()

    def test_failures_collected(self, tmp_path: Path) -> None:
        sheets = tmp_path / "sheets"
        (sheets / "Gen 1").mkdir(parents=True)
        (sheets / "Gen 1" / "0001.png").write_bytes(b"broken")

        report = SheetSplitter(tmp_path / "out").split_directory(sheets)

        assert report.processed == 0
        assert len(report.failed) == 1
        assert "Errors encountered:" in report.format()

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(StageInputError):
            SheetSplitter(tmp_path / "out").split_directory(tmp_path / "missing")
