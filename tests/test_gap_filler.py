"""
Tests for filling missing forms from the second sprite archive.
"""

from pathlib import Path

import pytest

from spritedex.gap_filler import (
    fill_gaps,
    identify_gaps,
    mega_key,
    scan_archive,
    sprite_filename,
    summarize_mapping,
    unown_key,
)
from spritedex.models import ResolvedForm
from spritedex.naming import NamingRules
from spritedex.slicer import SheetSplitter
from spritedex.storage import StageInputError


def _forms(dex_id: int, *names: str) -> list[ResolvedForm]:
    return [
        ResolvedForm(filename=f"{dex_id:04d}-{i}.png", key=str(i), creature_id=dex_id, assigned_name=name)
        for i, name in enumerate(names)
    ]


@pytest.fixture
def archive(tmp_path: Path, make_sheet) -> Path:
    root = tmp_path / "Sprite Database"
    for name in ["0001.png", "0019.png", "0052.png", "115-M.png", "052-A.png"]:
        make_sheet(root / name)
    for name in ["006-MX.png", "003-f-M.png"]:
        make_sheet(root / "Megas" / name)
    make_sheet(root / "Regional Forms" / "052-G.png")
    make_sheet(root / "Regional Forms" / "077-P.png")
    for name in ["201-a.png", "201-question.png"]:
        make_sheet(root / "Unown" / name)
    (root / "readme.txt").write_text("x")
    return root


class TestScanArchive:
    """Test inventorying the archive layout."""

    def test_inventory(self, archive: Path) -> None:
        inventory = scan_archive(archive)
        assert inventory.base == {1: "0001.png", 19: "0019.png", 52: "0052.png"}
        assert inventory.mega == {3: ["Megas/003-f-M.png"], 6: ["Megas/006-MX.png"], 115: ["115-M.png"]}
        assert inventory.regional == {
            52: {"A": "052-A.png", "G": "Regional Forms/052-G.png"},
            77: {"P": "Regional Forms/077-P.png"},
        }
        assert inventory.unown == ["Unown/201-a.png", "Unown/201-question.png"]

    def test_missing_archive(self, tmp_path: Path) -> None:
        with pytest.raises(StageInputError):
            scan_archive(tmp_path / "missing")


class TestIdentifyGaps:
    """Test comparing the archive against the processed mapping."""

    def test_gaps(self, archive: Path, rules: NamingRules) -> None:
        mapping = {
            19: _forms(19, "Rattata-Alola"),
            52: _forms(52, "Meowth", "Meowth-Alola"),
            6: _forms(6, "Charizard", "Charizard-Mega-X"),
        }
        report = identify_gaps(scan_archive(archive), mapping, rules)

        assert [(g.dex_id, g.reason) for g in report.missing_base] == [
            (1, "No entry in mapping"),
            (19, "Has forms but no base"),
        ]
        assert [g.dex_id for g in report.missing_mega] == [3, 115]
        assert [(g.dex_id, g.region) for g in report.missing_regional] == [(52, "Galar"), (77, "Sevii")]
        assert report.total == 6

    def test_summary(self) -> None:
        summary = summarize_mapping({
            19: _forms(19, "Rattata", "Rattata-Alola"),
            6: _forms(6, "Charizard-Mega"),
            83: _forms(83, "Farfetch'd-Galar"),
        })
        assert summary.total_dex_ids == 3
        assert summary.with_base == 1
        assert summary.with_mega == 1
        assert summary.with_regional == 2
        assert summary.with_alola == 1
        assert summary.with_galar == 1


class TestKeys:
    """Test archive sheet name to form key conversion."""

    @pytest.mark.parametrize(
        "sheet,key",
        [
            ("Megas/006-MX.png", "(mx)"),
            ("Megas/006-my.png", "(my)"),
            ("115-M.png", "(m)"),
            ("Megas/003-f-M.png", "-f(m)"),
            ("0001.png", None),
        ],
    )
    def test_mega_key(self, sheet: str, key: str | None) -> None:
        assert mega_key(sheet) == key

    def test_unown_key(self) -> None:
        assert unown_key("Unown/201-a.png") == "(a)"
        assert unown_key("Unown/201-exclamation.png") == "(exclamation)"
        assert unown_key("Unown/202-a.png") is None

    def test_sprite_filename(self) -> None:
        assert sprite_filename(6, "(mx)") == "0006(mx).png"
        assert sprite_filename(25, "") == "0025.png"


class TestFillGaps:
    """Test splitting the sheets that fill gaps."""

    def test_fill(self, archive: Path, rules: NamingRules, tmp_path: Path) -> None:
        inventory = scan_archive(archive)
        mapping = {52: _forms(52, "Meowth", "Meowth-Alola"), 19: _forms(19, "Rattata")}
        report = identify_gaps(inventory, mapping, rules)
        splitter = SheetSplitter(tmp_path / "split")

        result = fill_gaps(report, inventory, splitter, rules)

        front = tmp_path / "split" / "front"
        assert (front / "0001.png").exists()
        assert (front / "0003-f(m).png").exists()
        assert (front / "0006(mx).png").exists()
        assert (front / "0115(m).png").exists()
        assert (front / "0052(rg).png").exists()
        assert (front / "0077(r).png").exists()
        assert (front / "0201(a).png").exists()
        assert (front / "0201(question).png").exists()
        assert not (front / "0019.png").exists()
        assert result.errors == []
        assert "front/0001.png" in result.split

    def test_rerun_skips_existing(self, archive: Path, rules: NamingRules, tmp_path: Path) -> None:
        inventory = scan_archive(archive)
        report = identify_gaps(inventory, {}, rules)
        splitter = SheetSplitter(tmp_path / "split")
        first = fill_gaps(report, inventory, splitter, rules)

        second = fill_gaps(report, inventory, splitter, rules)

        assert second.split == []
        assert len(second.skipped) == len(first.split)
