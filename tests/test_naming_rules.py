"""
Tests for loading and querying the YAML naming rules.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from spritedex.naming import NamingRules, NamingRulesError
from spritedex.naming.rules import CanonicalOverride


class TestLoad:
    """Test rules file loading and validation."""

    def test_packaged_rules_load(self, rules: NamingRules) -> None:
        assert rules.female_prefix == "fem"
        assert rules.male_prefix == "masc"
        assert rules.generic_region_prefix == "r"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(NamingRulesError, match="not found"):
            NamingRules.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("mega_suffixes: [unclosed\n", encoding="utf-8")
        with pytest.raises(NamingRulesError, match="Invalid YAML"):
            NamingRules.load(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(NamingRulesError, match="must contain a mapping"):
            NamingRules.load(path)

    def test_duplicate_override_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            "canonical_overrides:\n"
            "  - {dex: [412], prefix: plant}\n"
            "  - {dex: [412], prefix: sandy}\n",
            encoding="utf-8",
        )
        with pytest.raises(NamingRulesError, match="more than one canonical override"):
            NamingRules.load(path)

    def test_duplicate_form_code_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            "form_suffixes:\n"
            "  - {dex: [386], forms: {a: -Attack}}\n"
            "  - {dex: [386], forms: {A: -Other}}\n",
            encoding="utf-8",
        )
        with pytest.raises(NamingRulesError, match="defined twice"):
            NamingRules.load(path)

    def test_minimal_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("mega_suffixes: {m: -Mega}\n", encoding="utf-8")
        rules = NamingRules.load(path)
        assert rules.mega_suffix(6, "m") == "-Mega"
        assert rules.canonical_override(412) is None


class TestCanonicalOverride:
    """Test override selector validation."""

    def test_requires_a_selector(self) -> None:
        with pytest.raises(ValidationError):
            CanonicalOverride(dex=[1])

    def test_rejects_both_selectors(self) -> None:
        with pytest.raises(ValidationError):
            CanonicalOverride(dex=[1], prefix="a", key="-01")


class TestLookups:
    """Test the per-dex lookups of the packaged rules."""

    def test_canonical_override(self, rules: NamingRules) -> None:
        assert rules.canonical_override(413).prefix == "plant"
        assert rules.canonical_override(771).key == "-01"
        assert rules.canonical_override(25) is None

    def test_mega_suffix(self, rules: NamingRules) -> None:
        assert rules.mega_suffix(6, "mx") == "-Mega-X"
        assert rules.mega_suffix(6, "cap") is None
        assert rules.mega_suffix(6, None) is None

    def test_mega_exclusion(self, rules: NamingRules) -> None:
        assert rules.mega_suffix(201, "m") is None
        assert rules.mega_suffix(201, "mx") == "-Mega-X"

    def test_form_suffix_scoped_to_dex(self, rules: NamingRules) -> None:
        assert rules.form_suffix(386, "s") == "-Speed"
        assert rules.form_suffix(492, "s") == "-Sky"
        assert rules.form_suffix(25, "s") is None

    def test_shared_and_specific_form_codes(self, rules: NamingRules) -> None:
        assert rules.form_suffix(669, "y") == "-Yellow-Flower"
        assert rules.form_suffix(670, "e") == "-Eternal"
        assert rules.form_suffix(671, "e") is None

    def test_regions(self, rules: NamingRules) -> None:
        assert rules.region_for_code("ra") == "Alola"
        assert rules.region_for_code("rp") == "Paldea"
        assert rules.region_for_code("r") is None

    def test_prefilter(self, rules: NamingRules) -> None:
        assert rules.is_filtered(1, "(All)-2")
        assert rules.is_filtered(666, "(mea)Gen6")
        assert not rules.is_filtered(665, "(mea)Gen6")
        assert not rules.is_filtered(1, "1")

    def test_literal_letters(self, rules: NamingRules) -> None:
        assert rules.uses_literal_letters(201)
        assert not rules.uses_literal_letters(6)

    def test_gap_filler_tables(self, rules: NamingRules) -> None:
        assert rules.archive_region_codes["P"] == "Sevii"
        assert rules.region_keys["Sevii"] == "(r)"
