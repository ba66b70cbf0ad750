"""
Static naming rules loaded from YAML.

All creature-specific knowledge (default forms, alternate form suffixes,
regional codes, redundant renders) lives in ``data/form_rules.yaml``. The
resolver only consults the lookups built here.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, PrivateAttr, ValidationError, model_validator

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "form_rules.yaml"


class NamingRulesError(Exception):
    """Raised when a naming rules file is missing or invalid."""


class PrefilterRules(BaseModel):
    """Key markers of redundant renders that never get their own name."""

    markers: list[str] = Field(default_factory=list, description="Case-insensitive substrings, all dex numbers")
    by_dex: dict[int, list[str]] = Field(default_factory=dict, description="Case-sensitive substrings per dex number")


class CanonicalOverride(BaseModel):
    """Default form for a set of dex numbers, by form code or exact raw key."""

    dex: list[int]
    prefix: str | None = None
    key: str | None = None

    @model_validator(mode="after")
    def _one_selector(self) -> "CanonicalOverride":
        if (self.prefix is None) == (self.key is None):
            raise ValueError("canonical override needs exactly one of 'prefix' or 'key'")
        return self


class FormSuffixRule(BaseModel):
    """Form code to name suffix mapping scoped to a set of dex numbers."""

    dex: list[int]
    forms: dict[str, str]


class NamingRules(BaseModel):
    """Validated naming rules with precomputed per-dex lookups.

    Example:
        >>> rules = NamingRules.load()
        >>> rules.form_suffix(386, "a")
        '-Attack'
        >>> rules.mega_suffix(201, "m") is None
        True
    """

    prefilter: PrefilterRules = Field(default_factory=PrefilterRules)
    female_prefix: str = "fem"
    male_prefix: str = "masc"
    mega_suffixes: dict[str, str] = Field(default_factory=dict)
    mega_exclusions: dict[int, list[str]] = Field(default_factory=dict)
    literal_letter_dex: list[int] = Field(default_factory=list)
    canonical_overrides: list[CanonicalOverride] = Field(default_factory=list)
    form_suffixes: list[FormSuffixRule] = Field(default_factory=list)
    regions: dict[str, str] = Field(default_factory=dict)
    generic_region_prefix: str = "r"
    archive_region_codes: dict[str, str] = Field(default_factory=dict)
    region_keys: dict[str, str] = Field(default_factory=dict)

    _overrides: dict[int, CanonicalOverride] = PrivateAttr(default_factory=dict)
    _suffixes: dict[tuple[int, str], str] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _check_tables(self) -> "NamingRules":
        seen_dex: set[int] = set()
        for rule in self.canonical_overrides:
            for dex_id in rule.dex:
                if dex_id in seen_dex:
                    raise ValueError(f"dex {dex_id} has more than one canonical override")
                seen_dex.add(dex_id)

        seen_forms: set[tuple[int, str]] = set()
        for rule in self.form_suffixes:
            for dex_id in rule.dex:
                for code in rule.forms:
                    pair = (dex_id, code.lower())
                    if pair in seen_forms:
                        raise ValueError(f"form code '{code}' for dex {dex_id} is defined twice")
                    seen_forms.add(pair)
        return self

    def model_post_init(self, __context: Any) -> None:
        for rule in self.canonical_overrides:
            for dex_id in rule.dex:
                self._overrides[dex_id] = rule
        for rule in self.form_suffixes:
            for dex_id in rule.dex:
                for code, suffix in rule.forms.items():
                    self._suffixes[(dex_id, code.lower())] = suffix

    @classmethod
    def load(cls, path: Path | None = None) -> "NamingRules":
        """Load rules from a YAML file.

        Args:
            path: Rules file; defaults to the rules shipped with the package

        Raises:
            NamingRulesError: If the file is missing, not YAML, or fails validation
        """
        path = path or DEFAULT_RULES_PATH
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise NamingRulesError(f"Naming rules file '{path}' not found") from e
        except yaml.YAMLError as e:
            raise NamingRulesError(f"Invalid YAML in naming rules file '{path}': {e}") from e

        if not isinstance(data, dict):
            raise NamingRulesError(f"Naming rules file '{path}' must contain a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise NamingRulesError(f"Invalid naming rules in '{path}': {e}") from e

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def is_filtered(self, dex_id: int, key: str) -> bool:
        """True when a key marks a redundant render to drop before naming."""
        lowered = key.lower()
        if any(marker.lower() in lowered for marker in self.prefilter.markers):
            return True
        return any(marker in key for marker in self.prefilter.by_dex.get(dex_id, ()))

    def canonical_override(self, dex_id: int) -> CanonicalOverride | None:
        return self._overrides.get(dex_id)

    def mega_suffix(self, dex_id: int, code: str | None) -> str | None:
        """Suffix for a mega form code, or None if the code is not mega for this dex."""
        if code is None or code not in self.mega_suffixes:
            return None
        if code in self.mega_exclusions.get(dex_id, ()):
            return None
        return self.mega_suffixes[code]

    def form_suffix(self, dex_id: int, code: str) -> str | None:
        return self._suffixes.get((dex_id, code))

    def region_for_code(self, code: str) -> str | None:
        return self.regions.get(code)

    def uses_literal_letters(self, dex_id: int) -> bool:
        return dex_id in self.literal_letter_dex
