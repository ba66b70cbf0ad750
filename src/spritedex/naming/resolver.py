"""
Name resolution: assign display names and canonical flags to a dex group.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..models import FormRecord, ParsedKey, ResolvedForm
from .keys import as_literal_letter, parse_key
from .rules import NamingRules

logger = logging.getLogger("spritedex")


class UnresolvedRegional(BaseModel):
    """A generic regional code whose target region could not be determined."""
    model_config = ConfigDict(frozen=True)

    creature_id: int
    filename: str
    key: str
    known_regions: tuple[str, ...] = ()


class GroupResolution(BaseModel):
    """Resolved forms of one dex group plus the conditions worth reporting."""
    model_config = ConfigDict(frozen=True)

    creature_id: int
    base_name: str
    forms: list[ResolvedForm] = Field(default_factory=list)
    filtered: list[FormRecord] = Field(default_factory=list)
    unresolved_regional: list[UnresolvedRegional] = Field(default_factory=list)

    @property
    def has_canonical(self) -> bool:
        return any(form.is_canonical for form in self.forms)

    @property
    def duplicate_names(self) -> list[str]:
        """Assigned names given to more than one form, in output order."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for form in self.forms:
            if form.assigned_name in seen and form.assigned_name not in duplicates:
                duplicates.append(form.assigned_name)
            seen.add(form.assigned_name)
        return duplicates


@dataclass
class _Buckets:
    """Indexes of parsed records per classification bucket."""

    female: list[int] = field(default_factory=list)
    base_labeled: list[int] = field(default_factory=list)
    plain_no_middle: list[int] = field(default_factory=list)
    plain_with_middle: list[int] = field(default_factory=list)
    mega: dict[str, list[int]] = field(default_factory=dict)
    other: list[int] = field(default_factory=list)


def _highest_version(indexes: Sequence[int], parsed: Sequence[ParsedKey]) -> int | None:
    """Index of the highest-versioned record; ties go to the earliest one."""
    if not indexes:
        return None
    return max(indexes, key=lambda i: parsed[i].version_number())


def _capitalize(code: str) -> str:
    return code[:1].upper() + code[1:]


class NameResolver:
    """Resolves the form keys of a dex group into display names.

    Canonical selection, in priority order: per-dex override, highest
    female version, highest "base" version, highest plain version. Each
    mega code (m, mx, my) independently gets its own canonical form.
    Every other form is named by the first matching rule: versioned
    sibling, male, losing mega, female, dex-specific form, regional code,
    or the capitalized prefix as a catch-all.

    The resolver holds no state beyond its rules, so resolving the same
    group twice gives identical output.

    Example:
        >>> resolver = NameResolver()
        >>> forms = [FormRecord(filename=f"0006{k}.png", key=k, creature_id=6)
        ...          for k in ["(m)-1", "(mx)-1", "(my)-1", "1"]]
        >>> [(f.assigned_name, f.is_canonical) for f in resolver.resolve(6, forms, "Charizard")]
        [('Charizard', True), ('Charizard-Mega', True), ('Charizard-Mega-X', True), ('Charizard-Mega-Y', True)]
    """

    def __init__(self, rules: NamingRules | None = None) -> None:
        self.rules = rules or NamingRules.load()

    def resolve(
        self,
        creature_id: int,
        forms: Iterable[FormRecord],
        canonical_name: str | None = None,
        regional_codes: Iterable[str] | None = None,
    ) -> list[ResolvedForm]:
        """Resolve a dex group into ordered, named forms.

        Args:
            creature_id: Dex number of the group
            forms: Form records of the group, in extraction order
            canonical_name: Display name from the roster; "Dex-{id}" when None
            regional_codes: Region names the roster knows for this dex number

        Returns:
            Canonical forms first, then the rest by case-insensitive name
        """
        return self.resolve_group(creature_id, forms, canonical_name, regional_codes).forms

    def resolve_group(
        self,
        creature_id: int,
        forms: Iterable[FormRecord],
        canonical_name: str | None = None,
        regional_codes: Iterable[str] | None = None,
    ) -> GroupResolution:
        """Resolve a dex group and keep the diagnostics alongside the forms.

        Same arguments as :meth:`resolve`.
        """
        rules = self.rules
        base_name = canonical_name or f"Dex-{creature_id}"
        known_regions = tuple(regional_codes or ())

        records: list[FormRecord] = []
        filtered: list[FormRecord] = []
        for record in forms:
            if rules.is_filtered(creature_id, record.key):
                filtered.append(record)
            else:
                records.append(record)

        parsed = [self._parse(creature_id, record.key) for record in records]
        buckets = self._classify(creature_id, parsed)

        canonical, canonical_is_female = self._select_canonical(creature_id, parsed, buckets)
        mega_canonicals: dict[int, str] = {}
        for code, indexes in buckets.mega.items():
            winner = _highest_version(indexes, parsed)
            if winner is not None:
                mega_canonicals[winner] = code

        resolved: list[ResolvedForm] = []
        unresolved: list[UnresolvedRegional] = []
        for i, (record, key) in enumerate(zip(records, parsed)):
            if i == canonical:
                name, kind, is_canonical = base_name, "canonical", True
            elif i in mega_canonicals:
                code = mega_canonicals[i]
                name = base_name + rules.mega_suffixes[code]
                kind, is_canonical = self._mega_kind(code), True
            else:
                name, kind, ambiguous = self._assign_name(
                    creature_id, key, base_name, canonical_is_female, known_regions
                )
                is_canonical = False
                if ambiguous:
                    unresolved.append(UnresolvedRegional(
                        creature_id=creature_id,
                        filename=record.filename,
                        key=record.key,
                        known_regions=known_regions,
                    ))
                    logger.debug(
                        f"Dex {creature_id}: regional code in '{record.key}' is ambiguous "
                        f"(known regions: {list(known_regions)}), named {name}"
                    )

            resolved.append(ResolvedForm(
                filename=record.filename,
                key=record.key,
                creature_id=record.creature_id,
                assigned_name=name,
                is_canonical=is_canonical,
                kind=kind,
            ))

        resolved.sort(key=lambda f: (not f.is_canonical, f.assigned_name.casefold()))

        return GroupResolution(
            creature_id=creature_id,
            base_name=base_name,
            forms=resolved,
            filtered=filtered,
            unresolved_regional=unresolved,
        )

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    def _parse(self, creature_id: int, key: str) -> ParsedKey:
        parsed = parse_key(key)
        if self.rules.uses_literal_letters(creature_id):
            parsed = as_literal_letter(parsed)
        return parsed

    def _classify(self, creature_id: int, parsed: Sequence[ParsedKey]) -> _Buckets:
        rules = self.rules
        buckets = _Buckets(mega={code: [] for code in rules.mega_suffixes})

        for i, key in enumerate(parsed):
            code = key.code
            if code is None:
                if key.is_base_labeled:
                    buckets.base_labeled.append(i)
                elif key.middle in ("", "-"):
                    buckets.plain_no_middle.append(i)
                else:
                    buckets.plain_with_middle.append(i)
            elif code == rules.female_prefix:
                buckets.female.append(i)
            elif rules.mega_suffix(creature_id, code) is not None:
                buckets.mega[code].append(i)
            else:
                buckets.other.append(i)
        return buckets

    def _select_canonical(
        self,
        creature_id: int,
        parsed: Sequence[ParsedKey],
        buckets: _Buckets,
    ) -> tuple[int | None, bool]:
        """Pick the main canonical form.

        Returns:
            (index of the canonical record or None, whether it is female)
        """
        override = self.rules.canonical_override(creature_id)
        if override is not None:
            for i, key in enumerate(parsed):
                if override.key is not None and key.raw_key == override.key:
                    return i, False
                if override.prefix is not None and key.code == override.prefix.lower():
                    return i, False

        if buckets.female:
            return _highest_version(buckets.female, parsed), True
        if buckets.base_labeled:
            return _highest_version(buckets.base_labeled, parsed), False
        if buckets.plain_no_middle:
            return _highest_version(buckets.plain_no_middle, parsed), False
        return None, False

    def _assign_name(
        self,
        creature_id: int,
        key: ParsedKey,
        base_name: str,
        canonical_is_female: bool,
        known_regions: tuple[str, ...],
    ) -> tuple[str, str, bool]:
        """Name a form that was not picked as canonical.

        Returns:
            (assigned name, kind, whether a generic regional code was ambiguous)
        """
        rules = self.rules
        code = key.code

        # Versioned siblings of the plain or "base" canonical (a "base" middle
        # never counts as meaningful middle content)
        if code is None and not key.has_middle:
            return f"{base_name}-v{key.version_number(1)}", "versioned", False

        if code == rules.male_prefix:
            return f"{base_name}-Male", "male", False

        mega_suffix = rules.mega_suffix(creature_id, code)
        if mega_suffix is not None:
            return f"{base_name}{mega_suffix}-v{key.version_number(1)}", self._mega_kind(code), False

        if code == rules.female_prefix:
            if canonical_is_female:
                return f"{base_name}-v{key.version_number(1)}", "versioned", False
            return f"{base_name}-Female", "female", False

        name = base_name
        kind = "custom"
        ambiguous = False
        if code is not None:
            suffix = rules.form_suffix(creature_id, code)
            if suffix is not None:
                kind = "form"
            else:
                region = rules.region_for_code(code)
                if region is None and code == rules.generic_region_prefix:
                    if len(known_regions) == 1:
                        region = known_regions[0]
                    else:
                        ambiguous = True
                if region is not None:
                    suffix = f"-{region}"
                    kind = f"regional:{region}"
                else:
                    suffix = f"-{_capitalize(code)}"
            name += suffix

        if key.has_middle:
            clean_middle = key.middle.lstrip("-_")
            if clean_middle:
                name += f"-{clean_middle}"

        return name, kind, ambiguous

    @staticmethod
    def _mega_kind(code: str) -> str:
        return {"m": "mega", "mx": "mega_x", "my": "mega_y"}.get(code, "mega")
