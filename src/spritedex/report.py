"""
Run statistics and the end-of-run diagnostic report.

Nothing here is global: each stage builds one report from its results and
the caller prints it once.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from .models import RejectedFile, ResolvedForm
from .naming.resolver import GroupResolution, UnresolvedRegional

# Display labels for ResolvedForm.kind, in report order
KIND_LABELS: dict[str, str] = {
    "canonical": "Canonical forms",
    "versioned": "Versioned forms",
    "male": "Male forms",
    "mega": "Mega forms",
    "mega_x": "Mega-X forms",
    "mega_y": "Mega-Y forms",
    "female": "Female forms",
    "form": "Alternate forms",
    "custom": "Custom forms",
}


class NamingStats(BaseModel):
    """Immutable tally of how many forms each naming rule produced."""
    model_config = ConfigDict(frozen=True)

    counts: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_forms(cls, forms: Iterable[ResolvedForm]) -> NamingStats:
        return cls(counts=dict(Counter(form.kind for form in forms)))

    @classmethod
    def combine(cls, stats: Iterable[NamingStats]) -> NamingStats:
        total: Counter[str] = Counter()
        for item in stats:
            total.update(item.counts)
        return cls(counts=dict(total))

    def get(self, kind: str) -> int:
        return self.counts.get(kind, 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def format_lines(self) -> list[str]:
        lines: list[str] = []
        for kind, label in KIND_LABELS.items():
            lines.append(f"  {label}: {self.get(kind)}")
        for kind in sorted(k for k in self.counts if k.startswith("regional:")):
            region = kind.split(":", 1)[1]
            lines.append(f"  {region} forms: {self.counts[kind]}")
        return lines


class MissingCanonical(BaseModel):
    """A dex group in which no form was selected as canonical."""
    model_config = ConfigDict(frozen=True)

    creature_id: int
    name: str
    forms: list[str] = Field(default_factory=list, description="'Name (key)' per form")


class DuplicateName(BaseModel):
    """An assigned name shared by several forms of one dex group."""
    model_config = ConfigDict(frozen=True)

    creature_id: int
    name: str
    keys: list[str] = Field(default_factory=list)


class RunReport(BaseModel):
    """All non-fatal conditions of one pipeline run."""

    rejected: list[RejectedFile] = Field(default_factory=list)
    missing_canonical: list[MissingCanonical] = Field(default_factory=list)
    unresolved_regional: list[UnresolvedRegional] = Field(default_factory=list)
    duplicate_names: list[DuplicateName] = Field(default_factory=list)
    filtered: int = Field(default=0, description="Redundant renders dropped before naming")
    stats: NamingStats = Field(default_factory=NamingStats)

    @classmethod
    def from_resolutions(
        cls,
        resolutions: Iterable[GroupResolution],
        rejected: Iterable[RejectedFile] = (),
    ) -> RunReport:
        missing: list[MissingCanonical] = []
        unresolved: list[UnresolvedRegional] = []
        duplicates: list[DuplicateName] = []
        stats: list[NamingStats] = []
        filtered = 0

        for group in resolutions:
            stats.append(NamingStats.from_forms(group.forms))
            filtered += len(group.filtered)
            unresolved.extend(group.unresolved_regional)
            if group.forms and not group.has_canonical:
                missing.append(MissingCanonical(
                    creature_id=group.creature_id,
                    name=group.base_name,
                    forms=[f"{f.assigned_name} ({f.key})" for f in group.forms],
                ))
            for name in group.duplicate_names:
                duplicates.append(DuplicateName(
                    creature_id=group.creature_id,
                    name=name,
                    keys=[f.key for f in group.forms if f.assigned_name == name],
                ))

        return cls(
            rejected=list(rejected),
            missing_canonical=missing,
            unresolved_regional=unresolved,
            duplicate_names=duplicates,
            filtered=filtered,
            stats=NamingStats.combine(stats),
        )

    @property
    def has_warnings(self) -> bool:
        return bool(self.rejected or self.missing_canonical or self.unresolved_regional or self.duplicate_names)

    def format(self) -> str:
        """Format the report as a readable text block."""
        lines: list[str] = []

        if self.stats.total:
            lines.append("Name assignments:")
            lines.extend(self.stats.format_lines())
            if self.filtered:
                lines.append(f"  Redundant renders skipped: {self.filtered}")
            lines.append("")

        if self.rejected:
            lines.append(f"Files not matching pattern ({len(self.rejected)}):")
            for item in self.rejected:
                lines.append(f"  - {item.filename}: {item.reason}")
            lines.append("")

        if self.missing_canonical:
            lines.append(f"Dex IDs without canonical forms ({len(self.missing_canonical)}):")
            for group in self.missing_canonical:
                lines.append(f"  Dex {group.creature_id} ({group.name}): {len(group.forms)} forms")
                for form in group.forms:
                    lines.append(f"    - {form}")
            lines.append("")

        if self.unresolved_regional:
            lines.append(f"Ambiguous regional forms ({len(self.unresolved_regional)}):")
            for item in self.unresolved_regional:
                known = ", ".join(item.known_regions) if item.known_regions else "none known"
                lines.append(f"  - Dex {item.creature_id}: {item.filename} ({known})")
            lines.append("")

        if self.duplicate_names:
            lines.append(f"Names shared by several forms ({len(self.duplicate_names)}):")
            for item in self.duplicate_names:
                lines.append(f"  - Dex {item.creature_id}: {item.name} <- {', '.join(item.keys)}")
            lines.append("")

        return "\n".join(lines).rstrip()
