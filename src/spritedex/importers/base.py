"""
Base models and exceptions for the roster import system.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..models import ReferenceEntry


class RosterImportError(Exception):
    """Raised when a roster description cannot be imported.

    Provides a user-facing message explaining what went wrong.
    """


class ImportSummary(BaseModel):
    """Counts describing an imported reference table."""

    total_dex_entries: int = Field(description="Number of distinct dex numbers")
    total_roster_entries: int = Field(description="Number of roster entries across all dex numbers")
    multi_form_dex: int = Field(description="Dex numbers with more than one roster entry")
    regional_dex: int = Field(default=0, description="Dex numbers with at least one regional form")

    @classmethod
    def from_table(cls, entries: dict[int, list[ReferenceEntry]], regional_dex: int = 0) -> ImportSummary:
        return cls(
            total_dex_entries=len(entries),
            total_roster_entries=sum(len(group) for group in entries.values()),
            multi_form_dex=sum(1 for group in entries.values() if len(group) > 1),
            regional_dex=regional_dex,
        )

    def format(self) -> str:
        """Format the summary as a readable text block."""
        lines = [
            "Reference import complete",
            f"  Total dex entries: {self.total_dex_entries}",
            f"  Total roster entries: {self.total_roster_entries}",
            f"  Dex entries with multiple forms: {self.multi_form_dex}",
            f"  Dex entries with regional forms: {self.regional_dex}",
        ]
        return "\n".join(lines)
