"""
Roster import from external reference sources.

Currently supports:
- Radical Red pokedex data file (JavaScript object literal with a ``species`` table)
"""

from .base import ImportSummary, RosterImportError
from .roster import (
    REGION_NAMES,
    ReferenceTable,
    build_reference_table,
    load_roster_file,
    parse_roster_source,
    regional_codes,
)

__all__ = [
    "REGION_NAMES",
    "ImportSummary",
    "ReferenceTable",
    "RosterImportError",
    "build_reference_table",
    "load_roster_file",
    "parse_roster_source",
    "regional_codes",
]
