"""
Roster import: re-key an external species table by dex number.

The external source is a JavaScript data file whose whole content is one
object literal. It is parsed with json5, which accepts the unquoted keys,
single-quoted strings and trailing commas such files carry.
"""

import logging
from pathlib import Path
from typing import Any, Iterable

import json5
from pydantic import ValidationError

from ..models import ReferenceEntry
from ..storage import StageInputError, load_grouped
from .base import RosterImportError

logger = logging.getLogger("spritedex")

# Region names searched for (by substring) in roster keys
REGION_NAMES: tuple[str, ...] = ("Alola", "Galar", "Hisui", "Paldea", "Sevii")


def parse_roster_source(text: str) -> dict[str, Any]:
    """Evaluate a roster description into a data structure.

    Args:
        text: Content of the data file (an object literal, optionally
            followed by a semicolon)

    Returns:
        The decoded top-level object

    Raises:
        RosterImportError: If the text is not a valid object literal or has
            no ``species`` table
    """
    source = text.strip().rstrip(";").strip()
    try:
        data = json5.loads(source)
    except ValueError as e:
        raise RosterImportError(f"Error parsing data file: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("species"), dict):
        raise RosterImportError("Could not find species data in the file")
    return data


def load_roster_file(path: Path) -> dict[str, Any]:
    """Read and evaluate a roster data file.

    Raises:
        StageInputError: If the file does not exist
        RosterImportError: If the content cannot be parsed
    """
    if not path.exists():
        raise StageInputError(f"File '{path}' not found")
    return parse_roster_source(path.read_text(encoding="utf-8"))


def _display_order_key(entry: ReferenceEntry) -> tuple[int, float]:
    # Entries without an order come first; sorted() keeps encounter order for ties
    if entry.display_order is None:
        return (0, 0)
    return (1, entry.display_order)


def build_reference_table(species: dict[str, Any]) -> dict[int, list[ReferenceEntry]]:
    """Re-key the roster's species table by dex number.

    Args:
        species: Mapping of internal roster id to species entry. Each entry
            must carry ``dexID``; ``ID``, ``key``, ``order``, ``ancestor`` and
            ``name`` are copied when present.

    Returns:
        Mapping of dex number to entries sorted by display order (nulls
        first, stable), in ascending dex order

    Raises:
        RosterImportError: If an entry has a field of the wrong type
    """
    grouped: dict[int, list[ReferenceEntry]] = {}

    for roster_id, raw in species.items():
        if not isinstance(raw, dict) or raw.get("dexID") is None:
            logger.warning(f"Skipping roster entry {roster_id}: no dexID")
            continue
        try:
            dex_id = int(raw["dexID"])
        except (TypeError, ValueError):
            logger.warning(f"Skipping roster entry {roster_id}: invalid dexID {raw['dexID']!r}")
            continue

        try:
            entry = ReferenceEntry(
                stable_id=raw.get("ID"),
                key=raw.get("key") or "",
                display_order=raw.get("order"),
                ancestor_id=raw.get("ancestor"),
                canonical_name=raw.get("name") or "",
            )
        except ValidationError as e:
            raise RosterImportError(f"Invalid roster entry {roster_id}: {e}") from e
        grouped.setdefault(dex_id, []).append(entry)

    return {
        dex_id: sorted(grouped[dex_id], key=_display_order_key)
        for dex_id in sorted(grouped)
    }


def regional_codes(entries: Iterable[ReferenceEntry]) -> tuple[str, ...]:
    """Region names present among a dex number's roster keys.

    Example:
        >>> regional_codes([ReferenceEntry(key="RATTATA"), ReferenceEntry(key="RATTATA_Alola")])
        ('Alola',)
    """
    found: list[str] = []
    for entry in entries:
        for region in REGION_NAMES:
            if region in entry.key and region not in found:
                found.append(region)
    return tuple(found)


class ReferenceTable:
    """Name and regional-form lookup over the imported roster.

    Example:
        >>> table = ReferenceTable.from_file(Path("dex-to-rr-mapping.json"))
        >>> table.canonical_name(6)
        'Charizard'
        >>> table.regional_codes(19)
        ('Alola',)
    """

    def __init__(self, entries: dict[int, list[ReferenceEntry]] | None = None) -> None:
        self._entries: dict[int, list[ReferenceEntry]] = dict(entries or {})
        self._regional: dict[int, tuple[str, ...]] = {}
        for dex_id, group in self._entries.items():
            codes = regional_codes(group)
            if codes:
                self._regional[dex_id] = codes

    @classmethod
    def from_file(cls, path: Path) -> "ReferenceTable":
        """Load a table from a stage-2 output file."""
        return cls(load_grouped(path, ReferenceEntry))

    @property
    def entries(self) -> dict[int, list[ReferenceEntry]]:
        return self._entries

    @property
    def regional_dex_count(self) -> int:
        return len(self._regional)

    def canonical_name(self, dex_id: int) -> str | None:
        """Name of the first roster entry for a dex number, if any."""
        group = self._entries.get(dex_id)
        if not group or not group[0].canonical_name:
            return None
        return group[0].canonical_name

    def regional_codes(self, dex_id: int) -> tuple[str, ...]:
        return self._regional.get(dex_id, ())

    def __len__(self) -> int:
        return len(self._entries)
