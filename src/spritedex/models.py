"""
Data models for the sprite naming pipeline.
"""

from pydantic import BaseModel, ConfigDict, Field


class FormRecord(BaseModel):
    """One concrete sprite variant for one creature identifier.

    Produced by the key extractor from a single filename.

    Attributes:
        filename: Source image filename (with extension)
        key: Raw form key taken from the filename tail (e.g., "(fem)-1")
        creature_id: Dex number read from the filename prefix
    """
    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., description="Source image filename")
    key: str = Field(..., description="Raw form key")
    creature_id: int = Field(..., description="Dex number")


class ParsedKey(BaseModel):
    """A form key split into prefix, middle content and version suffix.

    Examples:
        "(mx)-2" -> prefix="mx", middle="", version="-2"
        "base"   -> prefix=None, middle="base", version=None
    """
    model_config = ConfigDict(frozen=True)

    raw_key: str
    prefix: str | None = None
    middle: str = ""
    version: str | None = None

    @property
    def code(self) -> str | None:
        """Lowercased prefix used for all table lookups."""
        return self.prefix.lower() if self.prefix is not None else None

    @property
    def has_middle(self) -> bool:
        """True when the middle carries content beyond a dash or a "base" label."""
        middle = self.middle
        return bool(middle) and middle != "-" and not middle.lower().startswith("base")

    @property
    def is_base_labeled(self) -> bool:
        return self.middle.lower().startswith("base")

    def version_number(self, default: int = 0) -> int:
        """Numeric value of the version suffix, or ``default`` when absent."""
        if self.version is None:
            return default
        digits = self.version.lstrip("-")
        return int(digits) if digits.isdigit() else default


class ReferenceEntry(BaseModel):
    """One roster entry from the external reference source.

    Attributes:
        stable_id: Internal roster id of the entry
        key: Roster key (often carries a region name, e.g. "RATTATA_ALOLA")
        display_order: Sort order inside the dex group, None when unset
        ancestor_id: Roster id of the pre-evolution, if any
        canonical_name: Display name of the entry
    """
    model_config = ConfigDict(frozen=True)

    stable_id: int | str | None = Field(default=None, description="Internal roster id")
    key: str = Field(default="", description="Roster key")
    display_order: int | float | None = Field(default=None, description="Display order")
    ancestor_id: int | str | None = Field(default=None, description="Pre-evolution roster id")
    canonical_name: str = Field(default="", description="Display name")


class ResolvedForm(BaseModel):
    """A form record with its assigned display name.

    ``kind`` tags which naming rule produced the name; it feeds the run
    statistics and is not written to the output file.
    """
    model_config = ConfigDict(frozen=True)

    filename: str
    key: str
    creature_id: int
    assigned_name: str
    is_canonical: bool = False
    kind: str = Field(default="custom", exclude=True)


class RejectedFile(BaseModel):
    """A filename that could not yield a creature identifier."""
    model_config = ConfigDict(frozen=True)

    filename: str
    reason: str
