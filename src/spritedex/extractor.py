"""
Key extraction: derive (creature id, form key) pairs from sprite filenames.
"""

import logging
from pathlib import Path, PurePath
from typing import Iterable

from pydantic import BaseModel, Field

from .models import FormRecord, RejectedFile

logger = logging.getLogger("spritedex")

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp"})

# Key used when nothing follows the dex number (e.g. "0025.png")
DEFAULT_KEY = "base"


class ExtractionResult(BaseModel):
    """Grouped form records plus the filenames that were rejected."""

    groups: dict[int, list[FormRecord]] = Field(default_factory=dict)
    rejected: list[RejectedFile] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(len(records) for records in self.groups.values())


def is_image_file(filename: str) -> bool:
    return PurePath(filename).suffix.lower() in IMAGE_EXTENSIONS


def list_sprite_files(directory: Path) -> list[str]:
    """List image filenames (not paths) directly inside ``directory``."""
    return sorted(p.name for p in directory.iterdir() if p.is_file() and is_image_file(p.name))


def split_filename(filename: str) -> tuple[int, str] | None:
    """Read the dex number and form key from a filename.

    The first 4 characters are tried as a zero-padded dex number, then the
    first 3. Whatever follows the digits is the form key.

    Args:
        filename: Image filename, with or without extension

    Returns:
        (creature_id, key), or None when neither width is all digits

    Example:
        >>> split_filename("0006(mx)-1.png")
        (6, '(mx)-1')
        >>> split_filename("201m.png")
        (201, 'm')
        >>> split_filename("0025.png")
        (25, 'base')
    """
    stem = PurePath(filename).stem
    for width in (4, 3):
        digits = stem[:width]
        if len(digits) == width and digits.isascii() and digits.isdigit():
            return int(digits), stem[width:] or DEFAULT_KEY
    return None


def extract_keys(filenames: Iterable[str]) -> ExtractionResult:
    """Group sprite filenames by dex number.

    Non-image files are skipped silently. Files without a 3 or 4 digit
    prefix are recorded as rejected and the scan continues.

    Args:
        filenames: Raw filenames from a directory listing

    Returns:
        ExtractionResult with records sorted by key (case-insensitive)
        inside each group and groups in ascending dex order
    """
    groups: dict[int, list[FormRecord]] = {}
    rejected: list[RejectedFile] = []

    for filename in filenames:
        if not is_image_file(filename):
            continue

        parts = split_filename(filename)
        if parts is None:
            stem = PurePath(filename).stem
            reason = f'First characters "{stem[:4]}" are not 3 or 4 digits'
            rejected.append(RejectedFile(filename=filename, reason=reason))
            logger.debug(f"Rejected {filename}: {reason}")
            continue

        creature_id, key = parts
        groups.setdefault(creature_id, []).append(
            FormRecord(filename=filename, key=key, creature_id=creature_id)
        )

    ordered = {
        creature_id: sorted(groups[creature_id], key=lambda r: r.key.casefold())
        for creature_id in sorted(groups)
    }
    return ExtractionResult(groups=ordered, rejected=rejected)
