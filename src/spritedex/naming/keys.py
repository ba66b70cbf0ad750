"""
Form key parsing.
"""

import re

from ..models import ParsedKey

# Leading parenthesized group, e.g. "(mx)" in "(mx)-1"
_PREFIX_RE = re.compile(r"^\(([^)]+)\)")
# Trailing digit run with an optional dash, e.g. "-12" in "base-12"
_VERSION_RE = re.compile(r"^(.*?)(-?\d+)$", re.DOTALL)


def parse_key(key: str) -> ParsedKey:
    """Split a form key into prefix, middle content and version suffix.

    The prefix is trimmed from the left, the version from the right, and
    whatever lies between them is the middle.

    Args:
        key: Raw form key from a filename

    Returns:
        ParsedKey (prefix and version are None when absent)

    Example:
        >>> parse_key("(fem)-2")
        ParsedKey(raw_key='(fem)-2', prefix='fem', middle='', version='-2')
        >>> parse_key("base")
        ParsedKey(raw_key='base', prefix=None, middle='base', version=None)
        >>> parse_key("(blue)_striped3")
        ParsedKey(raw_key='(blue)_striped3', prefix='blue', middle='_striped', version='3')
    """
    prefix = None
    remainder = key

    prefix_match = _PREFIX_RE.match(key)
    if prefix_match:
        prefix = prefix_match.group(1)
        remainder = key[prefix_match.end():]

    version_match = _VERSION_RE.match(remainder)
    if not version_match:
        return ParsedKey(raw_key=key, prefix=prefix, middle=remainder, version=None)

    return ParsedKey(
        raw_key=key,
        prefix=prefix,
        middle=version_match.group(1),
        version=version_match.group(2),
    )


def as_literal_letter(parsed: ParsedKey) -> ParsedKey:
    """Read a bare one-letter key (e.g. "m" from "201m.png") as a form code.

    Keys that are not a single letter without prefix or version are
    returned unchanged.
    """
    middle = parsed.middle
    if (
        parsed.prefix is None
        and parsed.version is None
        and len(middle) == 1
        and middle.isascii()
        and middle.isalpha()
    ):
        return ParsedKey(raw_key=parsed.raw_key, prefix=middle, middle="", version=None)
    return parsed
