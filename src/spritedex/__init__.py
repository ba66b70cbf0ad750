"""
spritedex - reconcile sprite naming conventions into canonical creature form names.
"""

from .extractor import extract_keys
from .importers import ReferenceTable
from .models import FormRecord, ParsedKey, ReferenceEntry, RejectedFile, ResolvedForm
from .naming import NameResolver, NamingRules, parse_key

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("spritedex")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "FormRecord",
    "NameResolver",
    "NamingRules",
    "ParsedKey",
    "ReferenceEntry",
    "ReferenceTable",
    "RejectedFile",
    "ResolvedForm",
    "extract_keys",
    "parse_key",
]
