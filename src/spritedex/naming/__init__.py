"""
Sprite form naming: parse filename form keys and assign canonical names.

Per-creature special cases are static data (``data/form_rules.yaml``); the
resolver applies them over a general fallback rule.
"""

from .keys import parse_key
from .resolver import GroupResolution, NameResolver, UnresolvedRegional
from .rules import NamingRules, NamingRulesError

__all__ = [
    "GroupResolution",
    "NameResolver",
    "NamingRules",
    "NamingRulesError",
    "UnresolvedRegional",
    "parse_key",
]
