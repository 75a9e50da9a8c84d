"""Manufacturer handler contract and shared string helpers.

A handler owns one manufacturer's part-number shapes. It registers its
patterns into the shared registry, answers "is this MPN one of mine, as
type T?", decodes series/package/ratings and judges replacements.

Subclasses override what they need. The defaults:
- classify: scoped registry match (the handler's own patterns only)
- extract_series: letter prefix + first digit run ("LM358DR" -> "LM358")
- extract_package_code: suffix after the last hyphen, else trailing
  letters, resolved through the standard package table
- series_compatible: equal, or listed in `compatible_series`
- packages_compatible: equal
"""

import logging
import re
from types import MappingProxyType
from typing import Any, Mapping

from ..equivalence import AttributeRule, EquivalenceVerdict, evaluate_replacement
from ..mpn import normalize_mpn
from ..packages import resolve_package_code
from ..registry import RegistryView
from ..taxonomy import ComponentType

logger = logging.getLogger(__name__)

_SERIES_WITH_PREFIX_PATTERN = re.compile(r"([A-Z]+\d+)")
_TRAILING_LETTERS_PATTERN = re.compile(r"\d([A-Z]+)$")

# Capacitor and inductor tolerance, as decoded by decode_tolerance_fields().
# Each part carries exactly one of the three keys, so a percent part against
# an absolute one fails closed.
TOLERANCE_RULES = (
    AttributeRule("tolerance_pct", "lower", optional=True),
    AttributeRule("tolerance_abs", "lower", optional=True),
    AttributeRule("tolerance_code", "match", optional=True),
)


# =============================================================================
# HELPERS
# =============================================================================


def suffix_after_hyphen(mpn: str | None) -> str:
    """'ATMEGA328P-PU' -> 'PU', 'LM358' -> ''"""
    mpn = normalize_mpn(mpn)
    if "-" not in mpn:
        return ""
    return mpn.rsplit("-", 1)[1]


def trailing_suffix(mpn: str | None) -> str:
    """Letters after the last digit: 'LM358DR' -> 'DR', 'LM358' -> ''"""
    match = _TRAILING_LETTERS_PATTERN.search(normalize_mpn(mpn))
    return match.group(1) if match else ""


def series_with_prefix(mpn: str | None) -> str:
    """Leading letters plus the first digit run: 'LM358DR' -> 'LM358'"""
    match = _SERIES_WITH_PREFIX_PATTERN.match(normalize_mpn(mpn))
    return match.group(1) if match else ""


def starts_with_any(mpn: str | None, prefixes: tuple[str, ...] | list[str] | frozenset[str]) -> bool:
    mpn = normalize_mpn(mpn)
    return bool(mpn) and any(mpn.startswith(p) for p in prefixes)


# =============================================================================
# CONTRACT
# =============================================================================


class ManufacturerHandler:
    """Base class for manufacturer rule providers."""

    handler_id: str = ""
    manufacturer: str = ""
    aliases: tuple[str, ...] = ()

    # original series -> series that may replace it (one direction only)
    compatible_series: Mapping[str, frozenset[str]] = MappingProxyType({})

    replacement_rules: tuple[AttributeRule, ...] = ()

    def initialize_patterns(self, registry: RegistryView) -> None:
        raise NotImplementedError(f"{type(self).__name__} must register its patterns")

    def supported_types(self) -> frozenset[ComponentType]:
        raise NotImplementedError(f"{type(self).__name__} must declare its supported types")

    def classify(self, mpn: str, component_type: ComponentType, registry: RegistryView) -> bool:
        """Does `mpn` belong to this handler as `component_type`?

        Subclasses put shortcut logic first and call super() as fallback.
        """
        mpn = normalize_mpn(mpn)
        if not mpn:
            return False
        return registry.matches_own(mpn, component_type)

    def extract_series(self, mpn: str) -> str:
        return series_with_prefix(mpn)

    def extract_package_code(self, mpn: str) -> str:
        mpn = normalize_mpn(mpn)
        if not mpn:
            return ""
        suffix = suffix_after_hyphen(mpn) or trailing_suffix(mpn)
        return resolve_package_code(suffix)

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        """Attribute rules for a series; handlers with several product
        families return a different rule set per family."""
        return self.replacement_rules

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        """Handler-specific decoded fields. Undecodable fields are omitted."""
        return {}

    def extract_attributes(self, mpn: str) -> dict[str, Any]:
        """Series, package code and every decoded field for one MPN."""
        attrs: dict[str, Any] = {
            "series": self.extract_series(mpn),
            "package_code": self.extract_package_code(mpn),
        }
        attrs.update(self.decode_attributes(mpn))
        return attrs

    def series_compatible(self, original: str, replacement: str) -> bool:
        if not original or not replacement:
            return False
        if original == replacement:
            return True
        return replacement in self.compatible_series.get(original, frozenset())

    def packages_compatible(self, original: str, replacement: str) -> bool:
        return bool(original) and original == replacement

    def check_replacement(self, original: str, replacement: str) -> EquivalenceVerdict:
        return evaluate_replacement(self, normalize_mpn(original), normalize_mpn(replacement))

    def is_official_replacement(self, original: str, replacement: str) -> bool:
        """Can `replacement` be used in place of `original`?"""
        return self.check_replacement(original, replacement).equivalent

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.handler_id,
            "manufacturer": self.manufacturer,
            "aliases": list(self.aliases),
            "supported_types": sorted(str(t) for t in self.supported_types()),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.handler_id!r}>"
