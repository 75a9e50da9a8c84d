"""Abracon crystals and clock oscillators.

Dash-separated MPNs; the first field is the series, one of the later
fields carries the frequency:
    ABM8-16.000MHZ-B2-T          crystal, 3.2x2.5mm, 16 MHz
    ABM8-16.000MHZ-10-D1G-T      crystal, 10 pF load
    ASE-25.000MHZ-LC-T           oscillator, 25 MHz
    ASTX-H11-26.000MHZ-T         TCXO, frequency in the third field
"""

import re
from typing import Any

from ..decoders import decode_frequency, decode_ppm
from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import ManufacturerHandler

_CRYSTAL = (ComponentType.CRYSTAL, ComponentType.CRYSTAL_ABRACON)
_OSCILLATOR = (ComponentType.OSCILLATOR, ComponentType.OSCILLATOR_ABRACON)

_FIELDS = r"(?:-[0-9A-Z.]+)*"

_CRYSTAL_SERIES_PATTERN = re.compile(r"AB(?:M\d+[A-Z]?|LS?|S\d+)")
_OSCILLATOR_SERIES_PATTERN = re.compile(r"AS(?:CO|FL\d|E|TX|VTX)[0-9A-Z]*")
_FOOTPRINT_BASE_PATTERN = re.compile(r"AB(?:M\d+|LS?|S\d+)|AS(?:FL\d|E)")
# Load capacitance field right after the frequency: "-10-", "-18-"
_LOAD_CAPACITANCE_PATTERN = re.compile(r"\d{1,2}")
# Tape and reel suffix: "-T", "-T3", "-TR"
_PACKAGING_FIELD_PATTERN = re.compile(r"T\d*|TR")

FOOTPRINTS: dict[str, str] = {
    "ABM3": "5.0X3.2MM",
    "ABM7": "6.0X3.5MM",
    "ABM8": "3.2X2.5MM",
    "ABM10": "2.5X2.0MM",
    "ABM11": "2.0X1.6MM",
    "ABM12": "1.6X1.2MM",
    "ABL": "HC-49/US",
    "ABLS": "HC-49/US-SMD",
    "ABS07": "3.2X1.5MM",
    "ABS25": "8.0X3.8MM",
    "ASFL1": "7.0X5.0MM",
    "ASE": "3.2X2.5MM",
}

_CRYSTAL_RULES = (
    AttributeRule("frequency", "match"),
    AttributeRule("load_capacitance", "match", optional=True),
    AttributeRule("stability_ppm", "lower", optional=True),
    AttributeRule("stability_code", "match", optional=True),
)
_OSCILLATOR_RULES = (
    AttributeRule("frequency", "match"),
    AttributeRule("stability_ppm", "lower", optional=True),
    AttributeRule("stability_code", "match", optional=True),
)


class AbraconHandler(ManufacturerHandler):
    """Abracon ABM/ABL/ABS crystals and ASCO/ASFL/ASE/ASTX oscillators.

    The package is the body footprint implied by the series; series not
    in the footprint table use the series itself.

    Replacement rules:
    - frequency must match exactly
    - crystal load capacitance must match when encoded
    - stability in ppm lower (tighter), when encoded; a lettered
      stability grade must match
    ABM8G may replace ABM8 and ABM3B may replace ABM3 (same footprint).
    """

    handler_id = "abracon"
    manufacturer = "Abracon"
    aliases = ("ABRACON", "ABRACON LLC", "ABRACON CORPORATION")

    compatible_series = {
        "ABM8": frozenset({"ABM8G"}),
        "ABM3": frozenset({"ABM3B"}),
    }

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_CRYSTAL, rf"{_CRYSTAL_SERIES_PATTERN.pattern}{_FIELDS}")
        registry.add_all(_OSCILLATOR, rf"{_OSCILLATOR_SERIES_PATTERN.pattern}{_FIELDS}")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_CRYSTAL + _OSCILLATOR)

    def extract_series(self, mpn: str) -> str:
        device = normalize_mpn(mpn).split("-", 1)[0]
        if _CRYSTAL_SERIES_PATTERN.fullmatch(device) or _OSCILLATOR_SERIES_PATTERN.fullmatch(device):
            return device
        return ""

    def extract_package_code(self, mpn: str) -> str:
        series = self.extract_series(mpn)
        if not series:
            return ""
        match = _FOOTPRINT_BASE_PATTERN.match(series)
        if match and match.group(0) in FOOTPRINTS:
            return FOOTPRINTS[match.group(0)]
        return series

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        if not self.extract_series(mpn):
            return {}
        fields = normalize_mpn(mpn).split("-")[1:]
        attrs: dict[str, Any] = {}
        options: list[str] = []
        for field in fields:
            if "frequency" not in attrs:
                frequency = decode_frequency(field)
                if frequency is not None:
                    attrs["frequency"] = frequency
                continue
            stability = decode_ppm(field)
            if stability is not None:
                attrs["stability_ppm"] = stability
            elif not _PACKAGING_FIELD_PATTERN.fullmatch(field):
                options.append(field)
        if options and _LOAD_CAPACITANCE_PATTERN.fullmatch(options[0]):
            attrs["load_capacitance"] = int(options.pop(0)) * 1e-12
        # Lettered stability grades ("B2", "D1G") are compared literally
        if options and "stability_ppm" not in attrs:
            attrs["stability_code"] = options[0]
        return attrs

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        return _OSCILLATOR_RULES if series.startswith("AS") else _CRYSTAL_RULES
