"""Nichicon aluminium electrolytic capacitors.

MPN shape: UUD 1C 101 M CL 1GS
    series, voltage (EIA), capacitance (uF code), tolerance, case, packaging
"""

import re
from typing import Any

from ..decoders import decode_eia_voltage, decode_microfarad_code, decode_tolerance_letter
from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import ManufacturerHandler

_CAPACITOR = (ComponentType.CAPACITOR, ComponentType.CAPACITOR_ELECTROLYTIC_NICHICON)

_SERIES = "UUD|UUE|UHW|UHS|UHE|UES|UEW|UKL|UPW|UPS|UMA|UMD"

_ELECTROLYTIC_PATTERN = re.compile(
    rf"(?P<series>{_SERIES})(?P<voltage>\d[A-Z])(?P<value>[0-9R]{{3}})(?P<tolerance>[A-Z])"
    r"(?P<case>[0-9A-Z]{2})"
)

# Rated category temperature per series, °C
SERIES_TEMPERATURE_C: dict[str, int] = {
    "UUD": 105,
    "UUE": 105,
    "UHW": 105,
    "UHS": 125,
    "UHE": 135,
    "UES": 105,
    "UEW": 105,
    "UKL": 105,
    "UPW": 105,
    "UPS": 105,
    "UMA": 85,
    "UMD": 105,
}


class NichiconHandler(ManufacturerHandler):
    """Nichicon U-series aluminium electrolytics.

    The package is the Nichicon case code (diameter x height) and must
    match exactly.

    Replacement rules: capacitance must match, voltage higher, tolerance
    lower, category temperature higher. Series upgrades are one-way:
    long-life parts replace standard ones (UUD -> UES/UEW/UKL, UUE -> UEW)
    and hotter-rated ones replace cooler ones (UHW -> UHS/UHE, UHS -> UHE).
    """

    handler_id = "nichicon"
    manufacturer = "Nichicon"
    aliases = ("NICHICON", "NICHICON CORPORATION")

    compatible_series = {
        "UUD": frozenset({"UES", "UEW", "UKL"}),
        "UUE": frozenset({"UEW"}),
        "UHW": frozenset({"UHS", "UHE"}),
        "UHS": frozenset({"UHE"}),
    }

    replacement_rules = (
        AttributeRule("capacitance", "match"),
        AttributeRule("voltage", "higher"),
        AttributeRule("tolerance_pct", "lower"),
        AttributeRule("temperature_rating_c", "higher"),
    )

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_CAPACITOR, rf"(?:{_SERIES})\d[A-Z][0-9R]{{3}}[A-Z][0-9A-Z]*")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_CAPACITOR)

    def extract_series(self, mpn: str) -> str:
        match = _ELECTROLYTIC_PATTERN.match(normalize_mpn(mpn))
        return match.group("series") if match else ""

    def extract_package_code(self, mpn: str) -> str:
        match = _ELECTROLYTIC_PATTERN.match(normalize_mpn(mpn))
        return match.group("case") if match else ""

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        match = _ELECTROLYTIC_PATTERN.match(normalize_mpn(mpn))
        if not match:
            return {}
        values = {
            "voltage": decode_eia_voltage(match.group("voltage")),
            "capacitance": decode_microfarad_code(match.group("value")),
            "tolerance_pct": decode_tolerance_letter(match.group("tolerance")),
            "temperature_rating_c": SERIES_TEMPERATURE_C.get(match.group("series")),
        }
        return {key: value for key, value in values.items() if value is not None}
