"""Yageo chip resistors and MLCCs.

Resistor shape: RC 0603 F R -07 10K L
    series, size, tolerance, packaging, reel code, resistance (RKM), lead-free
    RT thin film adds a TCR letter after packaging: RT0603BRD0710KL
MLCC shape: CC 0603 K R X7R 9 BB 104
    series, size, tolerance, packaging, dielectric, voltage, body, capacitance
"""

import re
from typing import Any

from ..decoders import decode_capacitance_code, decode_rkm, decode_tolerance_fields, decode_tolerance_letter
from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import TOLERANCE_RULES, ManufacturerHandler

_RESISTOR = (ComponentType.RESISTOR, ComponentType.RESISTOR_CHIP_YAGEO)
_CAPACITOR = (ComponentType.CAPACITOR, ComponentType.CAPACITOR_CERAMIC_YAGEO)

_RESISTOR_PATTERN = re.compile(
    r"(?P<series>RC|RT|AC|RL)(?P<size>\d{4})(?P<tolerance>[A-Z])(?P<packaging>[A-Z])(?P<tcr>[A-Z]?)"
    r"-?(?P<reel>\d{2})(?P<value>\d*[RKM]\d*)L?"
)
_MLCC_PATTERN = re.compile(
    r"(?P<series>CC)(?P<size>\d{4})(?P<tolerance>[A-Z])(?P<packaging>[A-Z])"
    r"(?P<dielectric>NPO|X7R|X5R|X7S|X6S|Y5V)(?P<voltage>\d)(?P<body>[A-Z]{2})(?P<value>[0-9R]{3})"
)

# Rated power by chip size (standard RC thick film), watts
SIZE_POWER_W: dict[str, float] = {
    "0201": 0.05,
    "0402": 0.0625,
    "0603": 0.1,
    "0805": 0.125,
    "1206": 0.25,
    "1210": 0.5,
    "2010": 0.75,
    "2512": 1.0,
}

# CC voltage digit -> volts
MLCC_VOLTAGE_CODES: dict[str, float] = {
    "5": 6.3,
    "6": 10.0,
    "7": 16.0,
    "8": 25.0,
    "9": 50.0,
    "0": 100.0,
}

_RESISTOR_RULES = (
    AttributeRule("resistance", "match"),
    AttributeRule("tolerance_pct", "lower"),
    AttributeRule("power_w", "higher"),
)
_MLCC_RULES = (
    AttributeRule("dielectric", "match"),
    AttributeRule("capacitance", "match"),
    AttributeRule("voltage", "higher"),
    *TOLERANCE_RULES,
)


class YageoHandler(ManufacturerHandler):
    """Yageo RC/RT/AC/RL chip resistors and CC MLCCs.

    The package is the chip size and must match exactly.

    Replacement rules:
    - Resistors: resistance must match, tolerance lower, power higher.
      RT (thin film) and AC (AEC-Q200) may replace general purpose RC.
    - MLCC: dielectric and capacitance must match, voltage higher,
      tolerance lower.
    """

    handler_id = "yageo"
    manufacturer = "Yageo"
    aliases = ("YAGEO", "YAGEO CORPORATION", "PHYCOMP")

    compatible_series = {
        "RC": frozenset({"RT", "AC"}),
    }

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_RESISTOR, r"(?:RC|RT|AC|RL)\d{4}[A-Z]{2,3}-?\d{2}\d*[RKM]\d*L?")
        registry.add_all(_CAPACITOR, r"CC\d{4}[A-Z]{2}(?:NPO|X7R|X5R|X7S|X6S|Y5V)\d[A-Z]{2}[0-9R]{3}")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_RESISTOR + _CAPACITOR)

    def _parse(self, mpn: str) -> tuple[str, re.Match | None]:
        mpn = normalize_mpn(mpn)
        match = _RESISTOR_PATTERN.fullmatch(mpn)
        if match:
            return "resistor", match
        match = _MLCC_PATTERN.match(mpn)
        if match:
            return "mlcc", match
        return "", None

    def extract_series(self, mpn: str) -> str:
        _, match = self._parse(mpn)
        return match.group("series") if match else ""

    def extract_package_code(self, mpn: str) -> str:
        _, match = self._parse(mpn)
        return match.group("size") if match else ""

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        family, match = self._parse(mpn)
        if not match:
            return {}
        if family == "resistor":
            values = {
                "resistance": decode_rkm(match.group("value")),
                "tolerance_pct": decode_tolerance_letter(match.group("tolerance"), resistor=True),
                "power_w": SIZE_POWER_W.get(match.group("size")),
            }
        else:
            dielectric = match.group("dielectric")
            values = {
                "dielectric": "C0G" if dielectric == "NPO" else dielectric,
                "capacitance": decode_capacitance_code(match.group("value")),
                "voltage": MLCC_VOLTAGE_CODES.get(match.group("voltage")),
                **decode_tolerance_fields(match.group("tolerance")),
            }
        return {key: value for key, value in values.items() if value is not None}

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        return _MLCC_RULES if series == "CC" else _RESISTOR_RULES
