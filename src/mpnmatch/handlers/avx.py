"""KYOCERA AVX MLCCs and TAJ tantalum capacitors.

MLCC shape: 0805 5 C 104 K A T 2 A
    size, voltage, dielectric, capacitance (pF code), tolerance,
    failure rate, termination, packaging, special code
Tantalum shape: TAJ B 106 K 016 R NJ
    series, case, capacitance (pF code), tolerance, voltage (volts), packaging
"""

import re
from typing import Any

from ..decoders import decode_capacitance_code, decode_tolerance_fields, decode_tolerance_letter
from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import TOLERANCE_RULES, ManufacturerHandler

_CAPACITOR = (ComponentType.CAPACITOR, ComponentType.CAPACITOR_CERAMIC_AVX)

_SIZES = "0201|0402|0603|0805|1206|1210|1812|2220"

_MLCC_PATTERN = re.compile(
    rf"(?P<size>{_SIZES})(?P<voltage>[0-9A-Z])(?P<dielectric>[A-Z])(?P<value>[0-9R]{{3}})"
    r"(?P<tolerance>[A-Z])(?P<failure_rate>[A-Z])(?P<termination>[A-Z])"
)
_TANTALUM_PATTERN = re.compile(
    r"(?P<series>TAJ|TPS)(?P<case>[A-EV])(?P<value>\d{3})(?P<tolerance>[KM])(?P<voltage>\d{3})"
)

# Voltage digit/letter -> volts
VOLTAGE_CODES: dict[str, float] = {
    "4": 4.0,
    "6": 6.3,
    "Z": 10.0,
    "Y": 16.0,
    "3": 25.0,
    "D": 35.0,
    "5": 50.0,
    "1": 100.0,
    "2": 200.0,
    "7": 500.0,
}

DIELECTRICS: dict[str, str] = {
    "A": "C0G",
    "C": "X7R",
    "D": "X5R",
    "G": "Y5V",
    "W": "X6S",
    "Z": "X7S",
}

# Tantalum case letter -> EIA metric case
TANTALUM_CASES: dict[str, str] = {
    "A": "EIA-3216",
    "B": "EIA-3528",
    "C": "EIA-6032",
    "D": "EIA-7343",
    "E": "EIA-7343H",
    "V": "EIA-7361",
}

_MLCC_RULES = (
    AttributeRule("dielectric", "match"),
    AttributeRule("capacitance", "match"),
    AttributeRule("voltage", "higher"),
    *TOLERANCE_RULES,
)
_TANTALUM_RULES = (
    AttributeRule("capacitance", "match"),
    AttributeRule("voltage", "higher"),
    AttributeRule("tolerance_pct", "lower"),
)


class AVXHandler(ManufacturerHandler):
    """AVX numeric-prefix MLCCs and TAJ/TPS tantalum chips.

    MLCC part numbers start with the chip size, so the series is the size
    code and the package is that same size. Tantalum parts use the case
    letter as the package.

    Replacement rules:
    - MLCC: dielectric and capacitance must match, voltage higher,
      tolerance lower
    - Tantalum: capacitance must match, voltage higher, tolerance lower.
      TPS (low ESR) may replace TAJ.
    """

    handler_id = "avx"
    manufacturer = "KYOCERA AVX"
    aliases = ("AVX", "KYOCERA AVX", "AVX CORPORATION")

    compatible_series = {
        "TAJ": frozenset({"TPS"}),
    }

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_CAPACITOR, rf"(?:{_SIZES})[0-9A-Z][A-Z][0-9R]{{3}}[A-Z]{{3}}[0-9A-Z]*")
        registry.add(ComponentType.CAPACITOR, r"T(?:AJ|PS)[A-EV]\d{3}[KM]\d{3}[0-9A-Z#]*")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_CAPACITOR)

    def _parse(self, mpn: str) -> tuple[str, re.Match | None]:
        mpn = normalize_mpn(mpn)
        match = _MLCC_PATTERN.match(mpn)
        if match:
            return "mlcc", match
        match = _TANTALUM_PATTERN.match(mpn)
        if match:
            return "tantalum", match
        return "", None

    def extract_series(self, mpn: str) -> str:
        family, match = self._parse(mpn)
        if not match:
            return ""
        return match.group("size") if family == "mlcc" else match.group("series")

    def extract_package_code(self, mpn: str) -> str:
        family, match = self._parse(mpn)
        if not match:
            return ""
        if family == "mlcc":
            return match.group("size")
        return TANTALUM_CASES.get(match.group("case"), "")

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        family, match = self._parse(mpn)
        if not match:
            return {}
        values: dict[str, Any] = {"capacitance": decode_capacitance_code(match.group("value"))}
        if family == "mlcc":
            values.update(decode_tolerance_fields(match.group("tolerance")))
            values["voltage"] = VOLTAGE_CODES.get(match.group("voltage"))
            values["dielectric"] = DIELECTRICS.get(match.group("dielectric"))
        else:
            values["tolerance_pct"] = decode_tolerance_letter(match.group("tolerance"))
            values["voltage"] = float(match.group("voltage"))
        return {key: value for key, value in values.items() if value is not None}

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        return _TANTALUM_RULES if series.startswith("T") else _MLCC_RULES
