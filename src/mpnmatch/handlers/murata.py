"""Murata MLCCs, chip inductors and ferrite beads.

MLCC shape: GRM 18 8 R7 1H 104 K A93 D
    series, size, height, dielectric, voltage, capacitance (pF code),
    tolerance, then Murata-internal characteristics and packaging
Inductor shape: LQM 21 P N 2R2 M C0 D
    series, size, structure, application, inductance, tolerance
"""

import re
from typing import Any

from ..decoders import (
    decode_capacitance_code,
    decode_eia_voltage,
    decode_inductance_code,
    decode_tolerance_fields,
    decode_value_code,
)
from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import TOLERANCE_RULES, ManufacturerHandler

_CAPACITOR = (ComponentType.CAPACITOR, ComponentType.CAPACITOR_CERAMIC_MURATA)
_INDUCTOR = (ComponentType.INDUCTOR, ComponentType.INDUCTOR_CHIP_MURATA)

_MLCC_PATTERN = re.compile(
    r"(?P<series>GRM|GCM|GJM)(?P<size>\d{2})(?P<height>[0-9A-Z])(?P<dielectric>[0-9A-Z]{2})"
    r"(?P<voltage>\d[A-Z])(?P<value>[0-9R]{3})(?P<tolerance>[A-Z])"
)
_INDUCTOR_PATTERN = re.compile(
    r"(?P<series>LQ[MWG])(?P<size>\d{2})(?P<structure>[A-Z])(?P<application>[A-Z])"
    r"(?P<value>[0-9RN]{3})(?P<tolerance>[A-Z])"
)
# BLM18PG221SN1D: impedance at 100 MHz as a value code in ohms
_BEAD_PATTERN = re.compile(
    r"(?P<series>BLM)(?P<size>\d{2})(?P<structure>[A-Z])(?P<application>[A-Z])"
    r"(?P<value>\d{3})(?P<tolerance>[A-Z])"
)

# Murata size code -> EIA imperial chip size
SIZE_CODES: dict[str, str] = {
    "02": "01005",
    "03": "0201",
    "15": "0402",
    "18": "0603",
    "21": "0805",
    "31": "1206",
    "32": "1210",
    "43": "1812",
    "55": "2220",
}

DIELECTRICS: dict[str, str] = {
    "5C": "C0G",
    "7U": "U2J",
    "R6": "X5R",
    "R7": "X7R",
    "C7": "X7S",
    "C8": "X6S",
    "D7": "X7T",
    "E4": "Z5U",
    "F5": "Y5V",
}

_MLCC_RULES = (
    AttributeRule("dielectric", "match"),
    AttributeRule("capacitance", "match"),
    AttributeRule("voltage", "higher"),
    *TOLERANCE_RULES,
)
_INDUCTOR_RULES = (
    AttributeRule("inductance", "match"),
    *TOLERANCE_RULES,
)
_BEAD_RULES = (
    AttributeRule("impedance_ohms", "match"),
)


class MurataHandler(ManufacturerHandler):
    """Murata GRM/GCM/GJM MLCCs, LQM/LQW/LQG inductors and BLM ferrite beads.

    The package is the chip size; it must match exactly.

    Replacement rules:
    - MLCC: dielectric and capacitance must match, voltage higher,
      tolerance lower. GCM (AEC-Q200) may replace GRM, not the reverse.
    - Inductors: inductance must match, tolerance lower.
    - Ferrite beads: impedance at 100 MHz must match.
    """

    handler_id = "murata"
    manufacturer = "Murata"
    aliases = ("MURATA", "MURATA MANUFACTURING", "MURATA ELECTRONICS")

    compatible_series = {
        "GRM": frozenset({"GCM"}),
    }

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_CAPACITOR, r"G[RCJ]M\d{3}[0-9A-Z]+")
        registry.add_all(_INDUCTOR, r"LQ[MWG]\d{2}[A-Z]{2}[0-9RN][0-9A-Z]*")
        registry.add_all(_INDUCTOR, r"BLM\d{2}[A-Z]{2}\d{3}[0-9A-Z]*")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_CAPACITOR + _INDUCTOR)

    def _parse(self, mpn: str) -> tuple[str, re.Match | None]:
        mpn = normalize_mpn(mpn)
        for family, pattern in (
            ("mlcc", _MLCC_PATTERN),
            ("inductor", _INDUCTOR_PATTERN),
            ("bead", _BEAD_PATTERN),
        ):
            match = pattern.match(mpn)
            if match:
                return family, match
        return "", None

    def extract_series(self, mpn: str) -> str:
        _, match = self._parse(mpn)
        return match.group("series") if match else ""

    def extract_package_code(self, mpn: str) -> str:
        _, match = self._parse(mpn)
        if not match:
            return ""
        return SIZE_CODES.get(match.group("size"), "")

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        family, match = self._parse(mpn)
        if not match:
            return {}
        values: dict[str, Any] = {}
        if family == "mlcc":
            values["dielectric"] = DIELECTRICS.get(match.group("dielectric"))
            values["voltage"] = decode_eia_voltage(match.group("voltage"))
            values["capacitance"] = decode_capacitance_code(match.group("value"))
            values.update(decode_tolerance_fields(match.group("tolerance")))
        elif family == "inductor":
            values["inductance"] = decode_inductance_code(match.group("value"))
            values.update(decode_tolerance_fields(match.group("tolerance"), inductor=True))
        else:
            values["impedance_ohms"] = decode_value_code(match.group("value"))
        return {key: value for key, value in values.items() if value is not None}

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        if series.startswith("LQ"):
            return _INDUCTOR_RULES
        if series == "BLM":
            return _BEAD_RULES
        return _MLCC_RULES
