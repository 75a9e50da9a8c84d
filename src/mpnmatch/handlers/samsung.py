"""Samsung Electro-Mechanics CL-series MLCCs.

MPN shape: CL 10 A 106 K P 8 N N N C
    series, size, dielectric, capacitance (pF code), tolerance,
    voltage, thickness, then design/plating/packaging letters
"""

import re
from typing import Any

from ..decoders import decode_capacitance_code, decode_tolerance_fields
from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import TOLERANCE_RULES, ManufacturerHandler

_CAPACITOR = (ComponentType.CAPACITOR, ComponentType.CAPACITOR_CERAMIC_SAMSUNG)

_CL_PATTERN = re.compile(
    r"(?P<series>CL)(?P<size>\d{2})(?P<dielectric>[A-Z])(?P<value>[0-9R]{3})"
    r"(?P<tolerance>[A-Z])(?P<voltage>[A-Z])"
)

SIZE_CODES: dict[str, str] = {
    "03": "0201",
    "05": "0402",
    "10": "0603",
    "21": "0805",
    "31": "1206",
    "32": "1210",
    "43": "1812",
    "55": "2220",
}

DIELECTRICS: dict[str, str] = {
    "A": "X5R",
    "B": "X7R",
    "C": "C0G",
    "F": "Y5V",
    "X": "X6S",
}

# Rated voltage letter -> volts
VOLTAGE_CODES: dict[str, float] = {
    "R": 4.0,
    "Q": 6.3,
    "P": 10.0,
    "O": 16.0,
    "A": 25.0,
    "L": 35.0,
    "B": 50.0,
    "C": 100.0,
    "D": 200.0,
    "E": 250.0,
    "G": 500.0,
    "H": 630.0,
    "I": 1000.0,
}


class SamsungHandler(ManufacturerHandler):
    """Samsung CL MLCCs.

    The series carries the size ("CL10" is 0603), so only same-size parts
    pass the series stage.

    Replacement rules: dielectric and capacitance must match, voltage
    higher, tolerance lower.
    """

    handler_id = "samsung"
    manufacturer = "Samsung Electro-Mechanics"
    aliases = ("SAMSUNG", "SAMSUNG ELECTRO-MECHANICS", "SEMCO")

    replacement_rules = (
        AttributeRule("dielectric", "match"),
        AttributeRule("capacitance", "match"),
        AttributeRule("voltage", "higher"),
        *TOLERANCE_RULES,
    )

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_CAPACITOR, r"CL\d{2}[A-Z][0-9R]{3}[A-Z]{2}[0-9A-Z]*")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_CAPACITOR)

    def extract_series(self, mpn: str) -> str:
        match = _CL_PATTERN.match(normalize_mpn(mpn))
        return match.group("series") + match.group("size") if match else ""

    def extract_package_code(self, mpn: str) -> str:
        match = _CL_PATTERN.match(normalize_mpn(mpn))
        return SIZE_CODES.get(match.group("size"), "") if match else ""

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        match = _CL_PATTERN.match(normalize_mpn(mpn))
        if not match:
            return {}
        values = {
            "dielectric": DIELECTRICS.get(match.group("dielectric")),
            "capacitance": decode_capacitance_code(match.group("value")),
            "voltage": VOLTAGE_CODES.get(match.group("voltage")),
        }
        values.update(decode_tolerance_fields(match.group("tolerance")))
        return {key: value for key, value in values.items() if value is not None}
