"""STMicroelectronics microcontrollers, regulators, op-amps and EEPROMs.

STM32/STM8 ordering code: STM32 F 103 C 8 T 6 [TR]
    family, line, pin count, flash size, package, temperature range
L78 regulators: L78[M] 05 C V -> output 5V, grade C, TO-220
"""

import re
from typing import Any

from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..packages import same_family
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import ManufacturerHandler

_MCU = (ComponentType.MICROCONTROLLER, ComponentType.MICROCONTROLLER_ST)
_REGULATOR = (ComponentType.VOLTAGE_REGULATOR, ComponentType.VOLTAGE_REGULATOR_LINEAR_ST)
_OPAMP = (ComponentType.OPAMP, ComponentType.OPAMP_ST)
_MEMORY = (ComponentType.MEMORY, ComponentType.MEMORY_ST)

_STM_PATTERN = re.compile(
    r"(?P<series>STM32[A-Z]\d{3}|STM8[A-Z]\d{3})"
    r"(?P<pins>[A-Z])(?P<flash>[0-9A-Z])(?P<package>[A-Z])(?P<temp>\d)"
)
_L78_PATTERN = re.compile(
    r"(?P<series>L7[89]M?)(?P<voltage>\d{2})(?P<grade>AB|AC|C)(?P<package>D2T|DT|V|P|T|K|SP)"
)
_OPAMP_PATTERN = re.compile(
    r"(?P<series>LM(?:358|324|2904|2902)A?|TSV?\d{3,4}A?)(?P<temp>[CIA]?)(?P<package>DT|D|N|PT|ST|LT)"
)
_M24_PATTERN = re.compile(r"(?P<series>M24C\d{2}|M24\d{2,3})-(?P<supply>[WRF])(?P<package>MN|DW|BN|MC)(?P<temp>\d)")

STM_PIN_COUNTS: dict[str, int] = {
    "D": 14, "Y": 20, "F": 20, "E": 25, "G": 28, "K": 32, "T": 36, "H": 40,
    "S": 44, "C": 48, "U": 63, "R": 64, "M": 80, "O": 90, "V": 100,
    "Q": 132, "Z": 144, "A": 169, "I": 176, "B": 208, "N": 216,
}

# Flash size code -> KiB (STM8 and STM32 share the digits they both use)
STM_FLASH_KB: dict[str, int] = {
    "2": 4, "3": 8, "4": 16, "6": 32, "8": 64, "B": 128, "Z": 192,
    "C": 256, "D": 384, "E": 512, "F": 768, "G": 1024, "H": 1536, "I": 2048,
}

STM_PACKAGES: dict[str, str] = {
    "T": "LQFP",
    "H": "BGA",
    "I": "BGA",
    "K": "BGA",
    "U": "QFN",
    "Y": "WLCSP",
    "P": "TSSOP",
    "M": "SOIC",
}

# Temperature range digit -> max ambient °C
STM_TEMPERATURE: dict[str, int] = {"6": 85, "7": 105, "3": 125}

L78_PACKAGES: dict[str, str] = {
    "V": "TO-220",
    "P": "TO-220F",
    "T": "TO-220",
    "D2T": "D2PAK",
    "DT": "DPAK",
    "K": "TO-3",
    "SP": "TO-220F",
}

# Output voltage accuracy by grade (percent)
L78_GRADE_TOLERANCE: dict[str, float] = {"AB": 2.0, "AC": 2.0, "C": 4.0}

OPAMP_PACKAGES: dict[str, str] = {
    "D": "SOIC",
    "DT": "SOIC",
    "N": "DIP",
    "PT": "TSSOP",
    "ST": "MSOP",
    "LT": "SOT-23",
}

# Operating range letter for op-amps -> max ambient °C (no letter = 0..70)
OPAMP_TEMPERATURE: dict[str, int] = {"": 70, "C": 70, "I": 85, "A": 125}

M24_PACKAGES: dict[str, str] = {"MN": "SOIC", "DW": "TSSOP", "BN": "PDIP", "MC": "DFN"}

# Supply range letter -> minimum supply voltage
M24_SUPPLY_MIN_V: dict[str, float] = {"W": 2.5, "R": 1.8, "F": 1.6}

_STM_RULES = (
    AttributeRule("pin_count", "match"),
    AttributeRule("flash_kb", "higher"),
    AttributeRule("temperature_max_c", "higher"),
)
_L78_RULES = (
    AttributeRule("output_voltage", "match"),
    AttributeRule("output_tolerance_pct", "lower"),
)
_OPAMP_RULES = (
    AttributeRule("temperature_max_c", "higher"),
)
_M24_RULES = (
    AttributeRule("supply_min_v", "lower"),
    AttributeRule("temperature_max_c", "higher"),
)


class STHandler(ManufacturerHandler):
    """STMicroelectronics STM32/STM8, L78/L79, LM358/TS op-amps and M24 EEPROMs.

    Replacement rules per family:
    - STM32/STM8: pin count must match; flash size and temperature range
      higher. Package letter must match (LQFP vs QFN are different boards).
    - L78/L79: output voltage must match, accuracy grade lower (AB 2% can
      replace C 4%). L78 (1.5A) may replace L78M (0.5A).
    - Op-amps: temperature range higher; the "A" (tighter offset) variant
      may replace the plain one. LM2904 covers LM358, LM2902 covers LM324.
    - M24 EEPROM: minimum supply lower (R 1.8V can replace W 2.5V),
      temperature range higher.
    """

    handler_id = "st"
    manufacturer = "STMicroelectronics"
    aliases = ("ST", "STMICROELECTRONICS", "ST MICROELECTRONICS", "STM")

    compatible_series = {
        "L78M": frozenset({"L78"}),
        "L79M": frozenset({"L79"}),
        "LM358": frozenset({"LM358A", "LM2904"}),
        "LM324": frozenset({"LM324A", "LM2902"}),
    }

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_MCU, r"STM32[A-Z]\d{3}[A-Z0-9]+")
        registry.add_all(_MCU, r"STM8[A-Z]\d{3}[A-Z0-9]+")

        registry.add_all(_REGULATOR, r"L7[89]M?\d{2}[A-Z0-9]+(?:-[A-Z0-9]+)?")

        registry.add_all(_OPAMP, r"LM(?:358|324|2904|2902)A?(?:[CIA]?(?:DT|D|N|PT|ST|LT))?")
        registry.add_all(_OPAMP, r"TSV?\d{3,4}A?(?:[CIA]?(?:DT|D|N|PT|ST|LT))?")

        registry.add_all(_MEMORY, r"M24C?\d{2,3}-[A-Z0-9]+")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_MCU + _REGULATOR + _OPAMP + _MEMORY)

    def classify(self, mpn: str, component_type: ComponentType, registry: RegistryView) -> bool:
        if component_type in _MCU and _STM_PATTERN.match(normalize_mpn(mpn)):
            return True
        return super().classify(mpn, component_type, registry)

    def _parse(self, mpn: str) -> tuple[str, re.Match | None]:
        """Return (family, match) for the first family whose layout fits."""
        mpn = normalize_mpn(mpn)
        for family, pattern in (
            ("stm", _STM_PATTERN),
            ("l78", _L78_PATTERN),
            ("opamp", _OPAMP_PATTERN),
            ("m24", _M24_PATTERN),
        ):
            match = pattern.match(mpn)
            if match:
                return family, match
        return "", None

    def extract_series(self, mpn: str) -> str:
        _, match = self._parse(mpn)
        return match.group("series") if match else ""

    def extract_package_code(self, mpn: str) -> str:
        family, match = self._parse(mpn)
        if not match:
            return ""
        code = match.group("package")
        table = {
            "stm": STM_PACKAGES,
            "l78": L78_PACKAGES,
            "opamp": OPAMP_PACKAGES,
            "m24": M24_PACKAGES,
        }[family]
        return table.get(code, "")

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        family, match = self._parse(mpn)
        if not match:
            return {}
        attrs: dict[str, Any] = {}
        if family == "stm":
            _put(attrs, "pin_count", STM_PIN_COUNTS.get(match.group("pins")))
            _put(attrs, "flash_kb", STM_FLASH_KB.get(match.group("flash")))
            _put(attrs, "temperature_max_c", STM_TEMPERATURE.get(match.group("temp")))
        elif family == "l78":
            volts = int(match.group("voltage"))
            attrs["output_voltage"] = -volts if match.group("series").startswith("L79") else volts
            attrs["output_tolerance_pct"] = L78_GRADE_TOLERANCE[match.group("grade")]
        elif family == "opamp":
            attrs["temperature_max_c"] = OPAMP_TEMPERATURE[match.group("temp")]
        elif family == "m24":
            attrs["supply_min_v"] = M24_SUPPLY_MIN_V[match.group("supply")]
            _put(attrs, "temperature_max_c", STM_TEMPERATURE.get(match.group("temp")))
        return attrs

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        if series.startswith(("STM32", "STM8")):
            return _STM_RULES
        if series.startswith(("L78", "L79")):
            return _L78_RULES
        if series.startswith("M24"):
            return _M24_RULES
        return _OPAMP_RULES

    def series_compatible(self, original: str, replacement: str) -> bool:
        if super().series_compatible(original, replacement):
            return True
        # TS912 -> TS912A: the A grade is a tighter-offset selection of the same die
        return original.startswith("TS") and replacement == original + "A"

    def packages_compatible(self, original: str, replacement: str) -> bool:
        return same_family(original, replacement)


def _put(attrs: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        attrs[key] = value
