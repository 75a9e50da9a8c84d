"""Texas Instruments op-amps, linear regulators and MSP430 microcontrollers."""

import re
from typing import Any

from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..packages import packages_compatible
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import ManufacturerHandler, starts_with_any

_MCU = (ComponentType.MICROCONTROLLER, ComponentType.MICROCONTROLLER_TI)
_REGULATOR = (ComponentType.VOLTAGE_REGULATOR, ComponentType.VOLTAGE_REGULATOR_LINEAR_TI)
_OPAMP = (ComponentType.OPAMP, ComponentType.OPAMP_TI)

# LM358DR, TL072CP, OPA2134UA, LM358MX (National-style M = SOIC, X = reel)
_OPAMP_PATTERN = re.compile(
    r"(?P<series>LM(?:358|324|2904|2902)A?|TL0[78][1-4]|OPA\d{3,4})"
    r"(?P<grade>[CIQ]?)(?P<package>DGK|DBV|PW|D|P|N|U|M)A?(?:R|T|X)?"
)
# LM1117IMPX-3.3, LM1117DT-ADJ
_LM1117_PATTERN = re.compile(
    r"(?P<series>LM1117)(?P<grade>I?)(?P<package>MP|DT|S|T)X?-(?P<voltage>\d+(?:\.\d+)?|ADJ)"
)
# LM7805CT, UA7805CKCS, LM78M05CDT
_LM78_PATTERN = re.compile(
    r"(?P<series>(?:LM|UA)7[89]M?)(?P<voltage>\d{2})(?P<grade>[CI]?)"
    r"(?P<package>KCS|KCT|KTT|KVU|DCY|MP|DT|T|S)"
)
# MSP430G2553IPW20R
_MSP430_PATTERN = re.compile(
    r"(?P<series>MSP430[A-Z]{1,2}\d{3,4})(?P<grade>[IT]?)"
    r"(?P<package>RHB|RGE|RGZ|RSB|PW|PN|PM|PZ|DA|DW|N)(?P<pins>\d{0,3})(?:R|T)?"
)

OPAMP_PACKAGES: dict[str, str] = {
    "D": "SOIC",
    "M": "SOIC",
    "U": "SOIC",
    "P": "PDIP",
    "N": "PDIP",
    "PW": "TSSOP",
    "DGK": "MSOP",
    "DBV": "SOT-23",
}

REGULATOR_PACKAGES: dict[str, str] = {
    "MP": "SOT-223",
    "DCY": "SOT-223",
    "DT": "TO-252",
    "KVU": "TO-252",
    "S": "D2PAK",
    "KTT": "D2PAK",
    "T": "TO-220",
    "KCS": "TO-220",
    "KCT": "TO-220",
}

MSP430_PACKAGES: dict[str, str] = {
    "PW": "TSSOP",
    "DA": "TSSOP",
    "DW": "SOIC",
    "N": "PDIP",
    "PN": "LQFP",
    "PM": "LQFP",
    "PZ": "LQFP",
    "RHB": "QFN",
    "RGE": "QFN",
    "RGZ": "QFN",
    "RSB": "QFN",
}

# Grade letter -> max ambient °C
GRADE_TEMPERATURE: dict[str, int] = {"C": 70, "I": 85, "T": 105, "Q": 125}

# Op-amps whose datasheet range is wider than commercial even without a letter
_OPAMP_DEFAULT_TEMPERATURE: dict[str, int] = {
    "LM358": 70,
    "LM358A": 70,
    "LM324": 70,
    "LM324A": 70,
    "LM2904": 125,
    "LM2902": 125,
}

_OPAMP_RULES = (
    AttributeRule("temperature_max_c", "higher", optional=True),
)
_REGULATOR_RULES = (
    AttributeRule("output_voltage", "match"),
    AttributeRule("temperature_min_c", "lower", optional=True),
)
_MCU_RULES = (
    AttributeRule("pin_count", "match", optional=True),
    AttributeRule("temperature_max_c", "higher"),
)


class TIHandler(ManufacturerHandler):
    """TI LM358/LM324/TL07x/TL08x/OPA op-amps, LM1117/LM78xx regulators, MSP430.

    Packages follow the general footprint rule: DIP/SOIC/TSSOP/MSOP are
    pin-compatible for the op-amp families and power packages substitute
    for each other.

    Replacement rules:
    - op-amps: LM358 may be replaced by LM358A or LM2904 (and LM324 by
      LM324A/LM2902), never the reverse; temperature range higher
    - regulators: output voltage must match (ADJ only matches ADJ),
      minimum temperature lower; LM78 may replace LM78M
    - MSP430: same device; pin count must match, temperature range higher
    """

    handler_id = "ti"
    manufacturer = "Texas Instruments"
    aliases = ("TI", "TEXAS INSTRUMENTS", "NATIONAL SEMICONDUCTOR")

    compatible_series = {
        "LM358": frozenset({"LM358A", "LM2904"}),
        "LM324": frozenset({"LM324A", "LM2902"}),
        "LM78M": frozenset({"LM78"}),
        "UA78M": frozenset({"UA78"}),
        "LM79M": frozenset({"LM79"}),
        "UA79M": frozenset({"UA79"}),
    }

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_OPAMP, r"LM(?:358|324|2904|2902)A?[A-Z]*(?:/NOPB)?")
        registry.add_all(_OPAMP, r"TL0[78][1-4][A-Z]*")
        registry.add_all(_OPAMP, r"OPA\d{3,4}[A-Z]*")

        registry.add_all(_REGULATOR, r"LM1117[A-Z]*-(?:\d+(?:\.\d+)?|ADJ)(?:/NOPB)?")
        registry.add_all(_REGULATOR, r"(?:LM|UA)7[89]M?\d{2}[A-Z]*(?:/NOPB)?")

        registry.add_all(_MCU, r"MSP430[A-Z]{1,2}\d{3,4}[A-Z0-9]*")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_MCU + _REGULATOR + _OPAMP)

    def classify(self, mpn: str, component_type: ComponentType, registry: RegistryView) -> bool:
        if component_type in _MCU and starts_with_any(mpn, ("MSP430",)):
            return True
        return super().classify(mpn, component_type, registry)

    def _parse(self, mpn: str) -> tuple[str, re.Match | None]:
        mpn = normalize_mpn(mpn).removesuffix("/NOPB")
        for family, pattern in (
            ("opamp", _OPAMP_PATTERN),
            ("lm1117", _LM1117_PATTERN),
            ("lm78", _LM78_PATTERN),
            ("msp430", _MSP430_PATTERN),
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
        if family == "opamp":
            return OPAMP_PACKAGES.get(code, "")
        if family == "msp430":
            return MSP430_PACKAGES.get(code, "")
        return REGULATOR_PACKAGES.get(code, "")

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        family, match = self._parse(mpn)
        if not match:
            return {}
        attrs: dict[str, Any] = {}
        series = match.group("series")
        grade = match.group("grade")
        if family == "opamp":
            temp = GRADE_TEMPERATURE.get(grade) if grade else _OPAMP_DEFAULT_TEMPERATURE.get(series)
            if temp is not None:
                attrs["temperature_max_c"] = temp
        elif family == "lm1117":
            voltage = match.group("voltage")
            attrs["output_voltage"] = voltage if voltage == "ADJ" else float(voltage)
            attrs["temperature_min_c"] = -40 if grade == "I" else 0
        elif family == "lm78":
            volts = float(match.group("voltage"))
            attrs["output_voltage"] = -volts if "79" in series else volts
            attrs["temperature_min_c"] = -40 if grade == "I" else 0
        elif family == "msp430":
            if match.group("pins"):
                attrs["pin_count"] = int(match.group("pins"))
            attrs["temperature_max_c"] = GRADE_TEMPERATURE.get(grade, 70)
        return attrs

    def rules_for(self, series: str) -> tuple[AttributeRule, ...]:
        if series.startswith("MSP430"):
            return _MCU_RULES
        if series.startswith(("LM1117", "LM78", "LM79", "UA78", "UA79")):
            return _REGULATOR_RULES
        return _OPAMP_RULES

    def packages_compatible(self, original: str, replacement: str) -> bool:
        return packages_compatible(original, replacement)
