"""Microchip PIC/dsPIC microcontrollers and serial EEPROMs.

MPN shape: <device>[T]-<speed><temp>/<package>
    PIC16F877A-I/P      PIC16F877, rev A, industrial, PDIP
    PIC32MX795F512L-80I/PT  80 MHz grade, industrial, TQFP
    24LC256T-I/SN       256 Kbit I2C EEPROM, tape & reel, industrial, SOIC
"""

import re
from typing import Any

from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import ManufacturerHandler

_MCU = (ComponentType.MICROCONTROLLER, ComponentType.MICROCONTROLLER_MICROCHIP)
_MEMORY = (ComponentType.MEMORY, ComponentType.MEMORY_MICROCHIP)

_SUFFIX = r"(?:[-/][A-Z0-9]+)*"

_PIC_SHORTCUT_PATTERN = re.compile(r"(?:DS)?PIC\d")
_PIC_SERIES_PATTERN = re.compile(r"(?:DS)?PIC\d+[A-Z]+\d+")
# 24 = I2C, 25 = SPI, 93 = Microwire; AA/LC/FC = supply/speed family
_EEPROM_SERIES_PATTERN = re.compile(r"(24|25|93)(AA|LC|FC)(\d+[A-Z]?)")
_AT24_SERIES_PATTERN = re.compile(r"AT24C\d+")
# "-80I/PT" -> speed 80, temp I, package PT
_ORDERING_SUFFIX_PATTERN = re.compile(r"-(\d*)([CIEH]?)/([A-Z0-9]+)$")

PACKAGE_CODES: dict[str, str] = {
    "P": "PDIP",
    "SP": "SPDIP",
    "SN": "SOIC",
    "SO": "SOIC",
    "SM": "SOIC",
    "SS": "SSOP",
    "ST": "TSSOP",
    "MS": "MSOP",
    "PT": "TQFP",
    "PF": "TQFP",
    "ML": "QFN",
    "MV": "QFN",
    "MF": "DFN",
    "MC": "DFN",
    "OT": "SOT-23",
    "TT": "SOT-23",
    "L": "PLCC",
}

# Operating temperature grade -> max ambient in °C
TEMPERATURE_GRADES: dict[str, int] = {
    "C": 70,
    "I": 85,
    "E": 125,
    "H": 150,
}

# EEPROM supply family upgrades: AA (1.7V min) covers LC (2.5V min);
# FC (1.7V, 1 MHz) covers both
_EEPROM_FAMILY_UPGRADES: dict[str, frozenset[str]] = {
    "LC": frozenset({"AA", "FC"}),
    "AA": frozenset({"FC"}),
}


class MicrochipHandler(ManufacturerHandler):
    """Microchip PIC10/12/16/18/24/32, dsPIC30/33 and 24/25/93-series EEPROMs.

    Also claims AT24C EEPROMs (generic MEMORY), which Microchip continues
    after the Atmel acquisition; the Atmel handler claims the same shape.

    Replacement rules:
    - series: exact, except EEPROMs where a wider-supply family at the same
      bus and density may replace a narrower one (24AA256 for 24LC256)
    - package: exact (PDIP and SPDIP differ in row spacing)
    - revision letter(s) after the device number: must match
    - temperature grade: higher
    - speed grade: higher, compared only when encoded
    """

    handler_id = "microchip"
    manufacturer = "Microchip"
    aliases = ("MICROCHIP", "MICROCHIP TECHNOLOGY", "MICROCHIP TECHNOLOGY INC")

    replacement_rules = (
        AttributeRule("revision", "match"),
        AttributeRule("temperature_max_c", "higher"),
        AttributeRule("speed_grade_mhz", "higher", optional=True),
    )

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_MCU, rf"PIC(?:10|12|16|18)[A-Z]+\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MCU, rf"PIC(?:24|32)[A-Z]+\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MCU, rf"DSPIC(?:30|33)[A-Z]+\d+[A-Z0-9]*{_SUFFIX}")

        registry.add_all(_MEMORY, rf"(?:24|25|93)(?:AA|LC|FC)\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MEMORY, rf"AT24C\d+[A-Z0-9]*{_SUFFIX}")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_MCU + _MEMORY)

    def classify(self, mpn: str, component_type: ComponentType, registry: RegistryView) -> bool:
        if component_type in _MCU and _PIC_SHORTCUT_PATTERN.match(normalize_mpn(mpn)):
            return True
        return super().classify(mpn, component_type, registry)

    def _device(self, mpn: str) -> str:
        """Part before the ordering suffix, without the tape & reel 'T'."""
        mpn = normalize_mpn(mpn)
        device = mpn.split("-", 1)[0]
        if "-" in mpn and device.endswith("T") and len(device) > 1:
            device = device[:-1]
        return device

    def extract_series(self, mpn: str) -> str:
        device = self._device(mpn)
        match = _PIC_SERIES_PATTERN.match(device)
        if match:
            return match.group(0)
        match = _EEPROM_SERIES_PATTERN.match(device)
        if match:
            return match.group(0)
        match = _AT24_SERIES_PATTERN.match(device)
        return match.group(0) if match else ""

    def extract_package_code(self, mpn: str) -> str:
        match = _ORDERING_SUFFIX_PATTERN.search(normalize_mpn(mpn))
        if not match:
            return ""
        return PACKAGE_CODES.get(match.group(3), "")

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        mpn = normalize_mpn(mpn)
        series = self.extract_series(mpn)
        if not series:
            return {}
        attrs: dict[str, Any] = {}
        device = self._device(mpn)
        attrs["revision"] = device[len(series):] or "STD"

        match = _ORDERING_SUFFIX_PATTERN.search(mpn)
        if match:
            speed, grade, _ = match.groups()
            # No grade letter before the slash is the commercial range
            attrs["temperature_max_c"] = TEMPERATURE_GRADES[grade or "C"]
            if speed:
                attrs["speed_grade_mhz"] = int(speed)
        return attrs

    def series_compatible(self, original: str, replacement: str) -> bool:
        if super().series_compatible(original, replacement):
            return True
        orig = _EEPROM_SERIES_PATTERN.fullmatch(original)
        repl = _EEPROM_SERIES_PATTERN.fullmatch(replacement)
        if not orig or not repl:
            return False
        same_bus_and_density = orig.group(1) == repl.group(1) and orig.group(3) == repl.group(3)
        return same_bus_and_density and repl.group(2) in _EEPROM_FAMILY_UPGRADES.get(orig.group(2), ())

