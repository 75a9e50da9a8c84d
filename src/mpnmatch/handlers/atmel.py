"""Atmel (now Microchip) AVR/SAM microcontrollers, memory, touch and crypto parts.

MPN shape: <family><number><variant>-<speed><package>[R]
    ATMEGA328P-PU    ATmega328, picoPower variant, PDIP
    ATTINY85-20SU    ATtiny85, 20 MHz grade, SOIC
    ATMEGA2560-16AU  ATmega2560, 16 MHz grade, TQFP
"""

import re
from typing import Any

from ..equivalence import AttributeRule
from ..mpn import normalize_mpn
from ..registry import RegistryView
from ..taxonomy import ComponentType
from .base import ManufacturerHandler, starts_with_any, suffix_after_hyphen

_MCU = (ComponentType.MICROCONTROLLER, ComponentType.MICROCONTROLLER_ATMEL)
_MEMORY = (ComponentType.MEMORY, ComponentType.MEMORY_ATMEL)
_TOUCH = (ComponentType.IC, ComponentType.TOUCH_ATMEL)
_CRYPTO = (ComponentType.IC, ComponentType.CRYPTO_ATMEL)

# Full family prefixes; "ATM" alone would also catch ATMXT touch controllers
MCU_PREFIXES = ("ATMEGA", "ATTINY", "AT90", "ATXMEGA", "ATSAM")

# Trailing "(-XX)*" allows speed/package/reel suffixes
_SUFFIX = r"(?:-[A-Z0-9]+)*"

# Series extraction, most specific first
_SERIES_PATTERNS = (
    re.compile(r"ATXMEGA\d+"),
    re.compile(r"ATMEGA\d+"),
    re.compile(r"ATTINY\d+"),
    re.compile(r"AT90(?:USB|CAN|PWM|S)?\d+"),
    re.compile(r"ATSAM[A-Z]?\d+[A-Z]"),
    re.compile(r"AT24C\d+"),
    re.compile(r"AT25[A-Z]*\d+"),
    re.compile(r"AT42QT\d+"),
    re.compile(r"ATMXT\d+"),
    re.compile(r"ATECC\d+"),
    re.compile(r"ATSHA\d+"),
)

_PACKAGE_SUFFIX_PATTERN = re.compile(r"(\d*)([A-Z]+?)R?")

PACKAGE_CODES: dict[str, str] = {
    "PU": "PDIP",
    "AU": "TQFP",
    "MU": "QFN",
    "MMH": "QFN",
    "CU": "WLCSP",
    "SU": "SOIC",
    "SSU": "SOIC",
    "SH": "SOIC",
    "TU": "QFP",
    "XU": "TSSOP",
}


class AtmelHandler(ManufacturerHandler):
    """Atmel AVR, SAM, serial memory, QTouch and CryptoAuthentication parts.

    Replacement rules:
    - series: exact (ATMEGA328 never replaces ATMEGA168)
    - package: every listed Atmel package carries the same die with the
      same pinout functions, so any two known packages are compatible
    - variant (P, PA, PB, V, U4, ...): must match; no letter means "STD"
    - speed grade in MHz (the digits before the package code): higher,
      compared only when encoded
    """

    handler_id = "atmel"
    manufacturer = "Atmel"
    aliases = ("ATMEL", "ATMEL CORPORATION", "MICROCHIP/ATMEL")

    replacement_rules = (
        AttributeRule("variant", "match"),
        AttributeRule("speed_grade_mhz", "higher", optional=True),
    )

    def initialize_patterns(self, registry: RegistryView) -> None:
        registry.add_all(_MCU, rf"ATMEGA\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MCU, rf"ATTINY\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MCU, rf"AT90(?:USB|CAN|PWM|S)?\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MCU, rf"ATXMEGA\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MCU, rf"ATSAM[A-Z0-9]+{_SUFFIX}")

        registry.add_all(_MEMORY, rf"AT24C\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_MEMORY, rf"AT25[A-Z]*\d+[A-Z0-9]*{_SUFFIX}")

        registry.add_all(_TOUCH, rf"AT42QT\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_TOUCH, rf"ATMXT\d+[A-Z0-9]*{_SUFFIX}")

        registry.add_all(_CRYPTO, rf"ATECC\d+[A-Z0-9]*{_SUFFIX}")
        registry.add_all(_CRYPTO, rf"ATSHA\d+[A-Z0-9]*{_SUFFIX}")

    def supported_types(self) -> frozenset[ComponentType]:
        return frozenset(_MCU + _MEMORY + _TOUCH + _CRYPTO)

    def classify(self, mpn: str, component_type: ComponentType, registry: RegistryView) -> bool:
        # The family prefixes are unique to Atmel; skip the pattern list
        if component_type in _MCU and starts_with_any(mpn, MCU_PREFIXES):
            return True
        return super().classify(mpn, component_type, registry)

    def extract_series(self, mpn: str) -> str:
        mpn = normalize_mpn(mpn)
        for pattern in _SERIES_PATTERNS:
            match = pattern.match(mpn)
            if match:
                return match.group(0)
        return ""

    def _split_package_suffix(self, mpn: str) -> tuple[str, str]:
        """'ATTINY85-20PU' -> ('20', 'PU'); no hyphen -> ('', '')"""
        suffix = suffix_after_hyphen(mpn)
        if not suffix:
            return "", ""
        match = _PACKAGE_SUFFIX_PATTERN.fullmatch(suffix)
        if not match:
            return "", ""
        return match.group(1), match.group(2)

    def extract_package_code(self, mpn: str) -> str:
        _, code = self._split_package_suffix(mpn)
        return PACKAGE_CODES.get(code, "")

    def decode_attributes(self, mpn: str) -> dict[str, Any]:
        mpn = normalize_mpn(mpn)
        series = self.extract_series(mpn)
        if not series:
            return {}
        attrs: dict[str, Any] = {}
        base = mpn.split("-", 1)[0]
        attrs["variant"] = base[len(series):] or "STD"
        speed, _ = self._split_package_suffix(mpn)
        if speed:
            attrs["speed_grade_mhz"] = int(speed)
        return attrs

    def packages_compatible(self, original: str, replacement: str) -> bool:
        known = set(PACKAGE_CODES.values())
        return original in known and replacement in known
