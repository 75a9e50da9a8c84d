"""Shared decoders for value codes embedded in part numbers.

Handlers slice the relevant characters out of an MPN and hand them to
these functions. Each decoder is pure and returns None when the code is
not recognised, never raising.

All decoders return values in base SI units:
- Voltage: volts (V)
- Resistance: ohms (Ω)
- Capacitance: farads (F)
- Inductance: henries (H)
- Frequency: hertz (Hz)
- Tolerance / stability: percent / ppm as plain numbers, absolute
  tolerance in the unit of the value it qualifies
"""

import re


# =============================================================================
# PRE-COMPILED REGEX PATTERNS
# =============================================================================

# 3-digit significand+multiplier code ("104", "220") or R-as-decimal ("4R7", "R47")
_THREE_DIGIT_CODE_PATTERN = re.compile(r"(\d)(\d)(\d)")
_R_DECIMAL_PATTERN = re.compile(r"(\d*)R(\d*)")
# RKM/European notation: "4K7", "10K", "100R", "1M", "0R", "2R2"
_RKM_PATTERN = re.compile(r"(\d*)([RKM])(\d*)")
_FREQUENCY_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*([KMG])?(HZ)?")
_PPM_PATTERN = re.compile(r"[±]?(\d+(?:\.\d+)?)\s*PPM")


# =============================================================================
# CODE TABLES
# =============================================================================

# EIA-198 two-character DC voltage codes (electrolytics, many MLCC lines)
EIA_VOLTAGE_CODES: dict[str, float] = {
    "0G": 4.0,
    "0J": 6.3,
    "1A": 10.0,
    "1C": 16.0,
    "1D": 20.0,
    "1E": 25.0,
    "1V": 35.0,
    "1H": 50.0,
    "1J": 63.0,
    "1K": 80.0,
    "2A": 100.0,
    "2C": 160.0,
    "2D": 200.0,
    "2E": 250.0,
    "2V": 350.0,
    "2G": 400.0,
    "2W": 450.0,
    "2J": 630.0,
}

# Relative tolerance letters (percent). B/C/D mean absolute pF on small
# capacitors, so they are only decoded for resistors.
_TOLERANCE_PERCENT: dict[str, float] = {
    "F": 1.0,
    "G": 2.0,
    "J": 5.0,
    "K": 10.0,
    "M": 20.0,
    "Z": 80.0,  # +80/-20%, treated as the worst side
}
_RESISTOR_TOLERANCE_PERCENT: dict[str, float] = {
    **_TOLERANCE_PERCENT,
    "W": 0.05,
    "B": 0.1,
    "C": 0.25,
    "D": 0.5,
}

# Absolute tolerance letters, in SI units. Small capacitors count them in
# picofarads, RF inductors in nanohenries.
_CAPACITOR_ABSOLUTE_TOLERANCE: dict[str, float] = {
    "B": 0.1e-12,
    "C": 0.25e-12,
    "D": 0.5e-12,
}
_INDUCTOR_ABSOLUTE_TOLERANCE: dict[str, float] = {
    "B": 0.1e-9,
    "C": 0.2e-9,
    "S": 0.3e-9,
    "D": 0.5e-9,
}

_RKM_MULTIPLIERS: dict[str, float] = {"R": 1.0, "K": 1e3, "M": 1e6}
_FREQUENCY_MULTIPLIERS: dict[str, float] = {"": 1.0, "K": 1e3, "M": 1e6, "G": 1e9}


# =============================================================================
# DECODERS
# =============================================================================


def decode_eia_voltage(code: str | None) -> float | None:
    """EIA voltage code: '1C' -> 16, '0J' -> 6.3, '2A' -> 100"""
    if not code:
        return None
    return EIA_VOLTAGE_CODES.get(code.upper())


def decode_value_code(code: str | None) -> float | None:
    """Decode a 3-character significand/multiplier code into base units of the code.

    '104' -> 100000, '220' -> 22, '4R7' -> 4.7, 'R47' -> 0.47, '109' -> 1.0
    (multiplier digits 8 and 9 mean x0.01 and x0.1).
    """
    if not code:
        return None
    code = code.upper()
    match = _THREE_DIGIT_CODE_PATTERN.fullmatch(code)
    if match:
        significand = int(match.group(1) + match.group(2))
        exponent = int(match.group(3))
        if exponent == 8:
            return significand * 0.01
        if exponent == 9:
            return significand * 0.1
        return float(significand * 10 ** exponent)
    match = _R_DECIMAL_PATTERN.fullmatch(code)
    if match and (match.group(1) or match.group(2)):
        return float(f"{match.group(1) or '0'}.{match.group(2) or '0'}")
    return None


def decode_capacitance_code(code: str | None) -> float | None:
    """Capacitance code in farads: '104' -> 1e-7 (100nF), '4R7' -> 4.7e-12"""
    picofarads = decode_value_code(code)
    return picofarads * 1e-12 if picofarads is not None else None


def decode_microfarad_code(code: str | None) -> float | None:
    """Electrolytic-style code counted in uF: '101' -> 1e-4 (100uF), 'R47' -> 4.7e-7"""
    microfarads = decode_value_code(code)
    return microfarads * 1e-6 if microfarads is not None else None


def decode_rkm(code: str | None) -> float | None:
    """RKM notation: '4K7' -> 4700, '10K' -> 10000, '100R' -> 100, '0R' -> 0, '1M' -> 1e6"""
    if not code:
        return None
    code = code.upper()
    match = _RKM_PATTERN.fullmatch(code)
    if not match:
        return float(code) if code.isdigit() else None
    int_part, letter, frac_part = match.groups()
    if not int_part and not frac_part:
        return None
    value = float(f"{int_part or '0'}.{frac_part or '0'}")
    return value * _RKM_MULTIPLIERS[letter]


def decode_inductance_code(code: str | None) -> float | None:
    """Inductance code in henries.

    'N' marks the decimal point in nH and 'R' in uH ('2N2' -> 2.2nH,
    '2R2' -> 2.2uH). Plain digits are a 3-digit code in uH ('100' -> 10uH).
    """
    if not code:
        return None
    code = code.upper()
    if "N" in code:
        int_part, _, frac_part = code.partition("N")
        if not (int_part + frac_part).isdigit():
            return None
        return float(f"{int_part or '0'}.{frac_part or '0'}") * 1e-9
    value = decode_value_code(code)
    return value * 1e-6 if value is not None else None


def decode_tolerance_letter(letter: str | None, resistor: bool = False) -> float | None:
    """Tolerance letter in percent: 'F' -> 1, 'J' -> 5, 'K' -> 10, 'M' -> 20"""
    if not letter:
        return None
    table = _RESISTOR_TOLERANCE_PERCENT if resistor else _TOLERANCE_PERCENT
    return table.get(letter.upper())


def decode_tolerance_fields(letter: str | None, inductor: bool = False) -> dict[str, float | str]:
    """Capacitor or inductor tolerance letter as attribute fields.

    Relative letters give {"tolerance_pct": ...}; absolute ones give
    {"tolerance_abs": ...} in farads (or henries with `inductor`):
    'K' -> {"tolerance_pct": 10.0}, 'C' -> {"tolerance_abs": 2.5e-13}.
    Any other letter is kept as {"tolerance_code": letter}. A part yields
    exactly one of the three keys, or {} for no letter.
    """
    if not letter:
        return {}
    letter = letter.upper()
    absolute = _INDUCTOR_ABSOLUTE_TOLERANCE if inductor else _CAPACITOR_ABSOLUTE_TOLERANCE
    if letter in absolute:
        return {"tolerance_abs": absolute[letter]}
    if letter in _TOLERANCE_PERCENT:
        return {"tolerance_pct": _TOLERANCE_PERCENT[letter]}
    return {"tolerance_code": letter}


def decode_frequency(text: str | None) -> float | None:
    """Frequency in Hz: '16.000MHZ' -> 16e6, '32.768KHZ' -> 32768, '25M' -> 25e6

    A bare number with no unit is ambiguous and returns None.
    """
    if not text:
        return None
    match = _FREQUENCY_PATTERN.fullmatch(text.strip().upper())
    if not match:
        return None
    value, prefix, hz = match.groups()
    if not prefix and not hz:
        return None
    return float(value) * _FREQUENCY_MULTIPLIERS[prefix or ""]


def decode_ppm(text: str | None) -> float | None:
    """Frequency stability: '20PPM' -> 20, '±50ppm' -> 50"""
    if not text:
        return None
    match = _PPM_PATTERN.search(text.upper())
    return float(match.group(1)) if match else None
