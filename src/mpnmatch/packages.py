"""Package codes, package families and mounting type detection.

Manufacturers encode the package as a short suffix ("-PU", "DR", "T").
STANDARD_PACKAGE_CODES holds the suffixes that mean the same thing across
vendors; handlers keep their own tables for anything vendor-specific and
fall back to this one.
"""

# Suffix code -> package family name
STANDARD_PACKAGE_CODES: dict[str, str] = {
    # DIP
    "N": "DIP",
    "P": "DIP",
    "PU": "PDIP",
    # Atmel-style two-letter codes (also used by several other vendors)
    "AU": "TQFP",
    "MU": "QFN",
    "SU": "SOIC",
    "XU": "TSSOP",
    "CU": "WLCSP",
    # SOIC
    "D": "SOIC",
    "M": "SOIC",
    "R": "SOIC",
    "DW": "SOIC-WIDE",
    # TSSOP / MSOP
    "PW": "TSSOP",
    "DT": "TSSOP",
    "PT": "TSSOP",
    "DGK": "MSOP",
    # SOT
    "DBV": "SOT-23",
    "MP": "SOT-223",
    "U": "SOT-223",
    "DRL": "SOT-553",
    "DRV": "SON",
    # TO-220
    "T": "TO-220",
    "T3": "TO-220",
    "CT": "TO-220",
    "TA": "TO-220F",
    "FP": "TO-220F",
    # Other TO
    "K": "TO-3",
    "H": "TO-39",
    "KC": "TO-252",
    "KV": "TO-252",
    "TU": "TO-251",
    "F": "TO-251",
    # D2PAK / DPAK
    "S": "D2PAK",
    "L": "DPAK",
    # Diodes
    "RL": "DO-41",
    "G": "DO-35",
    # Generic
    "SMD": "SMD",
    "THT": "THT",
}

# Packages that carry significant current; footprints differ but a power
# package may stand in for another on a board designed for either
POWER_PACKAGES = frozenset({
    "TO-220", "TO-220F", "TO-252", "TO-247", "TO-263",
    "D2PAK", "DPAK", "SOT-223",
})

# Pin-compatible small-outline IC packages (op-amps, comparators, ...)
SMALL_OUTLINE_GROUP = frozenset({"DIP", "SOIC", "TSSOP", "MSOP"})

# Different names for the same physical footprint -> canonical name
_PACKAGE_FAMILIES: dict[str, str] = {
    "PDIP": "DIP",
    "SPDIP": "DIP",
    "SO": "SOIC",
    "TO-220F": "TO-220",
    "TO-220FP": "TO-220",
    "MLF": "QFN",
    "VQFN": "QFN",
}

# SMD package patterns for mounting type detection
SMD_PATTERNS = frozenset({
    "0201", "0402", "0603", "0805", "1206", "1210", "1812", "2010", "2512",  # Imperial sizes
    "01005",
    "SOT", "SOD", "SOP", "SOIC", "SSOP", "TSSOP", "TSOP", "MSOP",  # Small outline
    "SO-",
    "QFP", "TQFP", "LQFP",  # Quad flat
    "QFN", "DFN", "MLF", "SON", "WSON",  # No-lead
    "BGA", "CSP", "WLCSP",  # Ball grid array
    "LGA", "PLCC",
    "TO-252", "TO-263", "DPAK", "D2PAK",  # Power SMD
    "DO-214", "SMA", "SMB", "SMC",  # Diode SMD
    "SC-70", "SC-88",
})

# Through-hole package patterns
THROUGH_HOLE_PATTERNS = frozenset({
    "DIP", "PDIP", "CDIP",  # Dual in-line
    "SIP",
    "TO-92", "TO-126", "TO-220", "TO-247", "TO-251", "TO-3", "TO-39",  # Power through-hole
    "DO-41", "DO-35", "DO-201", "DO-15",  # Axial diodes
    "THT", "AXIAL", "RADIAL",
    "HC-49",  # Crystal can
})


def resolve_package_code(code: str | None, default: str = "") -> str:
    """Map a suffix code to its package family: 'PU' -> 'PDIP', 'DR' -> ''.

    Unknown codes return `default`.
    """
    if not code:
        return default
    return STANDARD_PACKAGE_CODES.get(code.strip().upper(), default)


def package_family(package: str | None) -> str:
    """Canonical footprint name: 'PDIP' -> 'DIP', 'TO-220F' -> 'TO-220'."""
    if not package:
        return ""
    pkg = package.strip().upper()
    return _PACKAGE_FAMILIES.get(pkg, pkg)


def is_power_package(package: str | None) -> bool:
    if not package:
        return False
    return package.strip().upper() in POWER_PACKAGES


def same_family(pkg1: str | None, pkg2: str | None) -> bool:
    family = package_family(pkg1)
    return bool(family) and family == package_family(pkg2)


def packages_compatible(pkg1: str | None, pkg2: str | None) -> bool:
    """Check if two packages can stand in for each other.

    Compatible when identical or the same footprint family, when both are
    power packages, or when both are in the small-outline IC group.
    Empty input is never compatible.
    """
    if not pkg1 or not pkg2:
        return False
    if same_family(pkg1, pkg2):
        return True
    if is_power_package(pkg1) and is_power_package(pkg2):
        return True
    return package_family(pkg1) in SMALL_OUTLINE_GROUP and package_family(pkg2) in SMALL_OUTLINE_GROUP


def mounting_class(package: str | None) -> str:
    """Determine mounting type from a package name.

    Returns:
        "smd" for surface mount, "through_hole" for through-hole,
        "not_sure" if no pattern matches.
    """
    if not package:
        return "not_sure"

    pkg_upper = package.upper()

    # Explicit markers are authoritative
    if "SMD" in pkg_upper or "SMT" in pkg_upper:
        return "smd"

    for pattern in THROUGH_HOLE_PATTERNS:
        if pattern in pkg_upper:
            return "through_hole"

    for pattern in SMD_PATTERNS:
        if pattern in pkg_upper:
            return "smd"

    # Bare size codes (0603, 1206) and mm dimensions are SMD
    if pkg_upper[0].isdigit():
        return "smd"

    return "not_sure"
