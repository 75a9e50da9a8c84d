"""Tests for package codes, footprint families and mounting detection."""

import pytest

from mpnmatch.packages import (
    is_power_package,
    mounting_class,
    package_family,
    packages_compatible,
    resolve_package_code,
    same_family,
)


class TestMountingClass:
    """Test mounting type detection."""

    @pytest.mark.parametrize("package", [
        "0402", "0603", "0805", "1206", "1210",  # Imperial sizes
        "SOT-23", "SOT-223",  # Small outline
        "SOIC", "SOIC-WIDE", "TSSOP", "MSOP", "SSOP",  # Small outline ICs
        "QFP", "LQFP", "TQFP",  # Quad flat
        "QFN", "DFN", "WSON",  # No-lead
        "BGA", "WLCSP",  # Ball grid array
        "DPAK", "TO-252", "TO-263", "D2PAK",  # Power SMD
        "3.2X2.5MM",  # Crystal body size
        "HC-49/US-SMD",  # Explicit SMD marker wins
    ])
    def test_smd_packages(self, package):
        assert mounting_class(package) == "smd"

    @pytest.mark.parametrize("package", [
        "DIP", "PDIP", "SPDIP",
        "TO-220", "TO-220F", "TO-92", "TO-247",
        "DO-41", "DO-35",
        "HC-49/US",
        "RADIAL",
    ])
    def test_through_hole_packages(self, package):
        assert mounting_class(package) == "through_hole"

    def test_empty_package_defaults_to_not_sure(self):
        assert mounting_class("") == "not_sure"
        assert mounting_class(None) == "not_sure"

    def test_case_insensitive(self):
        assert mounting_class("qfn") == "smd"
        assert mounting_class("pdip") == "through_hole"

    def test_unknown_defaults_to_not_sure(self):
        assert mounting_class("CUSTOM-PKG") == "not_sure"
        assert mounting_class("CL") == "not_sure"


class TestResolvePackageCode:
    @pytest.mark.parametrize("code,expected", [
        ("PU", "PDIP"),
        ("AU", "TQFP"),
        ("MU", "QFN"),
        ("DW", "SOIC-WIDE"),
        ("pw", "TSSOP"),
        (" D ", "SOIC"),
    ])
    def test_known_codes(self, code, expected):
        assert resolve_package_code(code) == expected

    def test_unknown_code_returns_default(self):
        assert resolve_package_code("ZZ") == ""
        assert resolve_package_code("ZZ", default="?") == "?"
        assert resolve_package_code(None) == ""


class TestFamilies:
    def test_package_family_aliases(self):
        assert package_family("PDIP") == "DIP"
        assert package_family("spdip") == "DIP"
        assert package_family("TO-220F") == "TO-220"
        assert package_family("SOIC") == "SOIC"
        assert package_family("") == ""

    def test_same_family(self):
        assert same_family("PDIP", "DIP")
        assert same_family("TO-220", "TO-220FP")
        assert not same_family("SOIC", "TSSOP")
        assert not same_family("", "")

    def test_power_packages(self):
        assert is_power_package("TO-220")
        assert is_power_package("d2pak")
        assert not is_power_package("SOIC")
        assert not is_power_package(None)


class TestPackagesCompatible:
    @pytest.mark.parametrize("a,b", [
        ("SOIC", "SOIC"),
        ("PDIP", "DIP"),
        ("SOIC", "PDIP"),  # small-outline group
        ("TSSOP", "MSOP"),
        ("TO-220", "D2PAK"),  # both power
        ("SOT-223", "TO-252"),
    ])
    def test_compatible(self, a, b):
        assert packages_compatible(a, b)
        assert packages_compatible(b, a)

    @pytest.mark.parametrize("a,b", [
        ("SOIC", "QFN"),
        ("TQFP", "TSSOP"),
        ("SOT-23", "SOIC"),
        ("TO-220", "SOIC"),
        ("", "SOIC"),
        ("SOIC", None),
    ])
    def test_incompatible(self, a, b):
        assert not packages_compatible(a, b)
