"""Tests for the handler base class defaults and string helpers."""

import pytest

from mpnmatch.equivalence import AttributeRule
from mpnmatch.handlers.base import (
    ManufacturerHandler,
    series_with_prefix,
    starts_with_any,
    suffix_after_hyphen,
    trailing_suffix,
)
from mpnmatch.registry import PatternRegistry
from mpnmatch.taxonomy import ComponentType


class TestHelpers:
    @pytest.mark.parametrize("mpn,expected", [
        ("ATMEGA328P-PU", "PU"),
        ("LM1117-3.3-X", "X"),
        ("LM358", ""),
        ("", ""),
        (None, ""),
    ])
    def test_suffix_after_hyphen(self, mpn, expected):
        assert suffix_after_hyphen(mpn) == expected

    @pytest.mark.parametrize("mpn,expected", [
        ("LM358DR", "DR"),
        ("lm358dr", "DR"),
        ("LM358", ""),
        (None, ""),
    ])
    def test_trailing_suffix(self, mpn, expected):
        assert trailing_suffix(mpn) == expected

    def test_series_with_prefix(self):
        assert series_with_prefix("LM358DR") == "LM358"
        assert series_with_prefix("358DR") == ""

    def test_starts_with_any(self):
        assert starts_with_any("atmega8", ("ATMEGA", "ATTINY"))
        assert not starts_with_any("", ("ATMEGA",))
        assert not starts_with_any("PIC16F84", ("ATMEGA",))


class _DefaultsHandler(ManufacturerHandler):
    handler_id = "defaults"
    manufacturer = "Defaults Inc"
    compatible_series = {"XY100": frozenset({"XY200"})}
    replacement_rules = (AttributeRule("grade", optional=True),)

    def supported_types(self):
        return frozenset({ComponentType.IC})

    def initialize_patterns(self, registry):
        registry.add(ComponentType.IC, r"XY\d{3}[A-Z]*(?:-[A-Z0-9]+)?")


class TestDefaults:
    handler = _DefaultsHandler()

    def test_default_series(self):
        assert self.handler.extract_series("XY100DR") == "XY100"

    @pytest.mark.parametrize("mpn,package", [
        ("XY100-PU", "PDIP"),
        ("XY100DW", "SOIC-WIDE"),
        ("XY100PW", "TSSOP"),
        ("XY100ZZ", ""),
        ("", ""),
    ])
    def test_default_package(self, mpn, package):
        assert self.handler.extract_package_code(mpn) == package

    def test_extract_attributes(self):
        assert self.handler.extract_attributes("XY100D") == {"series": "XY100", "package_code": "SOIC"}

    def test_scoped_classify(self):
        registry = PatternRegistry()
        view = registry.view("defaults")
        self.handler.initialize_patterns(view)
        assert self.handler.classify("xy100d", ComponentType.IC, view)
        assert not self.handler.classify("", ComponentType.IC, view)
        assert not self.handler.classify("AB100D", ComponentType.IC, view)

    def test_default_replacement_chain(self):
        assert self.handler.is_official_replacement("XY100D", "XY200D")
        assert not self.handler.is_official_replacement("XY200D", "XY100D")
        assert not self.handler.is_official_replacement("XY100D", "XY100PW")

    def test_default_compatible_series_is_read_only(self):
        with pytest.raises(TypeError):
            ManufacturerHandler.compatible_series["XY100"] = frozenset({"XY300"})
        assert not ManufacturerHandler().series_compatible("XY100", "XY300")

    def test_describe(self):
        assert self.handler.describe() == {
            "id": "defaults",
            "manufacturer": "Defaults Inc",
            "aliases": [],
            "supported_types": ["IC"],
        }

    def test_contract_methods_must_be_overridden(self):
        bare = ManufacturerHandler()
        with pytest.raises(NotImplementedError):
            bare.supported_types()
        with pytest.raises(NotImplementedError):
            bare.initialize_patterns(PatternRegistry().view("x"))
