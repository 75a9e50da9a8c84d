"""Tests for the pattern registry and handler-scoped views."""

import pytest

from mpnmatch.errors import ConfigurationError, PatternCompileError, RegistryFrozenError
from mpnmatch.registry import PatternRegistry
from mpnmatch.taxonomy import ComponentType

CT = ComponentType


@pytest.fixture
def registry():
    reg = PatternRegistry()
    reg.register("alpha", CT.CAPACITOR, r"AB\d+")
    reg.register("alpha", CT.CAPACITOR, r"AC\d+")
    reg.register("beta", CT.CAPACITOR, r"\d{4}[A-Z]+")
    reg.register("beta", CT.RESISTOR, r"RB\d+")
    return reg


class TestRegister:
    def test_invalid_pattern_fails_fast(self):
        reg = PatternRegistry()
        with pytest.raises(PatternCompileError) as exc:
            reg.register("alpha", CT.IC, r"AB(\d+")
        assert exc.value.handler_id == "alpha"
        assert "AB(" in str(exc.value)
        assert isinstance(exc.value, ConfigurationError)

    def test_frozen_rejects_register(self, registry):
        registry.freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register("alpha", CT.IC, r"X")

    def test_truncate_rebuilds_indexes(self, registry):
        registry.truncate(2)
        assert len(registry) == 2
        assert registry.handler_ids() == ["alpha"]
        assert not registry.matches("0805X", CT.CAPACITOR)
        assert not registry.matches_for_handler("beta", "RB1", CT.RESISTOR)
        assert registry.types_for_handler("beta") == frozenset()
        registry.register("beta", CT.RESISTOR, r"RB\d+")
        assert registry.matches("RB1", CT.RESISTOR)

    def test_truncate_after_freeze_fails(self, registry):
        registry.freeze()
        with pytest.raises(RegistryFrozenError):
            registry.truncate(0)

    def test_order_is_global_sequence(self, registry):
        orders = [e.order for e in registry.entries()]
        assert orders == [0, 1, 2, 3]

    def test_same_text_for_several_types(self):
        reg = PatternRegistry()
        view = reg.view("alpha")
        view.add_all((CT.MICROCONTROLLER, CT.MICROCONTROLLER_ATMEL), r"ATMEGA\d+")
        assert reg.matches("ATMEGA8", CT.MICROCONTROLLER)
        assert reg.matches("ATMEGA8", CT.MICROCONTROLLER_ATMEL)
        assert len(reg) == 2


class TestMatching:
    def test_full_match_semantics(self, registry):
        assert registry.matches("AB12", CT.CAPACITOR)
        assert not registry.matches("AB12X", CT.CAPACITOR)
        assert not registry.matches("XAB12", CT.CAPACITOR)

    def test_case_insensitive(self, registry):
        assert registry.matches("ab12", CT.CAPACITOR)

    def test_empty_never_matches(self, registry):
        assert not registry.matches("", CT.CAPACITOR)
        assert not registry.matches_for_handler("alpha", "", CT.CAPACITOR)

    def test_unscoped_match_sees_every_handler(self, registry):
        assert registry.matches("0805X", CT.CAPACITOR)

    def test_scoped_only_own_entries(self, registry):
        assert registry.matches_for_handler("beta", "0805X", CT.CAPACITOR)
        assert not registry.matches_for_handler("alpha", "0805X", CT.CAPACITOR)

    def test_unknown_type_or_handler(self, registry):
        assert not registry.matches("AB12", CT.LED)
        assert not registry.matches_for_handler("gamma", "AB12", CT.CAPACITOR)


class TestLookups:
    def test_pattern_for_is_first_registered(self, registry):
        assert registry.pattern_for(CT.CAPACITOR).pattern == r"AB\d+"
        assert registry.pattern_for(CT.LED) is None

    def test_pattern_for_handler(self, registry):
        assert registry.pattern_for_handler("beta", CT.CAPACITOR).pattern == r"\d{4}[A-Z]+"
        assert registry.pattern_for_handler("alpha", CT.RESISTOR) is None

    def test_entries_filters(self, registry):
        assert len(registry.entries(handler_id="alpha")) == 2
        assert len(registry.entries(component_type=CT.CAPACITOR)) == 3
        assert len(registry.entries(handler_id="beta", component_type=CT.RESISTOR)) == 1

    def test_types_for_handler(self, registry):
        assert registry.types_for_handler("beta") == frozenset({CT.CAPACITOR, CT.RESISTOR})

    def test_handler_ids_in_registration_order(self, registry):
        assert registry.handler_ids() == ["alpha", "beta"]


class TestRegistryView:
    def test_writes_are_attributed(self):
        reg = PatternRegistry()
        reg.view("gamma").add(CT.LED, r"LED\d")
        assert reg.entries()[0].handler_id == "gamma"

    def test_matches_own_is_scoped(self, registry):
        view = registry.view("alpha")
        assert not view.matches_own("0805X", CT.CAPACITOR)
        assert view.matches_own("AC7", CT.CAPACITOR)
        assert view.registry.matches("0805X", CT.CAPACITOR)

    def test_pattern_for_is_scoped(self, registry):
        assert registry.view("beta").pattern_for(CT.RESISTOR).pattern == r"RB\d+"
        assert registry.view("beta").registry is registry
