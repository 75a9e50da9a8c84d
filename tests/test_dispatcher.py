"""Tests for handler registration, classification and owner identification."""

import threading

import pytest

import mpnmatch
from mpnmatch.dispatcher import Claim, Dispatcher, build_dispatcher, get_dispatcher, reset_dispatcher
from mpnmatch.errors import ConfigurationError, PatternCompileError, RegistryFrozenError, UnknownHandlerError
from mpnmatch.handlers.base import ManufacturerHandler
from mpnmatch.registry import PatternRegistry
from mpnmatch.taxonomy import ComponentType

CT = ComponentType

BUILTIN_EXAMPLES = [
    ("ATMEGA328P-PU", "atmel"),
    ("PIC16F877A-I/P", "microchip"),
    ("STM32F103C8T6", "st"),
    ("LM1117IMPX-3.3", "ti"),
    ("GRM188R71H104KA93D", "murata"),
    ("CL10A106KP8NNNC", "samsung"),
    ("08055C104KAT2A", "avx"),
    ("RC0603FR-0710KL", "yageo"),
    ("UUD1C101MCL1GS", "nichicon"),
    ("ABM8-16.000MHZ-B2-T", "abracon"),
]


def _mixed_case(mpn):
    return "".join(c.lower() if i % 2 else c for i, c in enumerate(mpn))


class _BroadCapHandler(ManufacturerHandler):
    """Registers a broad generic pattern that looks like everyone's capacitors."""

    handler_id = "broad"
    manufacturer = "Broad"

    def initialize_patterns(self, registry):
        registry.add(CT.CAPACITOR, r"[A-Z]+\d+[A-Z0-9]*")

    def supported_types(self):
        return frozenset({CT.CAPACITOR})


class _NarrowCapHandler(ManufacturerHandler):
    handler_id = "narrow"
    manufacturer = "Narrow"

    def initialize_patterns(self, registry):
        registry.add_all((CT.CAPACITOR, CT.CAPACITOR_CERAMIC_MURATA), r"NC\d{4}")

    def supported_types(self):
        return frozenset({CT.CAPACITOR, CT.CAPACITOR_CERAMIC_MURATA})


class _StrayTypeHandler(ManufacturerHandler):
    handler_id = "stray"

    def initialize_patterns(self, registry):
        registry.add(CT.LED, r"LED\d+")

    def supported_types(self):
        return frozenset({CT.CAPACITOR})


class _BrokenPatternHandler(ManufacturerHandler):
    handler_id = "broken"

    def initialize_patterns(self, registry):
        registry.add(CT.CAPACITOR, r"BR\d+")
        registry.add(CT.CAPACITOR, r"BR(\d+")

    def supported_types(self):
        return frozenset({CT.CAPACITOR})


class _CountingHandler(_NarrowCapHandler):
    handler_id = "counting"

    def __init__(self):
        self.calls = 0

    def initialize_patterns(self, registry):
        self.calls += 1
        super().initialize_patterns(registry)


@pytest.fixture(scope="module")
def dispatcher():
    d = build_dispatcher()
    d.initialize()
    return d


class TestLifecycle:
    def test_initialize_is_idempotent(self):
        handler = _CountingHandler()
        d = Dispatcher([handler])
        d.initialize()
        size = len(d.registry)
        d.initialize()
        assert handler.calls == 1
        assert len(d.registry) == size
        assert d.initialized

    def test_concurrent_initialize_runs_once(self):
        handler = _CountingHandler()
        d = Dispatcher([handler])
        threads = [threading.Thread(target=d.initialize) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert handler.calls == 1

    def test_queries_initialize_lazily(self):
        d = Dispatcher([_NarrowCapHandler()])
        assert not d.initialized
        assert d.classify("NC1234")
        assert d.initialized

    def test_register_after_initialize_fails(self):
        d = Dispatcher([_NarrowCapHandler()])
        d.initialize()
        with pytest.raises(RegistryFrozenError):
            d.register_handler(_BroadCapHandler())

    def test_duplicate_id_rejected(self):
        d = Dispatcher([_NarrowCapHandler()])
        with pytest.raises(ConfigurationError):
            d.register_handler(_NarrowCapHandler())

    def test_missing_id_rejected(self):
        with pytest.raises(ConfigurationError):
            Dispatcher([ManufacturerHandler()])

    def test_supplied_empty_registry_is_used(self):
        registry = PatternRegistry()
        d = Dispatcher([_NarrowCapHandler()], registry=registry)
        d.initialize()
        assert d.registry is registry
        assert len(registry) == 2
        assert registry.frozen

    def test_failed_initialize_leaves_no_partial_patterns(self):
        d = Dispatcher([_NarrowCapHandler(), _BrokenPatternHandler()])
        for _ in range(2):
            with pytest.raises(PatternCompileError):
                d.initialize()
            assert len(d.registry) == 0
            assert not d.registry.frozen
        assert not d.initialized

    def test_failed_initialize_keeps_supplied_entries(self):
        registry = PatternRegistry()
        registry.register("preset", CT.CAPACITOR, r"PS\d+")
        d = Dispatcher([_StrayTypeHandler()], registry=registry)
        with pytest.raises(ConfigurationError):
            d.initialize()
        assert [e.handler_id for e in registry.entries()] == ["preset"]

    def test_stray_type_is_configuration_error(self):
        d = Dispatcher([_StrayTypeHandler()])
        with pytest.raises(ConfigurationError, match="LED"):
            d.initialize()


class TestClassify:
    def test_case_insensitive(self, dispatcher):
        assert dispatcher.classify("atmega328p-pu") == dispatcher.classify("ATMEGA328P-PU")

    @pytest.mark.parametrize("mpn", [None, "", "   ", "X" * 200])
    def test_empty_or_overlong(self, dispatcher, mpn):
        assert dispatcher.classify(mpn) == frozenset()
        assert dispatcher.identify(mpn) is None

    def test_unknown_type_name(self, dispatcher):
        assert dispatcher.classify("ATMEGA328P-PU", "FLUX_CAPACITOR") == frozenset()

    def test_type_as_string(self, dispatcher):
        assert dispatcher.classify("ATMEGA328P-PU", "microcontroller_atmel") == frozenset(
            {Claim("atmel", CT.MICROCONTROLLER_ATMEL)}
        )

    def test_union_of_generic_and_specific(self, dispatcher):
        types = dispatcher.classify_types("GRM188R71H104KA93D")
        assert types == frozenset({CT.CAPACITOR, CT.CAPACITOR_CERAMIC_MURATA})

    def test_unrecognised_mpn(self, dispatcher):
        assert dispatcher.classify("NOTAPART123") == frozenset()

    def test_scoped_patterns_do_not_leak(self):
        d = Dispatcher([_BroadCapHandler(), _NarrowCapHandler()])
        # The broad pattern matches "GRM188" but the narrow handler must not claim it
        claims = d.classify("GRM188")
        assert claims == frozenset({Claim("broad", CT.CAPACITOR)})

    def test_overlap_is_kept(self):
        d = Dispatcher([_BroadCapHandler(), _NarrowCapHandler()])
        assert d.handlers_for("NC1234") == ("broad", "narrow")

    def test_claim_to_dict(self):
        assert Claim("ti", CT.OPAMP_TI).to_dict() == {"handler": "ti", "type": "OPAMP_TI"}


class TestIdentify:
    def test_specific_claim_wins_over_registration_order(self):
        d = Dispatcher([_BroadCapHandler(), _NarrowCapHandler()])
        assert d.identify("NC1234") == "narrow"

    def test_generic_only_uses_registration_order(self):
        d = Dispatcher([_BroadCapHandler()])
        assert d.identify("AB12") == "broad"

    def test_at24_goes_to_atmel(self, dispatcher):
        owners = dispatcher.handlers_for("AT24C256C-SSHL")
        assert owners == ("atmel", "microchip")
        assert dispatcher.identify("AT24C256C-SSHL") == "atmel"

    def test_lm358_suffixes(self, dispatcher):
        assert dispatcher.identify("LM358DR") == "ti"
        assert set(dispatcher.handlers_for("LM358N")) == {"st", "ti"}
        assert dispatcher.identify("LM358N") == "st"

    @pytest.mark.parametrize("mpn,owner", BUILTIN_EXAMPLES)
    def test_builtin_owners(self, dispatcher, mpn, owner):
        assert dispatcher.identify(mpn) == owner


class TestExtraction:
    def test_extract_series_and_package(self, dispatcher):
        assert dispatcher.extract_series("atmega328p-pu", "atmel") == "ATMEGA328"
        assert dispatcher.extract_package_code("ATMEGA328P-PU", "ATMEL") == "PDIP"

    def test_empty_results_are_none(self, dispatcher):
        assert dispatcher.extract_series("", "atmel") is None
        assert dispatcher.extract_series("GRM188R71H104KA93D", "atmel") is None
        assert dispatcher.extract_package_code("ATMEGA328P", "atmel") is None

    def test_unknown_handler(self, dispatcher):
        with pytest.raises(UnknownHandlerError) as exc:
            dispatcher.extract_series("ATMEGA328P-PU", "nosuch")
        assert exc.value.handler_id == "nosuch"

    def test_extract_attributes_infers_handler(self, dispatcher):
        attrs = dispatcher.extract_attributes("STM32F103C8T6")
        assert attrs["series"] == "STM32F103"
        assert attrs["package_code"] == "LQFP"
        assert attrs["pin_count"] == 48
        assert dispatcher.extract_attributes("NOTAPART123") == {}


class TestRepeatability:
    @pytest.mark.parametrize("mpn,owner", BUILTIN_EXAMPLES)
    def test_repeat_calls_agree(self, dispatcher, mpn, owner):
        assert dispatcher.classify(mpn) == dispatcher.classify(mpn)
        assert dispatcher.identify(mpn) == dispatcher.identify(mpn)
        assert dispatcher.extract_series(mpn, owner) == dispatcher.extract_series(mpn, owner)
        assert dispatcher.extract_package_code(mpn, owner) == dispatcher.extract_package_code(mpn, owner)

    @pytest.mark.parametrize("mpn,owner", BUILTIN_EXAMPLES)
    @pytest.mark.parametrize("variant", [str.lower, str.upper, _mixed_case])
    def test_case_does_not_matter(self, dispatcher, mpn, owner, variant):
        other = variant(mpn)
        assert dispatcher.classify(other) == dispatcher.classify(mpn)
        assert dispatcher.extract_series(other, owner) == dispatcher.extract_series(mpn, owner)
        assert dispatcher.extract_package_code(other, owner) == dispatcher.extract_package_code(mpn, owner)

    def test_examples_are_recognised(self, dispatcher):
        for mpn, owner in BUILTIN_EXAMPLES:
            assert dispatcher.extract_series(mpn, owner), mpn


class TestReplacement:
    def test_official_replacement(self, dispatcher):
        assert dispatcher.is_official_replacement("ATMEGA328P-PU", "ATMEGA328P-AU", "atmel")
        assert not dispatcher.is_official_replacement("ATMEGA328P-PU", "ATTINY85-PU", "atmel")

    def test_explain(self, dispatcher):
        verdict = dispatcher.explain_replacement("LM358DR", "LM2904DR", "ti")
        assert verdict.equivalent
        assert [c.stage for c in verdict.checks] == ["series", "package", "attributes"]

    def test_inferred_handler(self, dispatcher):
        assert dispatcher.is_replacement("GRM188R71H104KA93D", "GCM188R71H104KA57D")

    def test_cross_manufacturer_is_not_replacement(self, dispatcher):
        assert not dispatcher.is_replacement("GRM188R71H104KA93D", "CL10B104KB8NNNC")
        assert not dispatcher.is_replacement("NOTAPART123", "NOTAPART123")


class TestBuildDispatcher:
    def test_enabled_subset(self):
        d = build_dispatcher(["murata", "ti"])
        assert d.handler_ids == ["murata", "ti"]
        assert d.identify("ATMEGA328P-PU") is None

    def test_unknown_enabled_id(self):
        with pytest.raises(UnknownHandlerError):
            build_dispatcher(["nosuch"])

    def test_builtin_order(self):
        assert build_dispatcher().handler_ids == sorted(build_dispatcher().handler_ids)


class TestGlobalDispatcher:
    def test_singleton_and_reset(self):
        reset_dispatcher()
        first = get_dispatcher()
        assert get_dispatcher() is first
        reset_dispatcher()
        assert get_dispatcher() is not first

    def test_module_functions(self):
        reset_dispatcher()
        assert mpnmatch.identify("ATMEGA328P-PU") == "atmel"
        assert mpnmatch.extract_series("ATMEGA328P-PU", "atmel") == "ATMEGA328"
        assert mpnmatch.is_official_replacement("ATMEGA328P-PU", "ATMEGA328P-AU", "atmel")
        assert mpnmatch.extract_attributes("ATMEGA328P-PU")["variant"] == "P"

    def test_register_before_first_query(self):
        reset_dispatcher()
        try:
            mpnmatch.register_handler(_NarrowCapHandler())
            assert mpnmatch.identify("NC1234") == "narrow"
            with pytest.raises(RegistryFrozenError):
                mpnmatch.register_handler(_BroadCapHandler())
        finally:
            reset_dispatcher()
