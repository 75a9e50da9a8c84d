"""Tests for attribute rules and the staged replacement check."""

import pytest

from mpnmatch.equivalence import (
    AttributeRule,
    CheckResult,
    EquivalenceVerdict,
    compare_attributes,
    evaluate_replacement,
)
from mpnmatch.handlers.base import ManufacturerHandler
from mpnmatch.taxonomy import ComponentType


class TestCompareAttributes:
    def test_match_numeric(self):
        rules = (AttributeRule("capacitance"),)
        assert compare_attributes(rules, {"capacitance": 1e-7}, {"capacitance": 1e-7}).passed
        assert not compare_attributes(rules, {"capacitance": 1e-7}, {"capacitance": 2.2e-7}).passed

    def test_match_uses_relative_tolerance(self):
        rules = (AttributeRule("capacitance", tolerance=0.05),)
        assert compare_attributes(rules, {"capacitance": 100.0}, {"capacitance": 104.0}).passed
        assert not compare_attributes(rules, {"capacitance": 100.0}, {"capacitance": 106.0}).passed

    def test_match_float_noise(self):
        rules = (AttributeRule("capacitance"),)
        assert compare_attributes(rules, {"capacitance": 0.1e-6}, {"capacitance": 100e-9}).passed

    def test_match_zero(self):
        rules = (AttributeRule("resistance"),)
        assert compare_attributes(rules, {"resistance": 0.0}, {"resistance": 0.0}).passed
        assert not compare_attributes(rules, {"resistance": 0.0}, {"resistance": 0.1}).passed

    def test_match_strings_case_insensitive(self):
        rules = (AttributeRule("dielectric"),)
        assert compare_attributes(rules, {"dielectric": "X7R"}, {"dielectric": "x7r"}).passed
        assert not compare_attributes(rules, {"dielectric": "X7R"}, {"dielectric": "X5R"}).passed

    @pytest.mark.parametrize("orig,repl,ok", [
        (50.0, 50.0, True),
        (50.0, 100.0, True),
        (50.0, 25.0, False),
    ])
    def test_higher(self, orig, repl, ok):
        rules = (AttributeRule("voltage", "higher"),)
        assert compare_attributes(rules, {"voltage": orig}, {"voltage": repl}).passed is ok

    @pytest.mark.parametrize("orig,repl,ok", [
        (10.0, 10.0, True),
        (10.0, 5.0, True),
        (10.0, 20.0, False),
    ])
    def test_lower(self, orig, repl, ok):
        rules = (AttributeRule("tolerance_pct", "lower"),)
        assert compare_attributes(rules, {"tolerance_pct": orig}, {"tolerance_pct": repl}).passed is ok

    def test_higher_with_tolerance(self):
        rules = (AttributeRule("voltage", "higher", tolerance=0.1),)
        assert compare_attributes(rules, {"voltage": 50.0}, {"voltage": 46.0}).passed

    def test_ordered_rule_on_strings_fails(self):
        rules = (AttributeRule("voltage", "higher"),)
        assert not compare_attributes(rules, {"voltage": "50V"}, {"voltage": "100V"}).passed

    def test_mixed_types_fail(self):
        rules = (AttributeRule("capacitance"),)
        assert not compare_attributes(rules, {"capacitance": 1e-7}, {"capacitance": "100nF"}).passed

    def test_bool_is_not_numeric(self):
        rules = (AttributeRule("flag", "higher"),)
        assert not compare_attributes(rules, {"flag": True}, {"flag": True}).passed

    def test_missing_required_fails(self):
        rules = (AttributeRule("voltage", "higher"),)
        result = compare_attributes(rules, {}, {})
        assert not result.passed
        assert result.stage == "attributes"
        assert "voltage" in result.detail

    def test_optional_skipped_when_both_missing(self):
        rules = (AttributeRule("tolerance_pct", "lower", optional=True),)
        result = compare_attributes(rules, {}, {})
        assert result.passed
        assert result.detail == "no attribute rules apply"

    def test_optional_one_sided_fails(self):
        rules = (AttributeRule("tolerance_pct", "lower", optional=True),)
        result = compare_attributes(rules, {"tolerance_pct": 10.0}, {})
        assert not result.passed
        assert "replacement" in result.detail

    def test_first_failure_decides(self):
        rules = (AttributeRule("a"), AttributeRule("b"))
        result = compare_attributes(rules, {"a": 1.0, "b": 1.0}, {"a": 2.0, "b": 2.0})
        assert result.detail.startswith("a:")

    def test_verified_list(self):
        rules = (AttributeRule("a"), AttributeRule("b", "higher"))
        result = compare_attributes(rules, {"a": 1.0, "b": 1.0}, {"a": 1.0, "b": 2.0})
        assert result.passed
        assert result.detail == "verified: a, b"


class TestVerdict:
    def test_failed_stage(self):
        verdict = EquivalenceVerdict(False, (
            CheckResult("series", True, "ok"),
            CheckResult("package", False, "nope"),
        ))
        assert verdict.failed_stage == "package"
        assert not verdict

    def test_to_dict(self):
        verdict = EquivalenceVerdict(True, (CheckResult("series", True, "X -> X"),))
        assert verdict.to_dict() == {
            "equivalent": True,
            "failed_stage": None,
            "checks": [{"stage": "series", "passed": True, "detail": "X -> X"}],
        }


class _FakeHandler(ManufacturerHandler):
    """Parts look like 'FK<series>-<package>-<volts>'."""

    handler_id = "fake"
    compatible_series = {"FK1": frozenset({"FK2"})}
    replacement_rules = (AttributeRule("voltage", "higher"),)

    def supported_types(self):
        return frozenset({ComponentType.IC})

    def initialize_patterns(self, registry):
        registry.add(ComponentType.IC, r"FK\d-[A-Z]+-\d+")

    def extract_series(self, mpn):
        return mpn.split("-")[0] if mpn.startswith("FK") else ""

    def extract_package_code(self, mpn):
        parts = mpn.split("-")
        return parts[1] if len(parts) == 3 else ""

    def decode_attributes(self, mpn):
        parts = mpn.split("-")
        if len(parts) == 3 and parts[2].isdigit():
            return {"voltage": float(parts[2])}
        return {}


class TestEvaluateReplacement:
    @pytest.fixture
    def handler(self):
        return _FakeHandler()

    def test_identical_parts(self, handler):
        verdict = evaluate_replacement(handler, "FK1-SOIC-50", "FK1-SOIC-50")
        assert verdict.equivalent
        assert [c.stage for c in verdict.checks] == ["series", "package", "attributes"]

    def test_declared_series_is_one_directional(self, handler):
        assert evaluate_replacement(handler, "FK1-SOIC-50", "FK2-SOIC-50").equivalent
        verdict = evaluate_replacement(handler, "FK2-SOIC-50", "FK1-SOIC-50")
        assert verdict.failed_stage == "series"

    def test_package_mismatch_stops_chain(self, handler):
        verdict = evaluate_replacement(handler, "FK1-SOIC-50", "FK1-QFN-50")
        assert verdict.failed_stage == "package"
        assert len(verdict.checks) == 2

    def test_attribute_direction(self, handler):
        assert evaluate_replacement(handler, "FK1-SOIC-50", "FK1-SOIC-100").equivalent
        verdict = evaluate_replacement(handler, "FK1-SOIC-50", "FK1-SOIC-25")
        assert verdict.failed_stage == "attributes"

    def test_undecodable_series_fails_closed(self, handler):
        verdict = evaluate_replacement(handler, "FK1-SOIC-50", "XX1-SOIC-50")
        assert verdict.failed_stage == "series"
        assert "XX1-SOIC-50" in verdict.checks[0].detail

    def test_undecodable_package_fails_closed(self, handler):
        verdict = evaluate_replacement(handler, "FK1-SOIC-50", "FK1")
        assert verdict.failed_stage == "package"

    def test_empty_input(self, handler):
        verdict = evaluate_replacement(handler, "", "FK1-SOIC-50")
        assert not verdict
        assert verdict.failed_stage == "series"

    def test_handler_check_normalizes(self, handler):
        assert handler.is_official_replacement(" fk1-soic-50 ", "FK1-SOIC-63")
