"""Replacement equivalence: can one part number stand in for another?

Every handler answers the question with the same three stages, stopping at
the first failure:

1. series     - same series, or a series the handler declares may replace it
2. package    - same package, or one the handler declares compatible
3. attributes - decoded ratings compared rule by rule

Rules come in three directions:
- match:  values must be equal
- higher: replacement must be >= original (voltage, power, temperature)
- lower:  replacement must be <= original (tolerance %, stability ppm)

Unlike catalogue alternative search, nothing is "allowed through" when it
can't be decoded. A rule whose attribute is missing on either side fails.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from .config import NUMERIC_MATCH_TOLERANCE

if TYPE_CHECKING:
    from .handlers.base import ManufacturerHandler

logger = logging.getLogger(__name__)

Direction = Literal["match", "higher", "lower"]
Stage = Literal["series", "package", "attributes"]


@dataclass(frozen=True)
class AttributeRule:
    """How one decoded attribute is compared.

    `tolerance` is a relative fraction applied to numeric comparisons
    (0.02 lets a "higher" rule accept a value 2% below the original).
    `optional` rules only apply when at least one side encodes the
    attribute; one-sided presence still fails.
    """

    name: str
    direction: Direction = "match"
    tolerance: float = 0.0
    optional: bool = False


@dataclass(frozen=True)
class CheckResult:
    stage: Stage
    passed: bool
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"stage": self.stage, "passed": self.passed, "detail": self.detail}


@dataclass(frozen=True)
class EquivalenceVerdict:
    """Outcome of a replacement check plus the chain of checks behind it."""

    equivalent: bool
    checks: tuple[CheckResult, ...] = ()

    def __bool__(self) -> bool:
        return self.equivalent

    @property
    def failed_stage(self) -> Stage | None:
        for check in self.checks:
            if not check.passed:
                return check.stage
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "equivalent": self.equivalent,
            "failed_stage": self.failed_stage,
            "checks": [c.to_dict() for c in self.checks],
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _values_equal(orig: Any, repl: Any, tolerance: float) -> bool:
    if _is_number(orig) and _is_number(repl):
        tol = max(tolerance, NUMERIC_MATCH_TOLERANCE)
        if orig == 0:
            return repl == 0
        return abs(orig - repl) / abs(orig) <= tol
    if isinstance(orig, str) and isinstance(repl, str):
        return orig.strip().upper() == repl.strip().upper()
    return False


def _rule_ok(rule: AttributeRule, orig: Any, repl: Any) -> bool:
    """Check if the replacement value satisfies the rule."""
    if rule.direction == "match":
        return _values_equal(orig, repl, rule.tolerance)
    if not (_is_number(orig) and _is_number(repl)):
        return False
    if rule.direction == "higher":
        return repl >= orig * (1 - rule.tolerance) - NUMERIC_MATCH_TOLERANCE * abs(orig)
    if rule.direction == "lower":
        return repl <= orig * (1 + rule.tolerance) + NUMERIC_MATCH_TOLERANCE * abs(orig)
    return False


def compare_attributes(
    rules: tuple[AttributeRule, ...] | list[AttributeRule],
    original: dict[str, Any],
    replacement: dict[str, Any],
) -> CheckResult:
    """Apply every rule; the first failing rule decides.

    Returns a CheckResult for the "attributes" stage whose detail lists the
    verified attributes, or names the one that failed.
    """
    verified: list[str] = []
    for rule in rules:
        orig_val = original.get(rule.name)
        repl_val = replacement.get(rule.name)
        if orig_val is None and repl_val is None:
            if rule.optional:
                continue
            return CheckResult("attributes", False, f"{rule.name}: not decodable from either part")
        if orig_val is None or repl_val is None:
            side = "original" if orig_val is None else "replacement"
            return CheckResult("attributes", False, f"{rule.name}: not decodable from {side}")
        if not _rule_ok(rule, orig_val, repl_val):
            return CheckResult(
                "attributes", False,
                f"{rule.name}: {repl_val!r} does not satisfy '{rule.direction}' against {orig_val!r}",
            )
        verified.append(rule.name)
    detail = f"verified: {', '.join(verified)}" if verified else "no attribute rules apply"
    return CheckResult("attributes", True, detail)


def evaluate_replacement(
    handler: "ManufacturerHandler", original: str, replacement: str
) -> EquivalenceVerdict:
    """Run the series -> package -> attributes chain for one handler.

    Never raises: empty extractions and undecodable attributes give a
    negative verdict.
    """
    checks: list[CheckResult] = []

    def fail(stage: Stage, detail: str) -> EquivalenceVerdict:
        checks.append(CheckResult(stage, False, detail))
        logger.debug(f"{handler.handler_id}: {original} -> {replacement} fails at {stage}: {detail}")
        return EquivalenceVerdict(False, tuple(checks))

    if not original or not replacement:
        return fail("series", "empty part number")

    # Stage 1: series
    orig_series = handler.extract_series(original)
    repl_series = handler.extract_series(replacement)
    if not orig_series or not repl_series:
        missing = original if not orig_series else replacement
        return fail("series", f"series not decodable from {missing}")
    if not handler.series_compatible(orig_series, repl_series):
        return fail("series", f"{repl_series} cannot replace {orig_series}")
    checks.append(CheckResult("series", True, f"{orig_series} -> {repl_series}"))

    # Stage 2: package
    orig_pkg = handler.extract_package_code(original)
    repl_pkg = handler.extract_package_code(replacement)
    if not orig_pkg or not repl_pkg:
        missing = original if not orig_pkg else replacement
        return fail("package", f"package not decodable from {missing}")
    if not handler.packages_compatible(orig_pkg, repl_pkg):
        return fail("package", f"{repl_pkg} is not compatible with {orig_pkg}")
    checks.append(CheckResult("package", True, f"{orig_pkg} -> {repl_pkg}"))

    # Stage 3: attributes
    result = compare_attributes(
        handler.rules_for(orig_series),
        handler.decode_attributes(original),
        handler.decode_attributes(replacement),
    )
    checks.append(result)
    if not result.passed:
        logger.debug(f"{handler.handler_id}: {original} -> {replacement} fails at attributes: {result.detail}")
    return EquivalenceVerdict(result.passed, tuple(checks))
