"""Manufacturer part number classification and replacement checking.

Module-level functions use the process-wide dispatcher (built-in handlers,
limited by MPNMATCH_HANDLERS). Build a Dispatcher directly for a custom
handler set.
"""

from typing import Any

__version__ = "0.3.0"

from .dispatcher import Claim, Dispatcher, build_dispatcher, get_dispatcher, reset_dispatcher
from .equivalence import AttributeRule, CheckResult, EquivalenceVerdict
from .errors import (
    ConfigurationError,
    PatternCompileError,
    RegistryFrozenError,
    TaxonomyError,
    UnknownHandlerError,
)
from .handlers import ManufacturerHandler
from .taxonomy import ComponentType

__all__ = [
    "__version__",
    "AttributeRule",
    "CheckResult",
    "Claim",
    "ComponentType",
    "ConfigurationError",
    "Dispatcher",
    "EquivalenceVerdict",
    "ManufacturerHandler",
    "PatternCompileError",
    "RegistryFrozenError",
    "TaxonomyError",
    "UnknownHandlerError",
    "build_dispatcher",
    "classify",
    "extract_attributes",
    "extract_package_code",
    "extract_series",
    "get_dispatcher",
    "identify",
    "is_official_replacement",
    "register_handler",
    "reset_dispatcher",
]


def register_handler(handler: ManufacturerHandler) -> None:
    """Add a handler to the global dispatcher (before its first query)."""
    get_dispatcher().register_handler(handler)


def classify(mpn: str | None, component_type: "ComponentType | str | None" = None) -> frozenset[Claim]:
    return get_dispatcher().classify(mpn, component_type)


def identify(mpn: str | None) -> str | None:
    return get_dispatcher().identify(mpn)


def extract_series(mpn: str | None, handler_id: str) -> str | None:
    return get_dispatcher().extract_series(mpn, handler_id)


def extract_package_code(mpn: str | None, handler_id: str) -> str | None:
    return get_dispatcher().extract_package_code(mpn, handler_id)


def extract_attributes(mpn: str | None, handler_id: str | None = None) -> dict[str, Any]:
    return get_dispatcher().extract_attributes(mpn, handler_id)


def is_official_replacement(original: str | None, replacement: str | None, handler_id: str) -> bool:
    return get_dispatcher().is_official_replacement(original, replacement, handler_id)
