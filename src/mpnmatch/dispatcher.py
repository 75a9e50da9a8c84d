"""Dispatcher: routes part numbers to the handlers that own them.

Classification is a permissive union. Every candidate handler is asked
"is this MPN yours, as type T?" and every yes is kept; two handlers may
both claim a genuinely ambiguous string. identify() is the separate,
opt-in tie-break for callers that need one owner.

Lifecycle: handlers are registered, then initialize() builds and freezes
the pattern registry exactly once (thread-safe, double-checked). Every
query initializes lazily, so a fresh Dispatcher is usable immediately.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable

from .config import ENABLED_HANDLERS
from .equivalence import EquivalenceVerdict
from .errors import ConfigurationError, RegistryFrozenError, UnknownHandlerError
from .handlers import BUILTIN_HANDLERS, ManufacturerHandler
from .mpn import normalize_mpn
from .registry import PatternRegistry
from .taxonomy import ComponentType, Taxonomy, coerce_type, default_taxonomy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Claim:
    """One (handler, type) pair that accepted an MPN."""

    handler_id: str
    component_type: ComponentType

    def to_dict(self) -> dict[str, str]:
        return {"handler": self.handler_id, "type": str(self.component_type)}


class Dispatcher:
    """Owns the handler set, the taxonomy and the pattern registry."""

    def __init__(
        self,
        handlers: Iterable[ManufacturerHandler] = (),
        taxonomy: Taxonomy | None = None,
        registry: PatternRegistry | None = None,
    ):
        self._taxonomy = taxonomy if taxonomy is not None else default_taxonomy()
        self._registry = registry if registry is not None else PatternRegistry()
        self._handlers: dict[str, ManufacturerHandler] = {}
        self._initialized = False
        self._init_lock = threading.Lock()
        for handler in handlers:
            self.register_handler(handler)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def register_handler(self, handler: ManufacturerHandler) -> None:
        """Add a handler. Only allowed before initialize().

        Raises:
            RegistryFrozenError: dispatcher already initialized.
            ConfigurationError: handler has no id, or the id is taken.
        """
        if self._initialized:
            raise RegistryFrozenError(
                f"Dispatcher already initialized; cannot register '{handler.handler_id}'"
            )
        if not handler.handler_id:
            raise ConfigurationError(f"{type(handler).__name__} has no handler_id")
        if handler.handler_id in self._handlers:
            raise ConfigurationError(f"Duplicate handler id '{handler.handler_id}'")
        self._handlers[handler.handler_id] = handler
        logger.debug(f"Registered handler '{handler.handler_id}' ({handler.manufacturer})")

    def initialize(self) -> None:
        """Build the pattern registry from every handler and freeze it. Idempotent."""
        if self._initialized:
            return
        with self._init_lock:
            # Double-check after acquiring lock
            if self._initialized:
                return
            start = len(self._registry)
            try:
                for handler_id, handler in self._handlers.items():
                    self._load_handler(handler_id, handler)
            except Exception:
                # Undo partial registration
                self._registry.truncate(start)
                raise
            self._registry.freeze()
            self._initialized = True
            logger.info(
                f"Dispatcher ready: {len(self._handlers)} handlers, {len(self._registry)} patterns"
            )

    def _load_handler(self, handler_id: str, handler: ManufacturerHandler) -> None:
        handler.initialize_patterns(self._registry.view(handler_id))
        supported = handler.supported_types()
        stray = self._registry.types_for_handler(handler_id) - supported
        if stray:
            names = ", ".join(sorted(str(t) for t in stray))
            raise ConfigurationError(
                f"Handler '{handler_id}' registered patterns for unsupported types: {names}"
            )
        count = len(self._registry.entries(handler_id=handler_id))
        logger.info(f"Handler '{handler_id}' loaded: {count} patterns, {len(supported)} types")

    @property
    def initialized(self) -> bool:
        return self._initialized

    # =========================================================================
    # Classification
    # =========================================================================

    def classify(
        self, mpn: str | None, component_type: "ComponentType | str | None" = None
    ) -> frozenset[Claim]:
        """Every (handler, type) pair that claims `mpn`.

        With a type, only handlers supporting that type are asked. Without
        one, every handler is asked about each type it supports. An unknown
        type name or an empty MPN gives an empty set.
        """
        self.initialize()
        normalized = normalize_mpn(mpn)
        if not normalized:
            return frozenset()

        if component_type is not None:
            wanted = coerce_type(component_type)
            if wanted is None:
                logger.debug(f"Unknown component type {component_type!r}")
                return frozenset()
            candidates = [(h, (wanted,)) for h in self._handlers.values() if wanted in h.supported_types()]
        else:
            candidates = [(h, sorted(h.supported_types())) for h in self._handlers.values()]

        claims = set()
        for handler, types in candidates:
            view = self._registry.view(handler.handler_id)
            for t in types:
                if handler.classify(normalized, t, view):
                    claims.add(Claim(handler.handler_id, t))
        if not claims:
            logger.debug(f"No handler claims {normalized}")
        return frozenset(claims)

    def classify_types(self, mpn: str | None) -> frozenset[ComponentType]:
        """Component types claimed for `mpn`, across all handlers."""
        return frozenset(c.component_type for c in self.classify(mpn))

    def handlers_for(self, mpn: str | None) -> tuple[str, ...]:
        """Handler ids that claim `mpn`, in registration order."""
        claimed = {c.handler_id for c in self.classify(mpn)}
        return tuple(h for h in self._handlers if h in claimed)

    def identify(self, mpn: str | None) -> str | None:
        """Single canonical owner of `mpn`, or None.

        A handler claiming a manufacturer-specific type beats one that only
        claims generic types; remaining ties go to registration order.
        """
        claims = self.classify(mpn)
        if not claims:
            return None
        specific = {c.handler_id for c in claims if self._taxonomy.is_manufacturer_specific(c.component_type)}
        preferred = specific or {c.handler_id for c in claims}
        return next(h for h in self._handlers if h in preferred)

    # =========================================================================
    # Extraction
    # =========================================================================

    def handler(self, handler_id: str) -> ManufacturerHandler:
        """Look up a registered handler.

        Raises:
            UnknownHandlerError: no handler with that id.
        """
        handler = self._handlers.get((handler_id or "").strip().lower())
        if handler is None:
            raise UnknownHandlerError(handler_id, list(self._handlers))
        return handler

    def extract_series(self, mpn: str | None, handler_id: str) -> str | None:
        handler = self.handler(handler_id)
        normalized = normalize_mpn(mpn)
        if not normalized:
            return None
        return handler.extract_series(normalized) or None

    def extract_package_code(self, mpn: str | None, handler_id: str) -> str | None:
        handler = self.handler(handler_id)
        normalized = normalize_mpn(mpn)
        if not normalized:
            return None
        return handler.extract_package_code(normalized) or None

    def extract_attributes(self, mpn: str | None, handler_id: str | None = None) -> dict[str, Any]:
        """Series, package and decoded fields, via `handler_id` or the identified owner.

        Returns {} when no handler is given and none claims the MPN.
        """
        normalized = normalize_mpn(mpn)
        if not normalized:
            return {}
        if handler_id is None:
            handler_id = self.identify(normalized)
            if handler_id is None:
                return {}
        return self.handler(handler_id).extract_attributes(normalized)

    # =========================================================================
    # Equivalence
    # =========================================================================

    def explain_replacement(self, original: str | None, replacement: str | None, handler_id: str) -> EquivalenceVerdict:
        handler = self.handler(handler_id)
        self.initialize()
        return handler.check_replacement(normalize_mpn(original), normalize_mpn(replacement))

    def is_official_replacement(self, original: str | None, replacement: str | None, handler_id: str) -> bool:
        """Can `replacement` stand in for `original` under `handler_id`'s rules?"""
        return self.explain_replacement(original, replacement, handler_id).equivalent

    def is_replacement(self, original: str | None, replacement: str | None) -> bool:
        """Same as is_official_replacement, with the handler inferred.

        Parts owned by different manufacturers (or by none) are never
        replacements here.
        """
        owner = self.identify(original)
        if owner is None or owner != self.identify(replacement):
            return False
        return self.is_official_replacement(original, replacement, owner)

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def handler_ids(self) -> list[str]:
        return list(self._handlers)

    @property
    def taxonomy(self) -> Taxonomy:
        return self._taxonomy

    @property
    def registry(self) -> PatternRegistry:
        return self._registry


def build_dispatcher(enabled: list[str] | None = None) -> Dispatcher:
    """Dispatcher with the built-in handlers, optionally limited to `enabled` ids.

    Raises:
        UnknownHandlerError: an enabled id is not a built-in handler.
    """
    available = {cls.handler_id: cls for cls in BUILTIN_HANDLERS}
    if enabled:
        for handler_id in enabled:
            if handler_id not in available:
                raise UnknownHandlerError(handler_id, list(available))
        classes = [cls for cls in BUILTIN_HANDLERS if cls.handler_id in enabled]
    else:
        classes = list(BUILTIN_HANDLERS)
    return Dispatcher(cls() for cls in classes)


# Global instance with thread safety
_dispatcher: Dispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> Dispatcher:
    """Get or create the global dispatcher (thread-safe).

    The registry is built on the first query, so extra handlers can still
    be registered until then.
    """
    global _dispatcher
    if _dispatcher is None:
        with _dispatcher_lock:
            # Double-check locking pattern
            if _dispatcher is None:
                _dispatcher = build_dispatcher(ENABLED_HANDLERS)
    return _dispatcher


def reset_dispatcher() -> None:
    """Drop the global dispatcher so the next get_dispatcher() rebuilds it."""
    global _dispatcher
    with _dispatcher_lock:
        _dispatcher = None
