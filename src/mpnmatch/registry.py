"""Pattern registry: typed, per-handler match rules.

Handlers register (component type -> regex) entries once at startup. The
registry is then frozen and only read. Two lookup flavours exist:

- matches(): any handler's entry for the type matches (generic check)
- matches_for_handler(): only the named handler's entries count (scoped)

The scoped form keeps one vendor's broad prefix patterns from claiming
another vendor's part numbers.
"""

import logging
import re
from dataclasses import dataclass

from .errors import PatternCompileError, RegistryFrozenError
from .taxonomy import ComponentType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternEntry:
    handler_id: str
    component_type: ComponentType
    pattern: re.Pattern
    order: int

    def matches(self, mpn: str) -> bool:
        return self.pattern.fullmatch(mpn) is not None


class PatternRegistry:
    """Registration-ordered store of PatternEntry objects.

    Entries are indexed by type and by (handler, type) so lookups never scan
    the whole registry. Full-match, case-insensitive semantics.
    """

    def __init__(self):
        self._entries: list[PatternEntry] = []
        self._by_type: dict[ComponentType, list[PatternEntry]] = {}
        self._by_handler_type: dict[tuple[str, ComponentType], list[PatternEntry]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, handler_id: str, component_type: ComponentType, pattern: str) -> PatternEntry:
        """Compile and store one entry.

        Raises:
            RegistryFrozenError: called after freeze().
            PatternCompileError: pattern is not a valid regular expression.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Pattern registry is frozen; handler '{handler_id}' cannot add {pattern!r}"
            )
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise PatternCompileError(handler_id, str(component_type), pattern, str(e)) from e

        entry = PatternEntry(handler_id, component_type, compiled, len(self._entries))
        self._entries.append(entry)
        self._by_type.setdefault(component_type, []).append(entry)
        self._by_handler_type.setdefault((handler_id, component_type), []).append(entry)
        return entry

    def truncate(self, size: int) -> None:
        """Drop every entry registered after the first `size`.

        Raises:
            RegistryFrozenError: called after freeze().
        """
        if self._frozen:
            raise RegistryFrozenError("Pattern registry is frozen; cannot truncate")
        kept = self._entries[:size]
        self._entries = []
        self._by_type = {}
        self._by_handler_type = {}
        for entry in kept:
            self._entries.append(entry)
            self._by_type.setdefault(entry.component_type, []).append(entry)
            self._by_handler_type.setdefault((entry.handler_id, entry.component_type), []).append(entry)

    def matches(self, mpn: str, component_type: ComponentType) -> bool:
        """True if any handler's entry for `component_type` matches `mpn`."""
        if not mpn:
            return False
        return any(e.matches(mpn) for e in self._by_type.get(component_type, ()))

    def matches_for_handler(self, handler_id: str, mpn: str, component_type: ComponentType) -> bool:
        """True if one of `handler_id`'s own entries for `component_type` matches."""
        if not mpn:
            return False
        return any(
            e.matches(mpn) for e in self._by_handler_type.get((handler_id, component_type), ())
        )

    def pattern_for(self, component_type: ComponentType) -> re.Pattern | None:
        """First-registered pattern for the type, across all handlers."""
        entries = self._by_type.get(component_type)
        return entries[0].pattern if entries else None

    def pattern_for_handler(self, handler_id: str, component_type: ComponentType) -> re.Pattern | None:
        entries = self._by_handler_type.get((handler_id, component_type))
        return entries[0].pattern if entries else None

    def entries(
        self,
        handler_id: str | None = None,
        component_type: ComponentType | None = None,
    ) -> list[PatternEntry]:
        """Entries in registration order, optionally filtered."""
        if handler_id is not None and component_type is not None:
            return list(self._by_handler_type.get((handler_id, component_type), ()))
        if component_type is not None:
            return list(self._by_type.get(component_type, ()))
        if handler_id is not None:
            return [e for e in self._entries if e.handler_id == handler_id]
        return list(self._entries)

    def types_for_handler(self, handler_id: str) -> frozenset[ComponentType]:
        return frozenset(t for (h, t) in self._by_handler_type if h == handler_id)

    def handler_ids(self) -> list[str]:
        seen: dict[str, None] = {}
        for e in self._entries:
            seen.setdefault(e.handler_id)
        return list(seen)

    def view(self, handler_id: str) -> "RegistryView":
        return RegistryView(self, handler_id)

    def __len__(self) -> int:
        return len(self._entries)


class RegistryView:
    """A handler's window onto the shared registry.

    Writes are always attributed to the bound handler. Reads only see the
    handler's own entries; unscoped checks go through `registry`.
    """

    def __init__(self, registry: PatternRegistry, handler_id: str):
        self._registry = registry
        self.handler_id = handler_id

    def add(self, component_type: ComponentType, pattern: str) -> None:
        self._registry.register(self.handler_id, component_type, pattern)

    def add_all(self, component_types: tuple[ComponentType, ...], pattern: str) -> None:
        """Register the same pattern text under several types."""
        for component_type in component_types:
            self.add(component_type, pattern)

    def matches_own(self, mpn: str, component_type: ComponentType) -> bool:
        return self._registry.matches_for_handler(self.handler_id, mpn, component_type)

    def pattern_for(self, component_type: ComponentType) -> re.Pattern | None:
        return self._registry.pattern_for_handler(self.handler_id, component_type)

    @property
    def registry(self) -> PatternRegistry:
        return self._registry
