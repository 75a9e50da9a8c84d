"""Exception types for mpnmatch.

Only configuration problems raise. A part number that nothing recognises,
a field that can't be decoded, or an undecidable replacement check are
normal outcomes and come back as empty values or False.
"""


class ConfigurationError(Exception):
    """Handler or taxonomy setup is broken. Fatal at startup."""


class PatternCompileError(ConfigurationError):
    """A handler registered a pattern that does not compile."""

    def __init__(self, handler_id: str, component_type: str, pattern: str, reason: str):
        self.handler_id = handler_id
        self.component_type = component_type
        self.pattern = pattern
        super().__init__(
            f"Handler '{handler_id}' registered invalid pattern {pattern!r} "
            f"for {component_type}: {reason}"
        )


class TaxonomyError(ConfigurationError):
    """The base-type relation would become cyclic or deeper than one level."""


class RegistryFrozenError(ConfigurationError):
    """Mutation attempted after initialization finished."""


class UnknownHandlerError(LookupError):
    """Caller asked for a handler id that is not registered."""

    def __init__(self, handler_id: str, known: list[str] | None = None):
        self.handler_id = handler_id
        msg = f"Unknown handler '{handler_id}'"
        if known:
            msg += f" (known: {', '.join(known)})"
        super().__init__(msg)
