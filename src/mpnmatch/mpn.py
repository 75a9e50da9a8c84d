"""MPN normalization."""

from dataclasses import dataclass, field

from .config import MAX_MPN_LENGTH


def normalize_mpn(raw: str | None) -> str:
    """Trim and uppercase. None, non-strings and over-long input give ''."""
    if not raw or not isinstance(raw, str):
        return ""
    mpn = raw.strip().upper()
    if len(mpn) > MAX_MPN_LENGTH:
        return ""
    return mpn


@dataclass(frozen=True)
class MPN:
    raw: str | None
    normalized: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "normalized", normalize_mpn(self.raw))

    def __bool__(self) -> bool:
        return bool(self.normalized)

    def __str__(self) -> str:
        return self.normalized
