"""Built-in manufacturer handlers.

Handlers register in handler_id order, which is also the order the
dispatcher uses to break ties between overlapping claims.
"""

from .abracon import AbraconHandler
from .atmel import AtmelHandler
from .avx import AVXHandler
from .base import ManufacturerHandler
from .microchip import MicrochipHandler
from .murata import MurataHandler
from .nichicon import NichiconHandler
from .samsung import SamsungHandler
from .st import STHandler
from .ti import TIHandler
from .yageo import YageoHandler

BUILTIN_HANDLERS: tuple[type[ManufacturerHandler], ...] = tuple(
    sorted(
        (
            AbraconHandler,
            AtmelHandler,
            AVXHandler,
            MicrochipHandler,
            MurataHandler,
            NichiconHandler,
            SamsungHandler,
            STHandler,
            TIHandler,
            YageoHandler,
        ),
        key=lambda cls: cls.handler_id,
    )
)

__all__ = [
    "BUILTIN_HANDLERS",
    "ManufacturerHandler",
    "AbraconHandler",
    "AtmelHandler",
    "AVXHandler",
    "MicrochipHandler",
    "MurataHandler",
    "NichiconHandler",
    "SamsungHandler",
    "STHandler",
    "TIHandler",
    "YageoHandler",
]
