"""Component type taxonomy.

Every type is either a generic kind (RESISTOR, MICROCONTROLLER, ...) or a
manufacturer-specific kind that narrows exactly one generic kind
(MICROCONTROLLER_ATMEL -> MICROCONTROLLER). The relation is stored as a
plain mapping and is at most one level deep.
"""

import logging
import threading
from enum import Enum

from .errors import RegistryFrozenError, TaxonomyError

logger = logging.getLogger(__name__)


class ComponentType(str, Enum):
    # Generic kinds
    RESISTOR = "RESISTOR"
    CAPACITOR = "CAPACITOR"
    INDUCTOR = "INDUCTOR"
    DIODE = "DIODE"
    TRANSISTOR = "TRANSISTOR"
    MOSFET = "MOSFET"
    LED = "LED"
    IC = "IC"
    MICROCONTROLLER = "MICROCONTROLLER"
    MEMORY = "MEMORY"
    OPAMP = "OPAMP"
    VOLTAGE_REGULATOR = "VOLTAGE_REGULATOR"
    CRYSTAL = "CRYSTAL"
    OSCILLATOR = "OSCILLATOR"
    CONNECTOR = "CONNECTOR"

    # Atmel
    MICROCONTROLLER_ATMEL = "MICROCONTROLLER_ATMEL"
    MEMORY_ATMEL = "MEMORY_ATMEL"
    TOUCH_ATMEL = "TOUCH_ATMEL"
    CRYPTO_ATMEL = "CRYPTO_ATMEL"

    # Microchip
    MICROCONTROLLER_MICROCHIP = "MICROCONTROLLER_MICROCHIP"
    MEMORY_MICROCHIP = "MEMORY_MICROCHIP"

    # ST
    MICROCONTROLLER_ST = "MICROCONTROLLER_ST"
    MEMORY_ST = "MEMORY_ST"
    OPAMP_ST = "OPAMP_ST"
    VOLTAGE_REGULATOR_LINEAR_ST = "VOLTAGE_REGULATOR_LINEAR_ST"

    # TI
    MICROCONTROLLER_TI = "MICROCONTROLLER_TI"
    OPAMP_TI = "OPAMP_TI"
    VOLTAGE_REGULATOR_LINEAR_TI = "VOLTAGE_REGULATOR_LINEAR_TI"

    # Passives
    CAPACITOR_CERAMIC_MURATA = "CAPACITOR_CERAMIC_MURATA"
    INDUCTOR_CHIP_MURATA = "INDUCTOR_CHIP_MURATA"
    CAPACITOR_CERAMIC_SAMSUNG = "CAPACITOR_CERAMIC_SAMSUNG"
    CAPACITOR_CERAMIC_AVX = "CAPACITOR_CERAMIC_AVX"
    RESISTOR_CHIP_YAGEO = "RESISTOR_CHIP_YAGEO"
    CAPACITOR_CERAMIC_YAGEO = "CAPACITOR_CERAMIC_YAGEO"
    CAPACITOR_ELECTROLYTIC_NICHICON = "CAPACITOR_ELECTROLYTIC_NICHICON"

    # Timing
    CRYSTAL_ABRACON = "CRYSTAL_ABRACON"
    OSCILLATOR_ABRACON = "OSCILLATOR_ABRACON"

    def __str__(self) -> str:
        return self.value


# specific -> base
_SPECIALIZATIONS: dict[ComponentType, ComponentType] = {
    ComponentType.MICROCONTROLLER_ATMEL: ComponentType.MICROCONTROLLER,
    ComponentType.MEMORY_ATMEL: ComponentType.MEMORY,
    ComponentType.TOUCH_ATMEL: ComponentType.IC,
    ComponentType.CRYPTO_ATMEL: ComponentType.IC,
    ComponentType.MICROCONTROLLER_MICROCHIP: ComponentType.MICROCONTROLLER,
    ComponentType.MEMORY_MICROCHIP: ComponentType.MEMORY,
    ComponentType.MICROCONTROLLER_ST: ComponentType.MICROCONTROLLER,
    ComponentType.MEMORY_ST: ComponentType.MEMORY,
    ComponentType.OPAMP_ST: ComponentType.OPAMP,
    ComponentType.VOLTAGE_REGULATOR_LINEAR_ST: ComponentType.VOLTAGE_REGULATOR,
    ComponentType.MICROCONTROLLER_TI: ComponentType.MICROCONTROLLER,
    ComponentType.OPAMP_TI: ComponentType.OPAMP,
    ComponentType.VOLTAGE_REGULATOR_LINEAR_TI: ComponentType.VOLTAGE_REGULATOR,
    ComponentType.CAPACITOR_CERAMIC_MURATA: ComponentType.CAPACITOR,
    ComponentType.INDUCTOR_CHIP_MURATA: ComponentType.INDUCTOR,
    ComponentType.CAPACITOR_CERAMIC_SAMSUNG: ComponentType.CAPACITOR,
    ComponentType.CAPACITOR_CERAMIC_AVX: ComponentType.CAPACITOR,
    ComponentType.RESISTOR_CHIP_YAGEO: ComponentType.RESISTOR,
    ComponentType.CAPACITOR_CERAMIC_YAGEO: ComponentType.CAPACITOR,
    ComponentType.CAPACITOR_ELECTROLYTIC_NICHICON: ComponentType.CAPACITOR,
    ComponentType.CRYSTAL_ABRACON: ComponentType.CRYSTAL,
    ComponentType.OSCILLATOR_ABRACON: ComponentType.OSCILLATOR,
}


class Taxonomy:
    """The specific -> base relation between component types.

    Mutable only until freeze(); every read after that is a dict lookup.
    """

    def __init__(self, specializations: dict[ComponentType, ComponentType] | None = None):
        self._base: dict[ComponentType, ComponentType] = {}
        self._frozen = False
        for specific, base in (specializations or {}).items():
            self.add(specific, base)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, specific: ComponentType, base: ComponentType) -> None:
        """Declare that `specific` narrows `base`.

        Raises:
            RegistryFrozenError: taxonomy already frozen.
            TaxonomyError: the pair would create a self-loop, a cycle, a
                chain deeper than one level, or re-base an existing type.
        """
        if self._frozen:
            raise RegistryFrozenError(f"Taxonomy is frozen, cannot add {specific} -> {base}")
        if specific == base:
            raise TaxonomyError(f"{specific} cannot specialize itself")

        existing = self._base.get(specific)
        if existing == base:
            return
        if existing is not None:
            raise TaxonomyError(f"{specific} already specializes {existing}, cannot re-base to {base}")
        if base in self._base:
            raise TaxonomyError(
                f"{base} is itself a specialization of {self._base[base]}; "
                f"base types cannot have a base"
            )
        if specific in self._base.values():
            raise TaxonomyError(
                f"{specific} is already a base type; a base cannot specialize another type"
            )
        self._base[specific] = base

    def freeze(self) -> None:
        self._frozen = True

    def base_type_of(self, component_type: ComponentType) -> ComponentType | None:
        return self._base.get(component_type)

    def is_specialization_of(self, specific: ComponentType, general: ComponentType) -> bool:
        """True if `specific` is `general` or directly narrows it."""
        if specific == general:
            return True
        return self._base.get(specific) == general

    def is_manufacturer_specific(self, component_type: ComponentType) -> bool:
        return component_type in self._base

    def specializations_of(self, base: ComponentType) -> frozenset[ComponentType]:
        return frozenset(s for s, b in self._base.items() if b == base)

    def generic_types(self) -> list[ComponentType]:
        return [t for t in ComponentType if t not in self._base]


_default: Taxonomy | None = None
_default_lock = threading.Lock()


def default_taxonomy() -> Taxonomy:
    """Get the process-wide taxonomy (built and frozen on first use)."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                taxonomy = Taxonomy(_SPECIALIZATIONS)
                taxonomy.freeze()
                logger.debug(f"Taxonomy ready: {len(_SPECIALIZATIONS)} specializations")
                _default = taxonomy
    return _default


def coerce_type(value: "ComponentType | str | None") -> ComponentType | None:
    """Accept a ComponentType or its name (any case). Unknown names -> None."""
    if value is None or isinstance(value, ComponentType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ComponentType(value.strip().upper())
    except ValueError:
        return None
