"""
Unit catalog for the converter.

Every unit carries ``to_base``: the value of one of that unit expressed in
its category's base unit. The catalog is built once at import time and is
read-only afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Mapping, Optional


class UnitCategory(StrEnum):
    LENGTH = "length"
    AREA = "area"
    VOLUME = "volume"
    ANGLE = "angle"


class UnitSystem(StrEnum):
    SI = "SI"
    IMPERIAL = "Imperial"


@dataclass(frozen=True)
class UnitDefinition:
    key: str
    name: str
    abbreviation: str
    system: UnitSystem
    to_base: float

    def __post_init__(self):
        if not self.to_base > 0:
            raise ValueError(f"Unit {self.key!r} must have a positive to_base")


@dataclass(frozen=True)
class CategoryDefinition:
    key: UnitCategory
    name: str
    base_name: str
    default_from_unit: str
    default_to_unit: str
    units: tuple[UnitDefinition, ...]

    def __post_init__(self):
        keys = [unit.key for unit in self.units]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate unit keys in category {self.key}")
        if sum(1 for unit in self.units if unit.to_base == 1) != 1:
            raise ValueError(f"Category {self.key} needs exactly one base unit")
        for default in (self.default_from_unit, self.default_to_unit):
            if default not in keys:
                raise ValueError(
                    f"Default unit {default!r} is not part of category {self.key}"
                )

    @property
    def base_unit(self) -> UnitDefinition:
        return next(unit for unit in self.units if unit.to_base == 1)

    def find(self, key: str) -> Optional[UnitDefinition]:
        for unit in self.units:
            if unit.key == key:
                return unit
        return None


def _si(key: str, name: str, abbreviation: str, to_base: float) -> UnitDefinition:
    return UnitDefinition(key, name, abbreviation, UnitSystem.SI, to_base)


def _imperial(
    key: str, name: str, abbreviation: str, to_base: float
) -> UnitDefinition:
    return UnitDefinition(key, name, abbreviation, UnitSystem.IMPERIAL, to_base)


LENGTH_UNITS = (
    _si("mm", "Millimeter", "mm", 0.001),
    _si("cm", "Centimeter", "cm", 0.01),
    _si("m", "Meter", "m", 1),
    _si("km", "Kilometer", "km", 1000),
    _imperial("in", "Inch", "in", 0.0254),
    _imperial("ft", "Foot", "ft", 0.3048),
    _imperial("yd", "Yard", "yd", 0.9144),
    _imperial("mi", "Mile", "mi", 1609.344),
)

AREA_UNITS = (
    _si("sqmm", "Square Millimeter", "mm²", 1e-6),
    _si("sqcm", "Square Centimeter", "cm²", 1e-4),
    _si("sqm", "Square Meter", "m²", 1),
    _si("ha", "Hectare", "ha", 10000),
    _si("sqkm", "Square Kilometer", "km²", 1e6),
    _imperial("sqin", "Square Inch", "in²", 0.00064516),
    _imperial("sqft", "Square Foot", "ft²", 0.09290304),
    _imperial("sqyd", "Square Yard", "yd²", 0.83612736),
    _imperial("ac", "Acre", "ac", 4046.8564224),
    _imperial("sqmi", "Square Mile", "mi²", 2589988.110336),
)

VOLUME_UNITS = (
    _si("ml", "Milliliter", "mL", 1e-6),
    _si("l", "Liter", "L", 0.001),
    _si("cum", "Cubic Meter", "m³", 1),
    _imperial("tsp", "Teaspoon", "tsp", 4.92892159375e-6),
    _imperial("tbsp", "Tablespoon", "tbsp", 1.478676478125e-5),
    _imperial("floz", "Fluid Ounce", "fl oz", 2.95735295625e-5),
    _imperial("cup", "Cup", "cup", 2.365882365e-4),
    _imperial("pt", "Pint", "pt", 4.73176473e-4),
    _imperial("qt", "Quart", "qt", 9.46352946e-4),
    _imperial("gal", "Gallon", "gal", 0.003785411784),
    _imperial("cuin", "Cubic Inch", "in³", 1.6387064e-5),
    _imperial("cuft", "Cubic Foot", "ft³", 0.028316846592),
    _imperial("cuyd", "Cubic Yard", "yd³", 0.764554857984),
)

# Angles have no imperial counterpart; all of them are listed as SI.
ANGLE_UNITS = (
    _si("deg", "Degree", "°", 1),
    _si("rad", "Radian", "rad", 180 / math.pi),
    _si("grad", "Gradian", "grad", 0.9),
    _si("arcmin", "Arcminute", "'", 1 / 60),
    _si("arcsec", "Arcsecond", '"', 1 / 3600),
    _si("turn", "Turn", "rev", 360),
)


class UnitRegistry:
    """Read-only lookup over a fixed set of categories."""

    def __init__(self, categories: tuple[CategoryDefinition, ...]):
        self._categories: Mapping[UnitCategory, CategoryDefinition] = (
            MappingProxyType({category.key: category for category in categories})
        )
        missing = set(UnitCategory) - set(self._categories)
        if missing:
            raise ValueError(f"Missing unit categories: {sorted(missing)}")

    def categories(self) -> tuple[CategoryDefinition, ...]:
        return tuple(self._categories.values())

    def get_category(self, key: UnitCategory | str) -> CategoryDefinition:
        """
        Return the category for ``key``. Raises ValueError for keys outside
        the closed set of categories.
        """
        return self._categories[UnitCategory(key)]

    def find_unit(
        self, category: UnitCategory | str, key: str
    ) -> Optional[UnitDefinition]:
        return self.get_category(category).find(key)

    def units_by_system(
        self, category: UnitCategory | str
    ) -> dict[UnitSystem, tuple[UnitDefinition, ...]]:
        units = self.get_category(category).units
        return {
            system: tuple(unit for unit in units if unit.system == system)
            for system in UnitSystem
        }


REGISTRY = UnitRegistry(
    (
        CategoryDefinition(
            key=UnitCategory.LENGTH,
            name="Length",
            base_name="meter",
            default_from_unit="ft",
            default_to_unit="m",
            units=LENGTH_UNITS,
        ),
        CategoryDefinition(
            key=UnitCategory.AREA,
            name="Area",
            base_name="square meter",
            default_from_unit="sqft",
            default_to_unit="sqm",
            units=AREA_UNITS,
        ),
        CategoryDefinition(
            key=UnitCategory.VOLUME,
            name="Volume",
            base_name="cubic meter",
            default_from_unit="gal",
            default_to_unit="l",
            units=VOLUME_UNITS,
        ),
        CategoryDefinition(
            key=UnitCategory.ANGLE,
            name="Angle",
            base_name="degree",
            default_from_unit="deg",
            default_to_unit="rad",
            units=ANGLE_UNITS,
        ),
    )
)


def get_category(key: UnitCategory | str) -> CategoryDefinition:
    return REGISTRY.get_category(key)


def find_unit(category: UnitCategory | str, key: str) -> Optional[UnitDefinition]:
    return REGISTRY.find_unit(category, key)
