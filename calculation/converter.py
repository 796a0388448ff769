"""
State of the unit converter panel.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace

from calculation.conversion import convert
from calculation.formatting import format_result, parse_float
from calculation.units import (
    REGISTRY,
    CategoryDefinition,
    UnitCategory,
    UnitDefinition,
)

DEFAULT_INPUT = "1"

ANGLE_REFERENCE_VALUES = (1, 15, 30, 45, 90, 180, 360)
REFERENCE_VALUES = (0.1, 0.5, 1, 5, 10, 50, 100, 1000)

# Digits, one optional leading minus and at most one decimal point.
_INPUT_PATTERN = re.compile(r"^-?\d*\.?\d*$")


def accepts_input(text: str) -> bool:
    return text in ("", "-") or bool(_INPUT_PATTERN.fullmatch(text))


@dataclass(frozen=True)
class ReferenceRow:
    input: float
    output: str


@dataclass(frozen=True)
class ConverterSession:
    category: UnitCategory = UnitCategory.LENGTH
    from_unit: str = "ft"
    to_unit: str = "m"
    input_value: str = DEFAULT_INPUT

    @classmethod
    def for_category(cls, key: UnitCategory | str) -> "ConverterSession":
        cat = REGISTRY.get_category(key)
        return cls(
            category=cat.key,
            from_unit=cat.default_from_unit,
            to_unit=cat.default_to_unit,
        )

    @property
    def definition(self) -> CategoryDefinition:
        return REGISTRY.get_category(self.category)

    @property
    def source(self) -> UnitDefinition | None:
        return self.definition.find(self.from_unit)

    @property
    def target(self) -> UnitDefinition | None:
        return self.definition.find(self.to_unit)

    def change_category(self, key: UnitCategory | str) -> "ConverterSession":
        return ConverterSession.for_category(key)

    def swap(self) -> "ConverterSession":
        return replace(self, from_unit=self.to_unit, to_unit=self.from_unit)

    def reset(self) -> "ConverterSession":
        return ConverterSession.for_category(self.category)

    def select_units(
        self, from_unit: str | None = None, to_unit: str | None = None
    ) -> "ConverterSession":
        return replace(
            self,
            from_unit=from_unit if from_unit is not None else self.from_unit,
            to_unit=to_unit if to_unit is not None else self.to_unit,
        )

    def set_input(self, text: str) -> "ConverterSession":
        """Accept ``text`` if it passes the input filter; otherwise keep the session."""
        if not accepts_input(text):
            return self
        return replace(self, input_value=text)

    @property
    def result(self) -> str:
        """Formatted conversion of the current input, or "" while it is incomplete."""
        value = parse_float(self.input_value)
        if math.isnan(value):
            return ""
        return format_result(
            convert(value, self.from_unit, self.to_unit, self.category)
        )

    @property
    def hint(self) -> str:
        source, target = self.source, self.target
        if source is None or target is None:
            return ""
        one = format_result(convert(1, self.from_unit, self.to_unit, self.category))
        return f"1 {source.abbreviation} = {one} {target.abbreviation}"

    def quick_reference(self) -> list[ReferenceRow]:
        source, target = self.source, self.target
        if source is None or target is None or source.key == target.key:
            return []
        values = (
            ANGLE_REFERENCE_VALUES
            if self.category == UnitCategory.ANGLE
            else REFERENCE_VALUES
        )
        rows = []
        for value in values:
            output = convert(value, self.from_unit, self.to_unit, self.category)
            if math.isfinite(output):
                rows.append(ReferenceRow(input=value, output=format_result(output)))
        return rows
