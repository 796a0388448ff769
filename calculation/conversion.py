"""
Unit conversion through a category's base unit.
"""

from __future__ import annotations

import math

from calculation.units import REGISTRY, UnitCategory, UnitRegistry


def convert(
    value: float,
    from_key: str,
    to_key: str,
    category: UnitCategory | str,
    registry: UnitRegistry = REGISTRY,
) -> float:
    """
    Convert ``value`` from one unit to another within ``category``.

    Returns ``nan`` when either unit key is unknown to the category; callers
    render that as "Error" through ``format_result``.
    """
    cat = registry.get_category(category)
    from_unit = cat.find(from_key)
    to_unit = cat.find(to_key)
    if from_unit is None or to_unit is None:
        return math.nan
    if from_unit is to_unit:
        return value
    return value * from_unit.to_base / to_unit.to_base
