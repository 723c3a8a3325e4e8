# ecovoice/estimator.py
from typing import Optional, Union

from .factors import (
    DEFAULT_FACTORS,
    ENERGY_FACTORS,
    FOOD_FACTORS,
    TRANSPORT_FACTORS,
    UNITS,
    WASTE_FACTORS,
)
from .schemas import Category


def _transport_factor(mode, fuel):
    factor = TRANSPORT_FACTORS.get(mode, {}).get(fuel)
    return DEFAULT_FACTORS["transport"] if factor is None else factor


def _table_factor(table, category, subtype):
    factor = table.get(subtype)
    return DEFAULT_FACTORS[category] if factor is None else factor


def lookup_factor(category: Union[Category, str], subtype: str, secondary_key: Optional[str] = None) -> float:
    """Coefficient for a category/subtype, or the category fallback when unmapped."""
    category = Category(category)
    if category is Category.transport:
        return _transport_factor(subtype, secondary_key)
    if category is Category.energy:
        return _table_factor(ENERGY_FACTORS, "energy", subtype)
    if category is Category.food:
        return _table_factor(FOOD_FACTORS, "food", subtype)
    return _table_factor(WASTE_FACTORS, "waste", subtype)


def estimate(category: Union[Category, str], subtype: str, quantity: float, secondary_key: Optional[str] = None) -> float:
    """kg CO2 for ``quantity`` units of an activity.

    Pure: the result is always ``quantity * lookup_factor(...)``. Quantity is
    validated by the caller, never here.
    """
    return quantity * lookup_factor(category, subtype, secondary_key)


def calc_transport(mode, distance, fuel="petrol"):
    return estimate(Category.transport, mode, distance, fuel)


def calc_energy(usage, type_="electricity"):
    return estimate(Category.energy, type_, usage)


def calc_food(type_, portions=1):
    return estimate(Category.food, type_, portions)


def calc_waste(type_, weight):
    return estimate(Category.waste, type_, weight)


def factor_tables():
    return {
        "transport": {mode: dict(fuels) for mode, fuels in TRANSPORT_FACTORS.items()},
        "energy": dict(ENERGY_FACTORS),
        "food": dict(FOOD_FACTORS),
        "waste": dict(WASTE_FACTORS),
        "defaults": dict(DEFAULT_FACTORS),
        "units": dict(UNITS),
    }
