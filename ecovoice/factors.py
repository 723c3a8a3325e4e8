# ecovoice/factors.py
# Emission factors in kg CO2 per unit of activity quantity.
from types import MappingProxyType

# transport: (mode -> fuel -> kg per km)
TRANSPORT_FACTORS = MappingProxyType({
    "car": MappingProxyType({"petrol": 0.23, "diesel": 0.27, "electric": 0.05}),
    "bus": MappingProxyType({"diesel": 0.08}),
    "train": MappingProxyType({"electric": 0.04}),
    "motorcycle": MappingProxyType({"petrol": 0.18}),
    "bicycle": MappingProxyType({"none": 0.0}),
    "walking": MappingProxyType({"none": 0.0}),
})

# energy: per kWh / m3 / litre
ENERGY_FACTORS = MappingProxyType({
    "electricity": 0.5,
    "gas": 0.2,
    "heating": 0.3,
})

# food: per portion
FOOD_FACTORS = MappingProxyType({
    "beef": 27.0,
    "lamb": 20.0,
    "pork": 12.0,
    "chicken": 6.9,
    "fish": 6.1,
    "vegetarian": 3.8,
    "vegan": 2.3,
})

# waste: per kg
WASTE_FACTORS = MappingProxyType({
    "general": 0.5,
    "plastic": 3.4,
    "food": 0.3,
    "paper": 0.9,
    "glass": 0.2,
})

DEFAULT_FACTORS = MappingProxyType({
    "transport": 0.2,
    "energy": 0.5,
    "food": 5.0,
    "waste": 0.5,
})

UNITS = MappingProxyType({
    "transport": "km",
    "energy": "unit",
    "food": "portion",
    "waste": "kg",
})

TRANSPORT_FUELS = ("petrol", "diesel", "electric", "none")

# fixed meal values used by voice logging, independent of FOOD_FACTORS
VOICE_MEAL_CO2 = MappingProxyType({
    "meat": 2.5,
    "vegetarian": 0.8,
    "mixed": 1.5,
})
