# ecovoice/tips.py
from .schemas import ActivityRecord, Category, Notice

ZERO_EMISSION_MODES = {"bicycle", "walking"}
PLANT_BASED_FOODS = {"vegan", "vegetarian"}


def encouragement_for(record: ActivityRecord) -> str:
    if record.category is Category.transport:
        if record.subtype in ZERO_EMISSION_MODES:
            return "Great eco-choice! Zero emissions transport! 🚴‍♀️"
        return "Consider trying public transport or cycling next time! 🌱"
    if record.category is Category.energy:
        return "Every bit of energy tracking helps! Try LED bulbs to reduce usage! 💡"
    if record.category is Category.food:
        if record.subtype in PLANT_BASED_FOODS:
            return "Awesome plant-based choice! 🌱"
        return "Plant-based meals can reduce your food footprint by up to 70%! 🥗"
    if record.category is Category.waste:
        return "Good job tracking waste! Recycling makes a difference! ♻️"
    return "Great job tracking your footprint!"


def logged_notice(record: ActivityRecord) -> Notice:
    """Confirmation shown after a form submission."""
    co2 = f"{record.co2_kg:.1f} kg CO₂"
    qty = f"{record.quantity:g}"
    if record.category is Category.transport:
        title, desc = "Transport Activity Logged", f"{qty}km by {record.subtype} = {co2}"
    elif record.category is Category.energy:
        title, desc = "Energy Activity Logged", f"{qty} units of {record.subtype} = {co2}"
    elif record.category is Category.food:
        title, desc = "Food Activity Logged", f"{qty} portion(s) of {record.subtype} = {co2}"
    else:
        title, desc = "Waste Activity Logged", f"{qty}kg of {record.subtype} waste = {co2}"
    return Notice(title=title, description=desc)
