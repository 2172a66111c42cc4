"""Static unit tables, converter presets and the badge catalog."""
from dataclasses import dataclass
from typing import Optional

from unit_tutor.models import Badge, Category, Unit, UnitKind

UNITS = {
    Category.LENGTH: (
        Unit("Meters", "m", UnitKind.METERS),
        Unit("Kilometers", "km", UnitKind.KILOMETERS),
        Unit("Centimeters", "cm", UnitKind.CENTIMETERS),
        Unit("Millimeters", "mm", UnitKind.MILLIMETERS),
        Unit("Inches", "in", UnitKind.INCHES),
        Unit("Feet", "ft", UnitKind.FEET),
        Unit("Miles", "mi", UnitKind.MILES),
    ),
    Category.MASS: (
        Unit("Grams", "g", UnitKind.GRAMS),
        Unit("Kilograms", "kg", UnitKind.KILOGRAMS),
        Unit("Pounds", "lb", UnitKind.POUNDS),
        Unit("Ounces", "oz", UnitKind.OUNCES),
    ),
    Category.TEMPERATURE: (
        Unit("Celsius", "°C", UnitKind.CELSIUS),
        Unit("Fahrenheit", "°F", UnitKind.FAHRENHEIT),
        Unit("Kelvin", "K", UnitKind.KELVIN),
    ),
    Category.VOLUME: (
        Unit("Liters", "L", UnitKind.LITERS),
        Unit("Milliliters", "mL", UnitKind.MILLILITERS),
        Unit("Cups (US)", "cup", UnitKind.CUPS),
        Unit("Tablespoons (US)", "tbsp", UnitKind.TABLESPOONS),
        Unit("Teaspoons (US)", "tsp", UnitKind.TEASPOONS),
        Unit("Gallons (US)", "gal", UnitKind.GALLONS),
    ),
    Category.SPEED: (
        Unit("Meters per second", "m/s", UnitKind.METERS_PER_SECOND),
        Unit("Kilometers per hour", "km/h", UnitKind.KILOMETERS_PER_HOUR),
        Unit("Miles per hour", "mph", UnitKind.MILES_PER_HOUR),
        Unit("Knots", "kn", UnitKind.KNOTS),
    ),
}


@dataclass(frozen=True)
class Preset:
    value: str
    from_symbol: str
    to_symbol: str

    @property
    def description(self) -> str:
        return f"{self.value} {self.from_symbol} to {self.to_symbol}"


PRESETS = {
    Category.LENGTH: (Preset("1", "km", "m"), Preset("5", "mi", "km"), Preset("12", "in", "cm")),
    Category.MASS: (Preset("1", "kg", "lb"), Preset("8", "oz", "g"), Preset("2.5", "lb", "kg")),
    Category.TEMPERATURE: (Preset("32", "°F", "°C"), Preset("100", "°C", "°F"), Preset("0", "°C", "K")),
    Category.VOLUME: (Preset("3", "L", "mL"), Preset("2", "cup", "mL"), Preset("1", "gal", "L")),
    Category.SPEED: (Preset("60", "mph", "km/h"), Preset("100", "km/h", "mph"), Preset("10", "m/s", "km/h")),
}

BADGES = (
    Badge(
        id="quick_thinker",
        name="Quick Thinker",
        description="Complete a daily practice set in under 60 seconds",
        icon="brain.head.profile",
        requirement="Complete daily set < 60s",
    ),
    Badge(
        id="thermo_tamer",
        name="Thermo Tamer",
        description="Master temperature conversions with 100% accuracy",
        icon="thermometer",
        requirement="100% accuracy on temperature tasks",
    ),
    Badge(
        id="speed_devil",
        name="Speed Devil",
        description="Complete a daily practice set in under 90 seconds",
        icon="speedometer",
        requirement="Complete daily set < 90s",
    ),
    Badge(
        id="volume_virtuoso",
        name="Volume Virtuoso",
        description="Perfect score on 5 volume conversion tasks",
        icon="drop.fill",
        requirement="5 perfect volume conversions",
    ),
    Badge(
        id="streak_starter",
        name="Streak Starter",
        description="Maintain a 3-day practice streak",
        icon="flame.fill",
        requirement="3-day streak",
    ),
    Badge(
        id="streak_master",
        name="Streak Master",
        description="Maintain a 7-day practice streak",
        icon="flame.circle.fill",
        requirement="7-day streak",
    ),
    Badge(
        id="game_champion",
        name="Game Champion",
        description="Score 15+ points in Unit Dash",
        icon="trophy.fill",
        requirement="Score 15+ in Unit Dash",
    ),
    Badge(
        id="precision_pro",
        name="Precision Pro",
        description="Get 10 conversions correct in a row",
        icon="target",
        requirement="10 correct in a row",
    ),
)


def units_for(category: Category) -> tuple:
    units = UNITS[category]
    if len(units) < 2:
        raise ValueError(f"Category {category.value} needs at least two units")
    return units


def default_pair(category: Category) -> tuple:
    units = units_for(category)
    return units[0], units[1]


def other_unit(unit: Unit) -> Unit:
    """First unit of the same category with a different name."""
    for candidate in units_for(unit.category):
        if candidate.name != unit.name:
            return candidate
    raise ValueError(f"No alternative unit for {unit.name}")


def find_unit(text: str, category: Optional[Category] = None) -> Optional[Unit]:
    """Look a unit up by exact symbol, falling back to a case-insensitive name match."""
    categories = [category] if category else list(Category)
    candidates = [u for c in categories for u in UNITS[c]]
    for unit in candidates:
        if unit.symbol == text:
            return unit
    needle = text.lower()
    for unit in candidates:
        if needle in unit.name.lower():
            return unit
    return None
