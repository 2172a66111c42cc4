"""Unit conversion, result formatting and input validation."""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from unit_tutor.models import Category, Unit, UnitKind

logger = logging.getLogger(__name__)

ABSOLUTE_ZERO_C = -273.15

# (factor, divide): to base is value * factor, or value / factor when divide is set.
# Bases: meters, grams, milliliters, meters per second.
TO_BASE = {
    UnitKind.METERS: (1, False),
    UnitKind.KILOMETERS: (1000, False),
    UnitKind.CENTIMETERS: (100, True),
    UnitKind.MILLIMETERS: (1000, True),
    UnitKind.INCHES: (0.0254, False),
    UnitKind.FEET: (0.3048, False),
    UnitKind.MILES: (1609.344, False),

    UnitKind.GRAMS: (1, False),
    UnitKind.KILOGRAMS: (1000, False),
    UnitKind.POUNDS: (453.592, False),
    UnitKind.OUNCES: (28.3495, False),

    UnitKind.MILLILITERS: (1, False),
    UnitKind.LITERS: (1000, False),
    UnitKind.CUPS: (236.588, False),
    UnitKind.TABLESPOONS: (14.7868, False),
    UnitKind.TEASPOONS: (4.92892, False),
    UnitKind.GALLONS: (3785.41, False),

    UnitKind.METERS_PER_SECOND: (1, False),
    UnitKind.KILOMETERS_PER_HOUR: (3.6, True),
    UnitKind.MILES_PER_HOUR: (0.44704, False),
    UnitKind.KNOTS: (0.514444, False),
}


def _c_to_f(v):
    return v * 9 / 5 + 32


def _f_to_c(v):
    return (v - 32) * 5 / 9


def _c_to_k(v):
    return v + 273.15


def _k_to_c(v):
    return v - 273.15


TEMPERATURE_FORMULAS = {
    (UnitKind.CELSIUS, UnitKind.FAHRENHEIT): _c_to_f,
    (UnitKind.FAHRENHEIT, UnitKind.CELSIUS): _f_to_c,
    (UnitKind.CELSIUS, UnitKind.KELVIN): _c_to_k,
    (UnitKind.KELVIN, UnitKind.CELSIUS): _k_to_c,
    (UnitKind.FAHRENHEIT, UnitKind.KELVIN): lambda v: _c_to_k(_f_to_c(v)),
    (UnitKind.KELVIN, UnitKind.FAHRENHEIT): lambda v: _c_to_f(_k_to_c(v)),
}


def _to_base(value: float, kind: UnitKind) -> float:
    try:
        factor, divide = TO_BASE[kind]
    except KeyError:
        raise ValueError(f"No conversion factor defined for {kind.name}") from None
    return value / factor if divide else value * factor


def _from_base(value: float, kind: UnitKind) -> float:
    try:
        factor, divide = TO_BASE[kind]
    except KeyError:
        raise ValueError(f"No conversion factor defined for {kind.name}") from None
    return value * factor if divide else value / factor


def convert(value: float, from_unit: Unit, to_unit: Unit) -> Optional[float]:
    """Convert ``value`` between two units of one category.

    Returns None when the units belong to different categories. Identical units
    return ``value`` untouched.
    """
    if from_unit.category != to_unit.category:
        logger.debug("Incompatible conversion %s -> %s", from_unit.name, to_unit.name)
        return None
    if from_unit.kind is to_unit.kind:
        return value
    if from_unit.category is Category.TEMPERATURE:
        formula = TEMPERATURE_FORMULAS.get((from_unit.kind, to_unit.kind))
        if formula is None:
            raise ValueError(f"No temperature formula for {from_unit.name} -> {to_unit.name}")
        return formula(value)
    return _from_base(_to_base(value, from_unit.kind), to_unit.kind)


def format_result(value: float, unit: Unit) -> str:
    """Display string for a converted value.

    Temperatures always show two decimals. Everything else uses precision tiered by
    magnitude with trailing zeros trimmed.
    """
    if unit.category is Category.TEMPERATURE:
        return f"{value:.2f}"
    if abs(value) >= 1000:
        formatted = f"{value:.1f}"
    elif abs(value) >= 10:
        formatted = f"{value:.2f}"
    else:
        formatted = f"{value:.3f}"
    return formatted.rstrip("0").rstrip(".")


def format_value(value: float) -> str:
    """Question-text format: whole numbers without decimals, others with one."""
    if value % 1 == 0:
        return f"{value:.0f}"
    return f"{value:.1f}"


def is_valid_input(value: float, unit: Unit) -> bool:
    # Kelvin is checked against the Celsius value of absolute zero; kept as-is.
    if unit.kind is UnitKind.KELVIN:
        return value >= ABSOLUTE_ZERO_C
    return value >= 0


@dataclass(frozen=True)
class ConversionResult:
    value: Optional[float] = None
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_number(text: str) -> Optional[float]:
    try:
        value = float(text.strip())
    except (ValueError, AttributeError):
        return None
    if not math.isfinite(value):
        return None
    return value


def convert_text(text: str, from_unit: Unit, to_unit: Unit) -> ConversionResult:
    """Convert a value typed by the user, reporting problems as messages."""
    value = parse_number(text)
    if value is None:
        return ConversionResult(error="Please enter a valid number")
    if not is_valid_input(value, from_unit):
        if from_unit.kind is UnitKind.KELVIN:
            return ConversionResult(error="Temperature cannot be below absolute zero")
        return ConversionResult(error="Value cannot be negative")
    converted = convert(value, from_unit, to_unit)
    if converted is None:
        return ConversionResult(error="Conversion failed")
    return ConversionResult(
        value=converted,
        text=f"{format_result(converted, to_unit)} {to_unit.symbol}",
    )
