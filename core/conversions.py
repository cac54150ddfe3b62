# =============================================================================
# core/conversions.py  -  Number Base & Unit Conversion
# =============================================================================
#
# Pure functions behind the convertBase and convertUnit tools.
#
# CALLER-FACING NUMBER FORMAT:
#   Tool results are strings, and clients of this server historically saw
#   numbers rendered the way JavaScript prints them ("32", not "32.0";
#   "0.00001", not "1e-05").  format_number() reproduces that rendering so
#   results stay stable for existing callers.
#
# Every domain failure raises ArgumentValidationError; the dispatcher turns
# it into an error result.
# =============================================================================

import math
from decimal import Decimal

from core.errors import ArgumentValidationError

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


# =============================================================================
# Base conversion
# =============================================================================

def _check_base(base, name: str) -> int:
    if isinstance(base, bool) or not isinstance(base, (int, float)) or int(base) != base:
        raise ArgumentValidationError(f"{name} must be an integer between 2 and 36")
    base = int(base)
    if not 2 <= base <= 36:
        raise ArgumentValidationError("Base must be between 2 and 36")
    return base


def parse_int_prefix(text: str, base: int) -> int:
    """Parse the longest valid digit prefix of `text` in `base`.

    Mirrors the lenient parseInt behavior callers rely on: surrounding
    whitespace and an optional sign are accepted, a "0x" prefix is allowed
    in base 16, and trailing garbage after the first invalid digit is ignored.
    Raises ArgumentValidationError when no digit can be read at all.
    """
    s = text.strip().lower()
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if base == 16 and s.startswith("0x"):
        s = s[2:]

    valid = _DIGITS[:base]
    end = 0
    while end < len(s) and s[end] in valid:
        end += 1
    if end == 0:
        raise ArgumentValidationError(f'Cannot parse "{text}" as a base-{base} number')
    return sign * int(s[:end], base)


def to_base(value: int, base: int) -> str:
    if value == 0:
        return "0"
    digits = []
    n = abs(value)
    while n:
        n, rem = divmod(n, base)
        digits.append(_DIGITS[rem])
    if value < 0:
        digits.append("-")
    return "".join(reversed(digits))


def convert_base(number: str, from_base, to_base_) -> str:
    """Convert `number` written in `from_base` to its `to_base_` spelling."""
    source = _check_base(from_base, "fromBase")
    target = _check_base(to_base_, "toBase")
    return to_base(parse_int_prefix(str(number), source), target)


# =============================================================================
# Unit conversion
# =============================================================================
# Factors convert a unit INTO the category's base unit (m, kg, m2, l, s).
# Temperature is not linear, so it gets its own path through Kelvin.
# =============================================================================

CONVERSION_TABLES: dict[str, dict[str, float]] = {
    "length": {
        "mm": 0.001, "cm": 0.01, "m": 1, "km": 1000,
        "in": 0.0254, "ft": 0.3048, "yd": 0.9144, "mi": 1609.344,
    },
    "weight": {
        "mg": 0.000001, "g": 0.001, "kg": 1, "t": 1000,
        "oz": 0.0283495, "lb": 0.453592, "st": 6.35029,
    },
    "area": {
        "mm2": 0.000001, "cm2": 0.0001, "m2": 1, "km2": 1000000,
        "in2": 0.00064516, "ft2": 0.092903, "ac": 4046.86, "ha": 10000,
    },
    "volume": {
        "ml": 0.001, "l": 1, "m3": 1000,
        "tsp": 0.00492892, "tbsp": 0.0147868, "fl-oz": 0.0295735, "cup": 0.236588,
        "pt": 0.473176, "qt": 0.946353, "gal": 3.78541,
    },
    "time": {
        "ms": 0.001, "s": 1, "min": 60, "h": 3600,
        "day": 86400, "week": 604800, "month": 2592000, "year": 31536000,
    },
}

TEMPERATURE_UNITS = ("C", "F", "K")

CATEGORIES = ("length", "weight", "temperature", "area", "volume", "time")


def _to_kelvin(value: float, unit: str) -> float:
    if unit == "C":
        return value + 273.15
    if unit == "F":
        return (value - 32) * 5 / 9 + 273.15
    if unit == "K":
        return value
    raise ArgumentValidationError(f"Unsupported temperature unit: {unit}")


def _from_kelvin(kelvin: float, unit: str) -> float:
    if unit == "C":
        return kelvin - 273.15
    if unit == "F":
        return (kelvin - 273.15) * 9 / 5 + 32
    if unit == "K":
        return kelvin
    raise ArgumentValidationError(f"Unsupported temperature unit: {unit}")


def convert_unit(value: float, category: str, from_unit: str, to_unit: str) -> float:
    """Convert `value` between two units of the same category."""
    if category == "temperature":
        return _from_kelvin(_to_kelvin(value, from_unit), to_unit)

    table = CONVERSION_TABLES.get(category)
    if table is None:
        raise ArgumentValidationError(f"Unsupported conversion category: {category}")
    if from_unit not in table:
        raise ArgumentValidationError(f"Unsupported source unit: {from_unit}")
    if to_unit not in table:
        raise ArgumentValidationError(f"Unsupported target unit: {to_unit}")
    return value * table[from_unit] / table[to_unit]


def format_number(value: float) -> str:
    """Render a number the way JavaScript's Number#toString does."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    magnitude = abs(value)
    if 1e-6 <= magnitude < 1e21:
        if value.is_integer():
            return str(int(value))
        # repr() gives the shortest round-tripping digits; Decimal spells
        # them out without an exponent.
        return format(Decimal(repr(value)), "f")

    # Outside that range repr() always uses an exponent.
    mantissa, exponent = repr(value).split("e")
    if "." in mantissa:
        mantissa = mantissa.rstrip("0").rstrip(".")
    sign, digits = ("-", exponent[1:]) if exponent.startswith("-") else ("+", exponent.lstrip("+"))
    return f"{mantissa}e{sign}{int(digits)}"
