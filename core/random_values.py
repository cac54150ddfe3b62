# =============================================================================
# core/random_values.py  -  Random Numbers, Strings & Identifiers
# =============================================================================
#
# Backs the generateRandom tool and the short keys used to name uploaded
# images and published notes.  These values are identifiers, not secrets,
# so the stdlib `random` module is enough.
# =============================================================================

import random
import uuid
from typing import Optional

from core.errors import ArgumentValidationError

CHARSETS: dict[str, str] = {
    "alphanumeric": "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789",
    "alpha": "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
    "numeric": "0123456789",
    "hex": "0123456789abcdef",
}

SHORT_KEY_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"

MAX_STRING_LENGTH = 10_000


def _as_int(value, name: str) -> int:
    """Accept ints and integral floats (JSON 4.0 is a valid integer)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ArgumentValidationError(f"{name} must be an integer")


def generate_short_key(length: int = 6) -> str:
    """Lowercase alphanumeric key used in file names and note URLs."""
    return "".join(random.choice(SHORT_KEY_ALPHABET) for _ in range(length))


def random_number(minimum: int = 0, maximum: int = 100) -> int:
    """Uniform integer in [minimum, maximum]."""
    minimum = _as_int(minimum, "min")
    maximum = _as_int(maximum, "max")
    if minimum > maximum:
        raise ArgumentValidationError("min cannot be greater than max")
    return random.randint(minimum, maximum)


def random_string(length: int = 10, charset: str = "alphanumeric", custom_charset: Optional[str] = None) -> str:
    length = _as_int(length, "length")
    if not 0 <= length <= MAX_STRING_LENGTH:
        raise ArgumentValidationError(f"length must be between 0 and {MAX_STRING_LENGTH}")
    if charset == "custom":
        chars = custom_charset or ""
        if not chars:
            raise ArgumentValidationError("customCharset must not be empty when charset is 'custom'")
    elif charset in CHARSETS:
        chars = CHARSETS[charset]
    else:
        raise ArgumentValidationError(f"Unknown charset: {charset}")
    return "".join(random.choice(chars) for _ in range(length))


def random_uuid() -> str:
    return str(uuid.uuid4())
