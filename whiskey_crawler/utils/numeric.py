"""
Numeric and unit parsing for noisy page values.

Every parser returns None for anything it cannot read as a finite,
non-negative number, so callers can tell "unknown" apart from a real 0.
"""
import math
import re
from typing import Any, Optional

# Units and markers stripped before reading the number
_UNIT_RE = re.compile(r"(?:원|₩|KRW|ml|mL|ML|%|\s)", re.IGNORECASE)

# Leading number only, mirroring how the shop formats values ("700ml", "43.0%")
_LEADING_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)")

# Thousands separator: a comma between digit groups
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")

# Age markers, tried in order: "21yo" / "21 y.o." then "18 Year(s)"
_AGE_PRIMARY_RE = re.compile(r"(?<![\d.])(\d{1,3})\s*(?:yo|y\.o\.?)(?![a-z])", re.IGNORECASE)
_AGE_SECONDARY_RE = re.compile(r"(?<![\d.])(\d{1,3})\s*years?(?![a-z])", re.IGNORECASE)

MAX_AGE = 100
MAX_RATING = 10.0


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a noisy value such as "1,234,000원", "43.0%" or "700ml".

    Args:
        value: Raw text or number from structured data or markup

    Returns:
        The number as float, or None if unparsable, negative or non-finite
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = _THOUSANDS_RE.sub("", value.strip())
        text = _UNIT_RE.sub("", text)
        match = _LEADING_NUMBER_RE.match(text)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None

    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_int(value: Any) -> Optional[int]:
    """Parse an integer quantity (price, volume, count); decimals are truncated."""
    number = parse_number(value)
    if number is None:
        return None
    return int(number)


def parse_float(value: Any) -> Optional[float]:
    """Parse a decimal quantity such as ABV."""
    return parse_number(value)


def parse_rating(value: Any, max_rating: float = MAX_RATING) -> Optional[float]:
    """Parse a review rating; values outside 0..max_rating are treated as unknown."""
    number = parse_number(value)
    if number is None or number > max_rating:
        return None
    return number


def parse_age(english_name: Optional[str]) -> Optional[int]:
    """
    Derive bottling age from the English (brand-bearing) name.

    "Macallan 21yo" -> 21, "Glen Something 18 Year Old" -> 18.
    """
    match = _match_age(english_name)
    if not match:
        return None
    age = int(match.group(1))
    return age if age <= MAX_AGE else None


def derive_brand(english_name: Optional[str]) -> Optional[str]:
    """
    Derive the brand from the English name.

    The brand is the text before the age token ("Macallan 21yo" -> "Macallan");
    without an age token the whole name is the brand.
    """
    if not english_name or not english_name.strip():
        return None

    name = english_name.strip()
    match = _match_age(name)
    if match:
        brand = name[:match.start()].strip(" -,/")
        if brand:
            return brand
    return name


def _match_age(english_name: Optional[str]) -> Optional[re.Match]:
    if not english_name:
        return None
    return _AGE_PRIMARY_RE.search(english_name) or _AGE_SECONDARY_RE.search(english_name)
