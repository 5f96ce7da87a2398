"""Data normalization utilities for price, weight and name parsing."""

import math
import re
from typing import List, Optional

from nzsupps.core.exceptions import PriceParseError
from nzsupps.scrapers.schema import Currency, Money


# Acronyms that stay upper-case regardless of source casing
ACRONYMS = frozenset({"NZ", "ISO", "WPI", "ON"})

GRAMS_PER_UNIT = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
    "lb": 453.59237,
    "lbs": 453.59237,
    "pound": 453.59237,
    "pounds": 453.59237,
}

# e.g. 1.5 kg, 1,5 kg, 750 g, 5lb, 5 lbs, 2 pounds, 1-kg, 1 - kg
_WEIGHT_PATTERN = re.compile(
    r"(\d+(?:[.,]\d+)?)[\s-]*(kg|kilograms?|g|grams?|lb|lbs|pounds?)",
    re.IGNORECASE,
)
_THOUSANDS_PATTERN = re.compile(r"^\d{1,3}(?:,\d{3})+$")

# [1] whole part with optional thousands commas, [2] cents without the dot
_PRICE_PATTERN = re.compile(
    r"^(?:NZ\$|\$)?(\d{1,3}(?:,\d{3})*|\d+)(?:\.(\d{1,2}))?$",
    re.IGNORECASE,
)
_DOLLAR_AMOUNT_PATTERN = re.compile(r"(?:NZ\$|\$)\s*\d[\d,]*(?:\.\d{1,2})?")

_WEIGHT_SUFFIX_STRICT = re.compile(r"\s*-\s*\d+\s*(g|kg).*", re.IGNORECASE | re.DOTALL)
_WEIGHT_SUFFIX_LOOSE = re.compile(
    r"\s*[-–]?\s*\d+(\.\d+)?\s*(g|kg)\b.*", re.IGNORECASE | re.DOTALL
)

CREATINE_KEYWORDS = re.compile(r"creatine|creapure|mono\s*hydrate", re.IGNORECASE)
PROTEIN_KEYWORDS = re.compile(
    r"protein|whey|isolate|casein|\bwpi\b|\bwpc\b|mass gainer", re.IGNORECASE
)


def clean_text(raw: str) -> str:
    """Trim and collapse whitespace runs to single spaces."""
    return re.sub(r"\s+", " ", raw or "").strip()


def normalise_price(raw: str) -> Money:
    """Parse a retailer price string into integer cents.

    Handles:
    - "$49.99" -> 4999
    - "NZ$1,234.5" -> 123450
    - "72.95" -> 7295

    Raises:
        PriceParseError: If the string is not a single price
    """
    cleaned = re.sub(r"\s+", "", raw or "")
    match = _PRICE_PATTERN.match(cleaned)
    if not match:
        raise PriceParseError(raw)

    whole = match.group(1).replace(",", "")
    frac = (match.group(2) or "").ljust(2, "0")
    amount_cents = int(whole) * 100 + int(frac)

    return Money(amount_cents=amount_cents, currency=Currency.NZD)


def dollar_amounts(text: str) -> List[str]:
    """All "$12.34" / "NZ$1,234" style amounts in text, in order."""
    return _DOLLAR_AMOUNT_PATTERN.findall(text or "")


def pick_last_price(text: str) -> str:
    """Return the last dollar amount in text, or text itself if none.

    A range like "$34.00 - $40.00" resolves to "$40.00".
    """
    matches = dollar_amounts(text)
    return matches[-1] if matches else text


def _parse_numeral(number: str) -> Optional[float]:
    number = number.strip()
    if "," in number and "." not in number:
        if _THOUSANDS_PATTERN.match(number):
            number = number.replace(",", "")
        else:
            # decimal comma, e.g. 1,5
            number = number.replace(",", ".", 1)
    else:
        number = number.replace(",", "")

    try:
        value = float(number)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def weight_grams(raw: Optional[str]) -> Optional[int]:
    """Extract a weight in grams from free text.

    Every number+unit pair is scanned and the LAST one wins, so strings like
    "$59.95 ... 1kg" or "2 x 500g (1kg)" resolve to the trailing weight.
    The result is rounded to the nearest 10 grams.

    Returns:
        Weight in grams, or None when no number+unit pair is present
    """
    if not raw:
        return None

    last = None
    for last in _WEIGHT_PATTERN.finditer(raw):
        pass
    if last is None:
        return None

    value = _parse_numeral(last.group(1))
    if value is None:
        return None

    factor = GRAMS_PER_UNIT.get(last.group(2).lower())
    if factor is None:
        return None

    # half-up, not banker's rounding
    return int(math.floor(value * factor / 10 + 0.5)) * 10


def capitalisation(raw: str) -> str:
    """Title-case each whitespace-separated word, keeping known acronyms upper."""
    words = []
    for word in (raw or "").split():
        plain = re.sub(r"[^A-Za-z]", "", word)
        if plain and plain.upper() in ACRONYMS:
            words.append(word.upper())
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def strip_weight_suffix(name: str, loose: bool = False) -> str:
    """Remove a trailing weight segment and anything after it.

    Strict form needs a dash ("Whey Isolate - 1kg", "Casein-500G (Vanilla)");
    the loose form also takes en dashes, no dash, and decimals ("Creatine 300G").
    """
    pattern = _WEIGHT_SUFFIX_LOOSE if loose else _WEIGHT_SUFFIX_STRICT
    return pattern.sub("", name or "").strip()


def make_product_id(brand: str, name: str, weight: Optional[int]) -> str:
    """Build the deterministic brand:name:weight key, e.g. nzprotein:whey_isolate:1000."""
    key = f"{brand}:{name}:{weight if weight is not None else 'na'}"
    return re.sub(r"\s+", "_", key.lower())


def is_creatine_like(text: str) -> bool:
    return bool(CREATINE_KEYWORDS.search(text or ""))


def is_protein_like(text: str) -> bool:
    return bool(PROTEIN_KEYWORDS.search(text or ""))
