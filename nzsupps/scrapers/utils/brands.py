"""Brand resolution against a retailer's known-brands list."""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from nzsupps.scrapers.utils.normalizer import clean_text


DEFAULT_BRAND_SUFFIXES = ("sports nutrition", "nutrition", "lifestyle", "supplements")

# What may follow a brand prefix: space, hyphen, dot, colon or end of title
_SEPARATOR_LOOKAHEAD = r"(?=[\s\-.:]|$)"
_LEADING_SEPARATORS = re.compile(r"^[\s\-.:]+")


@dataclass(frozen=True)
class BrandSplit:
    """Result of splitting a title; brand is None when nothing matched."""

    brand: Optional[str]
    base_name: str


def _strip_prefix(title: str, prefix: str) -> Optional[str]:
    pattern = re.compile("^" + re.escape(prefix) + _SEPARATOR_LOOKAHEAD, re.IGNORECASE)
    if not pattern.match(title):
        return None
    rest = pattern.sub("", title, count=1)
    return _LEADING_SEPARATORS.sub("", rest).strip()


def split_brand_from_name(
    title: str,
    known_brands: Sequence[str],
    *,
    first_word_fallback: bool = True,
) -> BrandSplit:
    """Split a product title into (brand, base name).

    Every brand's full name is tried as a case-insensitive prefix first, in
    list order. Only when none matches (and the fallback is enabled) is each
    brand's first word tried, so "Inc Micellar Casein" still resolves to
    "INC Sports" without a longer brand's first word beating an exact match.

    Args:
        title: Raw product title
        known_brands: Canonical brand names, in priority order
        first_word_fallback: Also accept the brand's first word as prefix

    Returns:
        BrandSplit with the canonical brand (or None) and the remaining name
    """
    base = clean_text(title)
    brands = [b.strip() for b in known_brands if b and b.strip()]

    for brand in brands:
        rest = _strip_prefix(base, brand)
        if rest is not None:
            return BrandSplit(brand=brand, base_name=rest)

    if first_word_fallback:
        for brand in brands:
            rest = _strip_prefix(base, brand.split()[0])
            if rest is not None:
                return BrandSplit(brand=brand, base_name=rest)

    return BrandSplit(brand=None, base_name=base)


def group_brand_variants(
    names: Iterable[str],
    suffixes: Sequence[str] = DEFAULT_BRAND_SUFFIXES,
) -> List[str]:
    """Collapse near-duplicate brands, keeping the longest spelling per group.

    "Balance" and "Balance Sports Nutrition" share the key "balance", so only
    the latter survives. Groups keep first-seen order.
    """
    suffix_patterns = [re.compile(rf"\b{re.escape(s)}\b", re.IGNORECASE) for s in suffixes]
    by_key = {}

    for raw in names:
        name = clean_text(raw)
        if not name:
            continue

        key = name.lower()
        for pattern in suffix_patterns:
            key = pattern.sub("", key)
        key = clean_text(key) or name.lower()

        existing = by_key.get(key)
        if existing is None or len(name) > len(existing):
            by_key[key] = name

    return list(by_key.values())


def order_known_brands(names: Iterable[str]) -> List[str]:
    """De-duplicate brands case-insensitively and sort longest first.

    Longer names go first so "Musashi Sports" is tried before "Musashi";
    equal lengths sort alphabetically so match priority never depends on the
    page order of the brands listing.
    """
    seen = {}
    for raw in names:
        name = clean_text(raw)
        if name and name.lower() not in seen:
            seen[name.lower()] = name
    return sorted(seen.values(), key=lambda n: (-len(n), n.lower()))
