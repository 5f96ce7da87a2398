"""Scraper utilities for normalisation, brand resolution and browser automation."""

from .brands import BrandSplit, group_brand_variants, order_known_brands, split_brand_from_name
from .normalizer import (
    capitalisation,
    is_creatine_like,
    is_protein_like,
    make_product_id,
    normalise_price,
    pick_last_price,
    strip_weight_suffix,
    weight_grams,
)
from .retry import interstitial_retry, is_interstitial_title

__all__ = [
    # Brands
    "BrandSplit",
    "group_brand_variants",
    "order_known_brands",
    "split_brand_from_name",
    # Normalisation
    "capitalisation",
    "is_creatine_like",
    "is_protein_like",
    "make_product_id",
    "normalise_price",
    "pick_last_price",
    "strip_weight_suffix",
    "weight_grams",
    # Retry
    "interstitial_retry",
    "is_interstitial_title",
]
