"""Scraping and normalisation pipeline for NZ supplement retailers.

This package provides:
- Normalized data structures (Product, Money, ScrapeResult)
- Base extractor classes and the per-retailer extractors
- Factory and runner for scraping a whole category
"""

from .base import (
    BaseBrowserExtractor,
    BaseExtractor,
    BaseHTMLExtractor,
    ListingConfig,
    PaginationMode,
)
from .factory import ExtractorFactory, extractor_factory, get_extractor_factory
from .schema import Category, Currency, Money, Product, Retailer, ScrapeResult

__all__ = [
    # Base classes
    "BaseExtractor",
    "BaseHTMLExtractor",
    "BaseBrowserExtractor",
    "ListingConfig",
    "PaginationMode",
    # Data structures
    "Category",
    "Currency",
    "Money",
    "Product",
    "Retailer",
    "ScrapeResult",
    # Factory
    "ExtractorFactory",
    "extractor_factory",
    "get_extractor_factory",
]
