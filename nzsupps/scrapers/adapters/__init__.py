"""Retailer-specific extractor implementations.

Static-listing extractors inherit from BaseHTMLExtractor; Chemist Warehouse,
whose listing is rendered client-side, inherits from BaseBrowserExtractor.
"""

from .chemist_warehouse import ChemistWarehouseExtractor
from .nowhey import NoWheyExtractor
from .nzprotein import NZProteinExtractor
from .sprintfit import SprintFitExtractor
from .xplosiv import XplosivExtractor

__all__ = [
    "ChemistWarehouseExtractor",
    "NoWheyExtractor",
    "NZProteinExtractor",
    "SprintFitExtractor",
    "XplosivExtractor",
]
