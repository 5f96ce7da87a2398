"""Price scraper for New Zealand protein and creatine retailers."""

__version__ = "0.1.0"
