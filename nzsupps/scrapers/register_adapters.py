"""Register all retailer extractors with a factory.

Call ``register_all_extractors()`` once at startup before running scrapes.
"""

from typing import Optional

import structlog

from nzsupps.scrapers.adapters import (
    ChemistWarehouseExtractor,
    NoWheyExtractor,
    NZProteinExtractor,
    SprintFitExtractor,
    XplosivExtractor,
)
from nzsupps.scrapers.factory import ExtractorFactory, get_extractor_factory
from nzsupps.scrapers.schema import Retailer

logger = structlog.get_logger(__name__)


def register_all_extractors(factory: Optional[ExtractorFactory] = None) -> ExtractorFactory:
    """Register every supported extractor.

    Args:
        factory: Factory to populate (defaults to the global one)

    Returns:
        The populated factory
    """
    factory = factory or get_extractor_factory()

    extractors = [
        (Retailer.NZPROTEIN, NZProteinExtractor),
        (Retailer.XPLOSIV, XplosivExtractor),
        (Retailer.SPRINTFIT, SprintFitExtractor),
        (Retailer.NOWHEY, NoWheyExtractor),
        (Retailer.CHEMIST_WAREHOUSE, ChemistWarehouseExtractor),
    ]

    for retailer, extractor_class in extractors:
        factory.register_extractor(retailer, extractor_class)

    logger.info(
        "all_extractors_registered",
        count=len(factory.get_registered_retailers()),
        retailers=[r.key for r in factory.get_registered_retailers()],
    )
    return factory
