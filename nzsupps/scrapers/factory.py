"""Factory for creating retailer extractor instances."""

from typing import Callable, Dict, List, Optional, Type, Union

import structlog

from nzsupps.core.exceptions import ExtractorNotFoundError
from nzsupps.scrapers.base import BaseExtractor, FetchFunc
from nzsupps.scrapers.schema import Retailer
from nzsupps.scrapers.utils.browser_manager import BrowserPool


logger = structlog.get_logger(__name__)


class ExtractorFactory:
    """Registry of extractor classes keyed by Retailer.

    Shared collaborators (the fetch primitive and the browser pool factory)
    are injected into every extractor it creates.
    """

    def __init__(
        self,
        fetch: Optional[FetchFunc] = None,
        pool_factory: Optional[Callable[[], BrowserPool]] = None,
    ):
        self.fetch = fetch
        self.pool_factory = pool_factory
        self._registry: Dict[Retailer, Type[BaseExtractor]] = {}

    def register_extractor(self, retailer: Retailer, extractor_class: Type[BaseExtractor]) -> None:
        """Register an extractor class for a retailer.

        Args:
            retailer: Retailer the class scrapes
            extractor_class: Class inheriting from BaseExtractor
        """
        if not issubclass(extractor_class, BaseExtractor):
            raise ValueError(f"Extractor class must inherit from BaseExtractor: {extractor_class}")
        if extractor_class.retailer != retailer:
            raise ValueError(
                f"{extractor_class.__name__} scrapes {extractor_class.retailer.value}, not {retailer.value}"
            )

        self._registry[retailer] = extractor_class
        logger.debug("extractor_registered", retailer=retailer.key)

    def create_extractor(self, retailer: Union[Retailer, str]) -> BaseExtractor:
        """Create an extractor for a Retailer or a runner key like "xplosiv".

        Raises:
            ExtractorNotFoundError: If the key is unknown or not registered
        """
        if not isinstance(retailer, Retailer):
            try:
                retailer = Retailer.from_key(retailer)
            except ValueError:
                raise ExtractorNotFoundError(str(retailer)) from None

        extractor_class = self._registry.get(retailer)
        if extractor_class is None:
            raise ExtractorNotFoundError(retailer.key)

        return extractor_class(fetch=self.fetch, pool_factory=self.pool_factory)

    def get_registered_retailers(self) -> List[Retailer]:
        return list(self._registry.keys())

    def has_extractor(self, retailer: Retailer) -> bool:
        return retailer in self._registry


# Global factory instance
extractor_factory = ExtractorFactory()


def get_extractor_factory() -> ExtractorFactory:
    """Get the global extractor factory instance."""
    return extractor_factory
