"""Category runner: every extractor in turn, then the persistence sink."""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import structlog

from nzsupps.scrapers.factory import ExtractorFactory, get_extractor_factory
from nzsupps.scrapers.schema import RETAILER_ORDER, Category, Product, ScrapeResult

logger = structlog.get_logger(__name__)

Sink = Callable[[List[Product], Category], Awaitable[int]]

DEFAULT_ORDER = tuple(retailer.key for retailer in RETAILER_ORDER)


@dataclass
class RetailerSummary:
    """Per-retailer counts for one category run."""

    products: int = 0
    errors: int = 0
    saved: int = 0


@dataclass
class RunSummary:
    """Outcome of a category run."""

    category: Category
    retailers: Dict[str, RetailerSummary] = field(default_factory=dict)
    results: Dict[str, ScrapeResult] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def total_products(self) -> int:
        return sum(s.products for s in self.retailers.values())

    @property
    def ok(self) -> bool:
        return not self.errors

    def format_summary(self) -> str:
        lines = [f"=== SUMMARY ({self.category.value}) ==="]
        for key, summary in self.retailers.items():
            lines.append(f"{key}: products={summary.products}, errors={summary.errors}")
        return "\n".join(lines)


class ScrapeRunner:
    """Runs extractors sequentially for a category and forwards products to a sink.

    One extractor failing never stops the others: its exception becomes a
    single error entry, and a sink failure is logged and the run moves on.
    """

    def __init__(self, factory: Optional[ExtractorFactory] = None, sink: Optional[Sink] = None):
        self.factory = factory or get_extractor_factory()
        self.sink = sink
        self.logger = logger.bind(service="scrape_runner")

    async def run_retailer(self, key: str, category: Category) -> ScrapeResult:
        """Run one extractor, converting any escaped exception into an error entry."""
        try:
            extractor = self.factory.create_extractor(key)
            return await extractor.scrape(category)
        except Exception as e:
            message = str(e) or type(e).__name__
            self.logger.error("extractor_failed", retailer=key, error=message, exc_info=True)
            return ScrapeResult.failed(f"{key} failed: {message}")

    async def run_category(
        self, category: Category, order: Optional[Iterable[str]] = None
    ) -> RunSummary:
        """Scrape a category across retailers.

        Args:
            category: Category to scrape
            order: Retailer keys to run; case-insensitive repeats after the
                first are skipped

        Returns:
            RunSummary keyed by retailer key
        """
        category = Category(category)
        summary = RunSummary(category=category)
        seen = set()

        for raw_key in order or DEFAULT_ORDER:
            key = raw_key.strip().lower()
            if key in seen:
                continue
            seen.add(key)

            self.logger.info("retailer_started", retailer=key, category=category.value)
            result = await self.run_retailer(key, category)

            retailer_summary = RetailerSummary(
                products=len(result.products), errors=len(result.errors)
            )
            summary.retailers[key] = retailer_summary
            summary.results[key] = result
            summary.errors.extend(result.errors)

            if self.sink is not None and result.products:
                try:
                    retailer_summary.saved = await self.sink(result.products, category)
                except Exception as e:
                    self.logger.error(
                        "sink_failed",
                        retailer=key,
                        products=len(result.products),
                        error=str(e),
                        exc_info=True,
                    )

            self.logger.info(
                "retailer_finished",
                retailer=key,
                products=retailer_summary.products,
                errors=retailer_summary.errors,
                saved=retailer_summary.saved,
            )

        return summary
