"""Tests for the category runner and extractor registry."""

import pytest

from conftest import StubFactory
from nzsupps.core.exceptions import ExtractorNotFoundError, SinkError
from nzsupps.scrapers.adapters import XplosivExtractor
from nzsupps.scrapers.factory import ExtractorFactory
from nzsupps.scrapers.register_adapters import register_all_extractors
from nzsupps.scrapers.runner import DEFAULT_ORDER, ScrapeRunner
from nzsupps.scrapers.schema import RETAILER_ORDER, Category, Retailer, ScrapeResult


class RecordingSink:
    def __init__(self, error=None):
        self.batches = []
        self.error = error

    async def __call__(self, products, category):
        self.batches.append((list(products), category))
        if self.error is not None:
            raise self.error
        return len(products)


# ============================================================================
# TESTS: RUNNER
# ============================================================================

class TestScrapeRunner:
    """Tests for ScrapeRunner."""

    async def test_runs_in_default_order(self, make_product):
        outcomes = {key: ScrapeResult() for key in DEFAULT_ORDER}
        outcomes["xplosiv"] = ScrapeResult(products=[make_product()])
        factory = StubFactory(outcomes)

        summary = await ScrapeRunner(factory=factory).run_category(Category.PROTEIN)

        assert [key for key, _ in factory.calls] == list(DEFAULT_ORDER)
        assert all(category == Category.PROTEIN for _, category in factory.calls)
        assert list(summary.retailers) == list(DEFAULT_ORDER)
        assert summary.total_products == 1
        assert summary.ok

    async def test_custom_order_skips_repeats(self):
        factory = StubFactory({"sprintfit": ScrapeResult(), "nowhey": ScrapeResult()})

        summary = await ScrapeRunner(factory=factory).run_category(
            Category.CREATINE, order=["sprintfit", "nowhey", "sprintfit"]
        )

        assert [key for key, _ in factory.calls] == ["sprintfit", "nowhey"]
        assert list(summary.retailers) == ["sprintfit", "nowhey"]

    async def test_order_keys_normalised_before_dedup(self):
        factory = StubFactory({"xplosiv": ScrapeResult()})

        summary = await ScrapeRunner(factory=factory).run_category(
            Category.PROTEIN, order=["Xplosiv", "xplosiv", " XPLOSIV "]
        )

        assert [key for key, _ in factory.calls] == ["xplosiv"]
        assert list(summary.retailers) == ["xplosiv"]

    async def test_extractor_failure_becomes_error(self, make_product):
        factory = StubFactory({
            "xplosiv": RuntimeError("boom"),
            "nowhey": ScrapeResult(products=[make_product()], errors=["No price, skipping #3 url=x"]),
        })

        summary = await ScrapeRunner(factory=factory).run_category(
            Category.PROTEIN, order=["xplosiv", "nowhey"]
        )

        assert summary.results["xplosiv"].errors == ["xplosiv failed: boom"]
        assert summary.retailers["xplosiv"].errors == 1
        assert summary.retailers["nowhey"].products == 1
        assert summary.errors == ["xplosiv failed: boom", "No price, skipping #3 url=x"]
        assert not summary.ok

    async def test_unknown_key(self):
        factory = StubFactory({})

        result = await ScrapeRunner(factory=factory).run_retailer("countdown", Category.PROTEIN)

        assert result.products == []
        assert result.errors == ["countdown failed: Unknown scraper: countdown"]

    async def test_sink_receives_non_empty_batches(self, make_product):
        products = [make_product(), make_product(id="musashi:whey:2000", weight_grams=2000)]
        factory = StubFactory({"xplosiv": ScrapeResult(products=products), "nowhey": ScrapeResult()})
        sink = RecordingSink()

        summary = await ScrapeRunner(factory=factory, sink=sink).run_category(
            Category.PROTEIN, order=["xplosiv", "nowhey"]
        )

        assert sink.batches == [(products, Category.PROTEIN)]
        assert summary.retailers["xplosiv"].saved == 2
        assert summary.retailers["nowhey"].saved == 0

    async def test_sink_failure_does_not_stop_run(self, make_product):
        factory = StubFactory({
            "xplosiv": ScrapeResult(products=[make_product()]),
            "nowhey": ScrapeResult(products=[make_product(retailer=Retailer.NOWHEY)]),
        })
        sink = RecordingSink(error=SinkError("Xplosiv", "database is locked"))

        summary = await ScrapeRunner(factory=factory, sink=sink).run_category(
            Category.PROTEIN, order=["xplosiv", "nowhey"]
        )

        assert len(sink.batches) == 2
        assert summary.retailers["xplosiv"].saved == 0
        assert summary.ok

    async def test_format_summary(self, make_product):
        factory = StubFactory({
            "nzprotein": ScrapeResult(products=[make_product()] * 3),
            "xplosiv": ScrapeResult(errors=["a", "b"]),
        })

        summary = await ScrapeRunner(factory=factory).run_category(
            Category.CREATINE, order=["nzprotein", "xplosiv"]
        )

        assert summary.format_summary() == (
            "=== SUMMARY (creatine) ===\n"
            "nzprotein: products=3, errors=0\n"
            "xplosiv: products=0, errors=2"
        )


# ============================================================================
# TESTS: FACTORY
# ============================================================================

class TestExtractorFactory:
    """Tests for the extractor registry."""

    def test_register_all(self):
        factory = register_all_extractors(ExtractorFactory())

        assert factory.get_registered_retailers() == list(RETAILER_ORDER)
        for retailer in RETAILER_ORDER:
            extractor = factory.create_extractor(retailer.key)
            assert extractor.retailer == retailer
            assert extractor.key == retailer.key

    def test_collaborators_injected(self):
        async def fetch(url):
            return ""

        factory = ExtractorFactory(fetch=fetch)
        factory.register_extractor(Retailer.XPLOSIV, XplosivExtractor)

        assert factory.create_extractor(Retailer.XPLOSIV).fetch is fetch
        assert factory.has_extractor(Retailer.XPLOSIV)
        assert not factory.has_extractor(Retailer.NOWHEY)

    def test_unknown_key(self):
        with pytest.raises(ExtractorNotFoundError, match="Unknown scraper: countdown"):
            ExtractorFactory().create_extractor("countdown")

    def test_unregistered_retailer(self):
        with pytest.raises(ExtractorNotFoundError):
            ExtractorFactory().create_extractor(Retailer.NOWHEY)

    def test_rejects_mismatched_retailer(self):
        with pytest.raises(ValueError, match="not NoWhey"):
            ExtractorFactory().register_extractor(Retailer.NOWHEY, XplosivExtractor)

    def test_rejects_non_extractor(self):
        with pytest.raises(ValueError, match="BaseExtractor"):
            ExtractorFactory().register_extractor(Retailer.NOWHEY, dict)
