"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Dict, List, Optional, Union

import pytest

from nzsupps.core.exceptions import ExtractorNotFoundError, FetchError
from nzsupps.scrapers.schema import Currency, Money, Product, Retailer


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# FAKES
# ============================================================================

class FakeFetch:
    """Stands in for fetch_html; unknown URLs answer 404."""

    def __init__(self, pages: Optional[Dict[str, Union[str, Exception]]] = None, delay: float = 0):
        self.pages = pages or {}
        self.calls: List[str] = []
        self.delay = delay

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        value = self.pages.get(url)
        if value is None:
            raise FetchError(url, f"HTTP 404 for {url}", status_code=404)
        if isinstance(value, Exception):
            raise value
        return value


class FakeLocator:
    def __init__(self, texts: List[str]):
        self._texts = texts

    async def all_inner_texts(self) -> List[str]:
        return list(self._texts)


class FakeButton:
    def __init__(self, page: "FakePage", classes: str = "pager__button pager__button--next", disabled=False):
        self.page = page
        self.classes = classes
        self.disabled = disabled

    async def is_disabled(self) -> bool:
        return self.disabled

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.classes if name == "class" else None

    async def click(self) -> None:
        self.page.clicks += 1
        self.page.listing_index += 1


class FakePage:
    """Minimal async Playwright page.

    ``options`` maps product URL -> option labels; ``titles`` maps URL -> a
    list of titles returned on successive visits; ``listing`` is the list of
    rendered listing pages walked with the next button.
    """

    def __init__(
        self,
        options: Optional[Dict[str, List[str]]] = None,
        titles: Optional[Dict[str, List[str]]] = None,
        listing: Optional[List[str]] = None,
        goto_error: Optional[Exception] = None,
    ):
        self.options = options or {}
        self.titles = titles or {}
        self.listing = listing or []
        self.goto_error = goto_error

        self.url: Optional[str] = None
        self.goto_calls: List[tuple] = []
        self.waits: List[int] = []
        self.clicks = 0
        self.listing_index = 0

    async def goto(self, url: str, wait_until: str = "load", timeout: int = 0):
        if self.goto_error is not None:
            raise self.goto_error
        self.url = url
        self.goto_calls.append((url, timeout))

    async def title(self) -> str:
        queue = self.titles.get(self.url)
        if not queue:
            return "Product page"
        return queue.pop(0) if len(queue) > 1 else queue[0]

    async def wait_for_selector(self, selector: str, state: str = "visible", timeout: int = 0):
        return None

    async def wait_for_timeout(self, ms: int):
        self.waits.append(ms)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self.options.get(self.url, []))

    async def content(self) -> str:
        return self.listing[self.listing_index]

    async def query_selector(self, selector: str):
        if self.listing_index + 1 < len(self.listing):
            return FakeButton(self)
        return None


class FakePool:
    """BrowserPool double handing out one FakePage."""

    def __init__(self, page: Optional[FakePage] = None):
        self.page = page or FakePage()
        self.entered = 0
        self.closed = False
        self.acquires = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def acquire(self) -> FakePage:
        self.acquires += 1
        return self.page


class StubExtractor:
    def __init__(self, key, outcome, calls):
        self.key = key
        self.outcome = outcome
        self.calls = calls

    async def scrape(self, category):
        self.calls.append((self.key, category))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class StubFactory:
    """Hands out StubExtractors; unknown keys raise like the real factory."""

    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    def create_extractor(self, key):
        if key not in self.outcomes:
            raise ExtractorNotFoundError(key)
        return StubExtractor(key, self.outcomes[key], self.calls)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def make_product():
    """Build a valid Product, overriding any field."""

    def _make(**overrides) -> Product:
        fields = dict(
            id="musashi:whey:1000",
            brand="Musashi",
            name="Whey",
            price=Money(amount_cents=4999, currency=Currency.NZD),
            in_stock=True,
            url="https://xplosiv.nz/musashi-whey.html",
            retailer=Retailer.XPLOSIV,
            weight_grams=1000,
        )
        fields.update(overrides)
        return Product(**fields)

    return _make
