"""Base extractor interfaces.

Every retailer extractor inherits from BaseHTMLExtractor (static listing
pages parsed with BeautifulSoup) or BaseBrowserExtractor (JS-driven listing
paged by clicking a "next" button), and implements ``select_cards`` and
``parse_card``. The base classes own pagination, the per-card error policy,
flavour lookups through the shared BrowserPool, and the test-mode budget.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError, Page

from nzsupps.config import settings
from nzsupps.core.exceptions import (
    CardError,
    FetchError,
    InterstitialError,
    SupplementScraperError,
)
from nzsupps.scrapers.fetcher import fetch_html
from nzsupps.scrapers.schema import Category, Money, Product, Retailer, ScrapeResult
from nzsupps.scrapers.utils.brands import BrandSplit, order_known_brands, split_brand_from_name
from nzsupps.scrapers.utils.browser_manager import (
    BrowserPool,
    goto_with_interstitial_retry,
    read_option_texts,
)
from nzsupps.scrapers.utils.normalizer import (
    make_product_id,
    normalise_price,
    pick_last_price,
    weight_grams,
)
from nzsupps.scrapers.utils.retry import DEFAULT_INTERSTITIAL_WAIT


logger = structlog.get_logger(__name__)

# Highest ?p=N requested on query-paginated listings
QUERY_PARAM_LAST_PAGE = 49


class PaginationMode(str, Enum):
    """How a listing is walked."""

    SINGLE_PAGE = "single_page"
    QUERY_PARAM = "query_param"  # ?p=2 .. ?p=49 until empty or a fetch fails
    HEADING_SCAN = "heading_scan"  # one page, cards located via headings
    PAGER_BUTTON = "pager_button"  # JS "next" button clicks in the browser


@dataclass(frozen=True)
class ListingConfig:
    """Where and how one category is scraped for a retailer."""

    url: str
    pagination: PaginationMode = PaginationMode.SINGLE_PAGE
    lookup_flavours: bool = False
    keyword_filter: Optional[Callable[[str], bool]] = None

    def accepts(self, text: str) -> bool:
        return self.keyword_filter is None or self.keyword_filter(text)


FetchFunc = Callable[[str], Awaitable[str]]


def own_text(tag: Optional[Tag]) -> str:
    """Text of tag's direct text nodes only, skipping nested elements."""
    if tag is None:
        return ""
    return "".join(tag.find_all(string=True, recursive=False)).strip()


class BaseExtractor(ABC):
    """Abstract base class for all retailer extractors."""

    retailer: Retailer
    store_brand: str = ""  # used when no known brand prefixes the title
    base_url: str = ""
    listings: Dict[Category, ListingConfig] = {}

    # Variant <option> selector on product pages; None disables lookups
    flavour_selector: Optional[str] = None
    interstitial_wait: float = DEFAULT_INTERSTITIAL_WAIT

    def __init__(
        self,
        fetch: Optional[FetchFunc] = None,
        pool_factory: Optional[Callable[[], BrowserPool]] = None,
    ):
        self.fetch = fetch or fetch_html
        self.pool_factory = pool_factory or BrowserPool
        self.pool: Optional[BrowserPool] = None
        self.logger = logger.bind(retailer=self.retailer.key)

        self.known_brands: List[str] = []
        self.flavours_checked = 0
        self.flavours_found = 0
        self._deadline: Optional[float] = None

    @property
    def key(self) -> str:
        return self.retailer.key

    async def scrape(self, category: Category) -> ScrapeResult:
        """Scrape one category listing.

        Card-level problems become entries in ``errors``; only unexpected
        failures outside the card loop propagate.

        Args:
            category: Category to scrape

        Returns:
            ScrapeResult with products and non-fatal error messages
        """
        category = Category(category)
        config = self.listings.get(category)
        if config is None:
            raise ValueError(f"{self.retailer.value} has no {category.value} listing")

        self._begin_run()
        result = ScrapeResult()
        self.logger.info("scrape_started", category=category.value, url=config.url)

        self.known_brands = order_known_brands(await self._load_brands())

        if self.needs_browser(config):
            async with self.pool_factory() as pool:
                self.pool = pool
                try:
                    await self.scrape_listing(category, config, result)
                finally:
                    self.pool = None
        else:
            await self.scrape_listing(category, config, result)

        self.logger.info(
            "scrape_finished",
            category=category.value,
            products=len(result.products),
            errors=len(result.errors),
            flavours_checked=self.flavours_checked,
            flavours_found=self.flavours_found,
        )
        return result

    @abstractmethod
    async def scrape_listing(
        self, category: Category, config: ListingConfig, result: ScrapeResult
    ) -> None:
        """Walk the listing and append products/errors to result."""
        pass

    @abstractmethod
    def select_cards(self, soup: BeautifulSoup, config: ListingConfig) -> List[Tag]:
        """Return the product card elements of one listing page."""
        pass

    @abstractmethod
    async def parse_card(
        self, card: Tag, index: int, category: Category, config: ListingConfig
    ) -> Optional[Product]:
        """Turn a card into a Product.

        Returns:
            Product, or None when the card is filtered out of the category

        Raises:
            CardError: For a card that must be skipped and reported
        """
        pass

    def needs_browser(self, config: ListingConfig) -> bool:
        return config.lookup_flavours and self.flavour_selector is not None

    async def collect_brands(self) -> List[str]:
        """Fetch this retailer's brand names; store-brand retailers keep []."""
        return []

    async def _load_brands(self) -> List[str]:
        try:
            brands = await self.collect_brands()
        except Exception as e:
            self.logger.warning("collect_brands_failed", error=str(e))
            return []
        self.logger.info("brands_collected", count=len(brands))
        return brands

    # ------------------------------------------------------------------
    # Run state

    def _begin_run(self) -> None:
        self.flavours_checked = 0
        self.flavours_found = 0
        budget = settings.runtime_budget_seconds()
        self._deadline = time.monotonic() + budget if budget is not None else None

    def budget_exhausted(self) -> bool:
        """True once the test-mode wall-clock budget has run out."""
        if self._deadline is None:
            return False
        if time.monotonic() > self._deadline:
            self.logger.info("runtime_budget_exhausted")
            return True
        return False

    # ------------------------------------------------------------------
    # Card helpers

    async def process_cards(
        self,
        cards: List[Tag],
        category: Category,
        config: ListingConfig,
        result: ScrapeResult,
    ) -> None:
        """Parse each card, recording failures and moving on."""
        for index, card in enumerate(cards):
            if self.budget_exhausted():
                break
            try:
                product = await self.parse_card(card, index, category, config)
            except Exception as e:
                message = str(e) or type(e).__name__
                # card errors already name the card
                if not isinstance(e, CardError):
                    message = self._locate(card, index, message)
                self.logger.warning("card_failed", index=index, error=message)
                result.errors.append(message)
                continue
            if product is not None:
                result.products.append(product)

    def absolute_url(self, href: Optional[str]) -> str:
        if not href:
            raise CardError("missing href on product card")
        return urljoin(self.base_url, href)

    def card_url(self, card: Tag) -> Optional[str]:
        """Best-effort absolute URL of a card, for error messages."""
        href = card.get("href")
        if not href:
            anchor = card.select_one("a[href]")
            href = anchor.get("href") if anchor else None
        return urljoin(self.base_url, href) if href else None

    def _locate(self, card: Tag, index: int, message: str) -> str:
        url = self.card_url(card)
        if url is None:
            return f"#{index}: {message}"
        return f"#{index} url={url}: {message}"

    def resolve_brand(self, title: str) -> BrandSplit:
        """Split title against the known brands, falling back to the store brand."""
        split = split_brand_from_name(title, self.known_brands)
        return BrandSplit(brand=split.brand or self.store_brand, base_name=split.base_name)

    @staticmethod
    def require_price(raw: Optional[str], index: int, url: str) -> Money:
        """Parse a card price, taking the last amount of a range.

        Raises:
            CardError: If the card shows no price at all
            PriceParseError: If the price text is malformed
        """
        raw = (raw or "").strip()
        if not raw:
            raise CardError(f"No price, skipping #{index} url={url}")
        return normalise_price(pick_last_price(raw))

    def build_product(
        self,
        *,
        brand: str,
        name: str,
        price: Money,
        in_stock: bool,
        url: str,
        weight_source: str,
        flavours: Optional[Tuple[str, ...]] = None,
    ) -> Product:
        # readings under 5 g round to 0 and count as unparsed
        weight = weight_grams(weight_source) or None
        return Product(
            id=make_product_id(brand, name, weight),
            brand=brand,
            name=name,
            price=price,
            in_stock=in_stock,
            url=url,
            retailer=self.retailer,
            weight_grams=weight,
            flavours=flavours,
        )

    async def lookup_flavours(self, url: str) -> Tuple[str, ...]:
        """Visit a product page and read its flavour options.

        Failures are logged and yield an empty tuple; they never fail the card.
        """
        if self.pool is None or self.flavour_selector is None:
            return ()

        page = await self.pool.acquire()
        await page.wait_for_timeout(settings.FLAVOUR_DELAY_MS)
        self.flavours_checked += 1

        try:
            flavours = await read_option_texts(
                page, url, self.flavour_selector, wait_seconds=self.interstitial_wait
            )
        except (PlaywrightError, InterstitialError) as e:
            self.logger.warning("flavour_lookup_failed", url=url, error=str(e))
            flavours = ()

        if flavours:
            self.flavours_found += 1
        return flavours


class BaseHTMLExtractor(BaseExtractor):
    """Extractor whose listing pages are static HTML fetched over httpx."""

    async def scrape_listing(
        self, category: Category, config: ListingConfig, result: ScrapeResult
    ) -> None:
        paginated = config.pagination == PaginationMode.QUERY_PARAM
        last_page = QUERY_PARAM_LAST_PAGE if paginated else 1

        for page_number in range(1, last_page + 1):
            if self.budget_exhausted():
                break

            url = config.url if page_number == 1 else f"{config.url}?p={page_number}"
            try:
                html = await self.fetch(url)
            except FetchError as e:
                self.logger.warning(
                    "listing_fetch_failed", url=url, page=page_number, error=e.message
                )
                if not paginated:
                    result.errors.append(f"Failed to fetch {url}: {e.message}")
                break

            soup = BeautifulSoup(html, "html.parser")
            cards = self.select_cards(soup, config)
            self.logger.info("cards_found", page=page_number, count=len(cards))
            if not cards:
                break

            await self.process_cards(cards, category, config, result)


class BaseBrowserExtractor(BaseExtractor):
    """Extractor whose listing renders client-side and pages via a button.

    The rendered DOM of each page is handed to BeautifulSoup, so card parsing
    is the same as for static extractors.
    """

    card_selector: str = ""
    next_button_selector: str = ""
    next_button_disabled_class: str = ""
    listing_wait_ms: int = 15000
    after_click_wait_ms: int = 2500

    def needs_browser(self, config: ListingConfig) -> bool:
        return True

    def card_href(self, card: Tag) -> Optional[str]:
        return card.get("href")

    async def scrape_listing(
        self, category: Category, config: ListingConfig, result: ScrapeResult
    ) -> None:
        try:
            await self._walk_pager(category, config, result)
        except (PlaywrightError, SupplementScraperError) as e:
            self.logger.error("listing_failed", url=config.url, error=str(e))
            result.errors.append(f"Failed to scrape {self.retailer.value}: {e}")

    async def _walk_pager(
        self, category: Category, config: ListingConfig, result: ScrapeResult
    ) -> None:
        page = await self.pool.acquire()
        await goto_with_interstitial_retry(
            page, config.url, wait_seconds=self.interstitial_wait
        )
        try:
            await page.wait_for_selector(self.card_selector, timeout=self.listing_wait_ms)
        except PlaywrightError as e:
            # an empty first page ends the walk below
            self.logger.warning("listing_cards_not_rendered", url=config.url, error=str(e))

        seen_urls: Set[str] = set()
        for page_number in range(1, settings.MAX_LISTING_PAGES + 1):
            if self.budget_exhausted():
                break

            soup = BeautifulSoup(await page.content(), "html.parser")
            fresh = []
            for card in self.select_cards(soup, config):
                href = self.card_href(card)
                if href:
                    url = urljoin(self.base_url, href)
                    if url in seen_urls:
                        continue
                    seen_urls.add(url)
                fresh.append(card)

            self.logger.info("cards_found", page=page_number, count=len(fresh))
            if not fresh:
                break

            await self.process_cards(fresh, category, config, result)

            if not await self.next_page(page):
                break

    async def next_page(self, page: Page) -> bool:
        """Click the pager's next button; False when there is no next page."""
        button = await page.query_selector(self.next_button_selector)
        if button is None:
            return False
        if await button.is_disabled():
            return False
        classes = (await button.get_attribute("class") or "").split()
        if self.next_button_disabled_class and self.next_button_disabled_class in classes:
            return False

        await button.click()
        await page.wait_for_timeout(self.after_click_wait_ms)
        return True
