"""NoWhey extractor.

The home page is one long deals grid; creatine is picked out of it by
keyword. Brands come from the Xplosiv brand index.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from nzsupps.scrapers.adapters.xplosiv import (
    SUPER_ATTRIBUTE_OPTIONS,
    XPLOSIV_BRANDS_URL,
    parse_brand_labels,
)
from nzsupps.scrapers.base import BaseHTMLExtractor, ListingConfig, PaginationMode
from nzsupps.scrapers.schema import Category, Product, Retailer
from nzsupps.scrapers.utils.normalizer import (
    capitalisation,
    clean_text,
    is_creatine_like,
    strip_weight_suffix,
)


# Tried in order: sale price, "elsewhere" price, plain price
_PRICE_SELECTORS = (
    ".deal_price_now .price",
    ".deal_price_before_wrap .price",
    ".price-area .price",
)


class NoWheyExtractor(BaseHTMLExtractor):
    """NoWhey deals grid."""

    retailer = Retailer.NOWHEY
    store_brand = "NoWhey"
    base_url = "https://nowhey.co.nz"
    listings = {
        Category.PROTEIN: ListingConfig(
            url="https://nowhey.co.nz/",
            pagination=PaginationMode.SINGLE_PAGE,
            lookup_flavours=True,
        ),
        Category.CREATINE: ListingConfig(
            url="https://nowhey.co.nz/",
            pagination=PaginationMode.SINGLE_PAGE,
            keyword_filter=is_creatine_like,
        ),
    }
    flavour_selector = SUPER_ATTRIBUTE_OPTIONS

    async def collect_brands(self) -> List[str]:
        html = await self.fetch(XPLOSIV_BRANDS_URL)
        return parse_brand_labels(html)

    def select_cards(self, soup: BeautifulSoup, config: ListingConfig) -> List[Tag]:
        return soup.select(".deal_body")

    async def parse_card(
        self, card: Tag, index: int, category: Category, config: ListingConfig
    ) -> Optional[Product]:
        anchor = card.select_one("a")
        url = self.absolute_url(anchor.get("href") if anchor else None)

        title_el = card.select_one(".deal_title")
        title = clean_text(title_el.get_text()) if title_el else ""
        if not config.accepts(title):
            return None

        price_wrap = card.select_one(".deal_price_wrap")
        price_text = ""
        if price_wrap is not None:
            for selector in _PRICE_SELECTORS:
                node = price_wrap.select_one(selector)
                price_text = node.get_text(strip=True) if node else ""
                if price_text:
                    break
        price = self.require_price(price_text, index, url)

        in_stock = price_wrap is not None and bool(price_wrap.get_text(strip=True))

        split = self.resolve_brand(title)
        flavours = await self.lookup_flavours(url) if config.lookup_flavours else None

        return self.build_product(
            brand=split.brand,
            name=capitalisation(strip_weight_suffix(split.base_name)),
            price=price,
            in_stock=in_stock,
            url=url,
            weight_source=title,
            flavours=flavours,
        )
