"""Chemist Warehouse extractor.

The sports-nutrition listing is rendered client-side and paged with a JS
"next" button, so it is walked in the browser. Protein and creatine share the
listing and are separated by keyword. Product pages expose no variant
control, so flavours are never looked up.
"""

import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from nzsupps.core.exceptions import CardError
from nzsupps.scrapers.base import BaseBrowserExtractor, ListingConfig, PaginationMode
from nzsupps.scrapers.schema import Category, Product, Retailer
from nzsupps.scrapers.utils.brands import group_brand_variants
from nzsupps.scrapers.utils.normalizer import (
    capitalisation,
    clean_text,
    is_creatine_like,
    is_protein_like,
    strip_weight_suffix,
)


BRANDS_URL = "https://www.chemistwarehouse.co.nz/v1/shop-online/1255/category"
LISTING_URL = "https://www.chemistwarehouse.co.nz/shop-online/1255/sports-nutrition"

_SOLD_OUT = re.compile(r"sold out|out of stock|unavailable", re.IGNORECASE)


def parse_brand_names(html: str) -> List[str]:
    """Read and group brand names from the category side-panel fragment."""
    soup = BeautifulSoup(html, "html.parser")
    names = [
        clean_text(el.get_text())
        for el in soup.select(".DataListCategory a.category-entry .category-name")
    ]
    return group_brand_variants(name for name in names if name)


class ChemistWarehouseExtractor(BaseBrowserExtractor):
    """Chemist Warehouse sports-nutrition listing."""

    retailer = Retailer.CHEMIST_WAREHOUSE
    store_brand = "Chemist Warehouse"
    base_url = "https://www.chemistwarehouse.co.nz"
    listings = {
        Category.PROTEIN: ListingConfig(
            url=LISTING_URL,
            pagination=PaginationMode.PAGER_BUTTON,
            keyword_filter=is_protein_like,
        ),
        Category.CREATINE: ListingConfig(
            url=LISTING_URL,
            pagination=PaginationMode.PAGER_BUTTON,
            keyword_filter=is_creatine_like,
        ),
    }

    card_selector = "a.product__container"
    next_button_selector = "button.pager__button--next"
    next_button_disabled_class = "pager__button--disabled"

    async def collect_brands(self) -> List[str]:
        return parse_brand_names(await self.fetch(BRANDS_URL))

    def select_cards(self, soup: BeautifulSoup, config: ListingConfig) -> List[Tag]:
        return soup.select(self.card_selector)

    async def parse_card(
        self, card: Tag, index: int, category: Category, config: ListingConfig
    ) -> Optional[Product]:
        url = self.absolute_url(card.get("href"))

        title_el = card.select_one(".product__title")
        title = clean_text(title_el.get_text()) if title_el else ""
        if not title:
            raise CardError(f"No name, skipping #{index} url={url}")
        if not config.accepts(title):
            return None

        # <span class="product__price-current">$95.99</span>, mirrored in data-analytics-price
        price_el = card.select_one(".product__price-current")
        price_text = price_el.get_text(strip=True) if price_el else ""
        if not price_text and card.get("data-analytics-price"):
            price_text = f"${card['data-analytics-price']}"
        price = self.require_price(price_text, index, url)

        has_buy_button = card.select_one(".product-buy-button") is not None
        in_stock = has_buy_button and not _SOLD_OUT.search(card.get_text(" "))

        split = self.resolve_brand(title)

        return self.build_product(
            brand=split.brand,
            name=capitalisation(strip_weight_suffix(split.base_name)),
            price=price,
            in_stock=in_stock,
            url=url,
            weight_source=title,
        )
