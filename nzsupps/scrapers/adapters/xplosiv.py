"""Xplosiv extractor.

Magento storefront: listings paginate with ``?p=N`` and the brand index at
/brands supplies the known-brands list (also used for NoWhey, which carries
the same catalogue).
"""

import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from nzsupps.scrapers.base import BaseHTMLExtractor, ListingConfig, PaginationMode
from nzsupps.scrapers.schema import Category, Product, Retailer
from nzsupps.scrapers.utils.normalizer import (
    capitalisation,
    clean_text,
    is_creatine_like,
    strip_weight_suffix,
)


XPLOSIV_BRANDS_URL = "https://xplosiv.nz/brands"

# Magento configurable-product select; the empty value is the placeholder
SUPER_ATTRIBUTE_OPTIONS = 'select[name^="super_attribute"] option[value]:not([value=""])'

_BRAND_HREF = re.compile(r"/brands?/", re.IGNORECASE)
_STORE_BRAND = re.compile(r"xplosiv", re.IGNORECASE)


def parse_brand_labels(html: str) -> List[str]:
    """Read brand names from the Xplosiv brand index page.

    Each entry looks like ``<span class="ambrands-label">Musashi
    <span class="ambrands-count">12</span></span>``; the count is dropped.
    """
    soup = BeautifulSoup(html, "html.parser")
    names: List[str] = []

    for link in soup.select(".ambrands-brand-item a.ambrands-inner"):
        if not _BRAND_HREF.search(link.get("href") or ""):
            continue
        label = link.select_one(".ambrands-label")
        if label is None:
            continue
        for count in label.select(".ambrands-count"):
            count.decompose()
        name = clean_text(label.get_text())
        if name and name not in names:
            names.append(name)

    return names


class XplosivExtractor(BaseHTMLExtractor):
    """Xplosiv protein and creatine listings."""

    retailer = Retailer.XPLOSIV
    store_brand = "Xplosiv"
    base_url = "https://xplosiv.nz"
    listings = {
        Category.PROTEIN: ListingConfig(
            url="https://xplosiv.nz/protein-powder.html",
            pagination=PaginationMode.QUERY_PARAM,
            lookup_flavours=True,
        ),
        Category.CREATINE: ListingConfig(
            url="https://xplosiv.nz/muscle-growth-recovery/creatine.html",
            pagination=PaginationMode.QUERY_PARAM,
            keyword_filter=is_creatine_like,
        ),
    }
    flavour_selector = SUPER_ATTRIBUTE_OPTIONS

    async def collect_brands(self) -> List[str]:
        html = await self.fetch(XPLOSIV_BRANDS_URL)
        # house products fall back to the store brand instead
        return [name for name in parse_brand_labels(html) if not _STORE_BRAND.search(name)]

    def select_cards(self, soup: BeautifulSoup, config: ListingConfig) -> List[Tag]:
        return soup.select("li.product-item")

    async def parse_card(
        self, card: Tag, index: int, category: Category, config: ListingConfig
    ) -> Optional[Product]:
        anchor = card.select_one("a")
        url = self.absolute_url(anchor.get("href") if anchor else None)

        title_el = card.select_one(".product-item-link")
        title = clean_text(title_el.get_text()) if title_el else ""
        if not config.accepts(title):
            return None

        # data-price-amount="72.95" on the finalPrice wrapper is the sale price when on sale
        price_box = card.select_one('[data-role="priceBox"]')
        final = price_box.select_one('[data-price-type="finalPrice"]') if price_box else None
        price = self.require_price(final.get("data-price-amount") if final else None, index, url)

        in_stock = card.select_one("button.action.tocart, #product-addtocart-button") is not None

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
