"""NZProtein extractor.

Own-brand store: every product is branded "NZProtein". Protein comes from a
single static category page; creatine products sit among general supplements
and are located by their headings.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from nzsupps.core.exceptions import CardError
from nzsupps.scrapers.base import BaseHTMLExtractor, ListingConfig, PaginationMode, own_text
from nzsupps.scrapers.schema import Category, Product, Retailer
from nzsupps.scrapers.utils.normalizer import (
    capitalisation,
    clean_text,
    dollar_amounts,
    is_creatine_like,
    strip_weight_suffix,
)


_CARD_SELECTOR = ".product-wrap"
_CARD_CLASSES = {"productgrid--item", "productgrid__item", "ProductItem"}


def _is_card_container(tag: Tag) -> bool:
    return tag.name in ("article", "li") or bool(set(tag.get("class") or []) & _CARD_CLASSES)


class NZProteinExtractor(BaseHTMLExtractor):
    """NZProtein protein and creatine listings."""

    retailer = Retailer.NZPROTEIN
    store_brand = "NZProtein"
    base_url = "https://www.nzprotein.co.nz"
    listings = {
        Category.PROTEIN: ListingConfig(
            url="https://www.nzprotein.co.nz/category/protein-powders",
            pagination=PaginationMode.SINGLE_PAGE,
            lookup_flavours=True,
        ),
        Category.CREATINE: ListingConfig(
            url="https://www.nzprotein.co.nz/category/supplements",
            pagination=PaginationMode.HEADING_SCAN,
            keyword_filter=is_creatine_like,
        ),
    }
    flavour_selector = ".flavours-selection .flavour-info h5"

    def select_cards(self, soup: BeautifulSoup, config: ListingConfig) -> List[Tag]:
        if config.pagination == PaginationMode.HEADING_SCAN:
            return [h for h in soup.select("h3") if config.accepts(h.get_text(strip=True))]
        return soup.select(_CARD_SELECTOR)

    async def parse_card(
        self, card: Tag, index: int, category: Category, config: ListingConfig
    ) -> Optional[Product]:
        if config.pagination == PaginationMode.HEADING_SCAN:
            return self._parse_heading(card, index, config)

        title_el = card.select_one('h3[data-mh="product-title"]')
        anchor = card.select_one("a")
        url = self.absolute_url(anchor.get("href") if anchor else None)
        title = clean_text(title_el.get_text()) if title_el else ""

        # <div class="product-price h3"> $42.00 <span>(NZD)</span></div>
        price = self.require_price(own_text(card.select_one(".product-price.h3")), index, url)
        in_stock = card.select_one(".btn-no-stock") is None

        flavours = await self.lookup_flavours(url) if config.lookup_flavours else None

        return self.build_product(
            brand=self.store_brand,
            name=capitalisation(strip_weight_suffix(title)),
            price=price,
            in_stock=in_stock,
            url=url,
            weight_source=title,
            flavours=flavours,
        )

    def _parse_heading(self, heading: Tag, index: int, config: ListingConfig) -> Optional[Product]:
        title = clean_text(heading.get_text())
        if not title:
            raise CardError(f"Empty creatine title at index {index}")
        if not config.accepts(title):
            return None

        card = heading.find_parent(_is_card_container)
        if card is None:
            card = heading.parent

        anchor = (
            card.select_one('a[href*="creatine"]')
            or heading.select_one("a[href]")
            or card.select_one("a[href]")
        )
        if anchor is None:
            raise CardError(f'No href for creatine #{index} (title="{title}")')
        url = self.absolute_url(anchor["href"])

        # Creatine cards have no dedicated price node; take the last amount shown
        amounts = dollar_amounts(card.get_text(" "))
        price = self.require_price(amounts[-1] if amounts else "", index, url)

        return self.build_product(
            brand=self.store_brand,
            name=capitalisation(strip_weight_suffix(title, loose=True)),
            price=price,
            # a listed price is the only stock signal on these cards
            in_stock=True,
            url=url,
            weight_source=title,
        )
