"""SprintFit extractor.

Cards render brand, product and size as ``<br>``-separated lines inside
``.name``, so no brand list is needed.
"""

import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from nzsupps.scrapers.base import BaseHTMLExtractor, ListingConfig, PaginationMode, own_text
from nzsupps.scrapers.schema import Category, Product, Retailer
from nzsupps.scrapers.utils.normalizer import (
    capitalisation,
    clean_text,
    is_creatine_like,
    strip_weight_suffix,
)
from nzsupps.scrapers.utils.retry import SPRINTFIT_INTERSTITIAL_WAIT


_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)


def name_lines(name_el: Optional[Tag]) -> List[str]:
    """Split a card's name block into its non-empty lines.

    ``OPTIMUM NUTRITION<br><strong>GOLD STANDARD 100% WHEY<br>1LB</strong>``
    becomes ``["OPTIMUM NUTRITION", "GOLD STANDARD 100% WHEY", "1LB"]``.
    """
    if name_el is None:
        return []
    markup = _BR.sub("\n", name_el.decode_contents())
    text = BeautifulSoup(markup, "html.parser").get_text()
    return [line for line in (clean_text(part) for part in text.split("\n")) if line]


class SprintFitExtractor(BaseHTMLExtractor):
    """SprintFit protein and creatine category pages."""

    retailer = Retailer.SPRINTFIT
    store_brand = "SprintFit"
    base_url = "https://www.sprintfit.co.nz"
    listings = {
        Category.PROTEIN: ListingConfig(
            url=(
                "https://www.sprintfit.co.nz/products/category/321/protein-powder"
                "?pgNmbr=9&pgSize=999999999"
            ),
            pagination=PaginationMode.SINGLE_PAGE,
            lookup_flavours=True,
        ),
        Category.CREATINE: ListingConfig(
            url="https://www.sprintfit.co.nz/products/category/315/creatine",
            pagination=PaginationMode.SINGLE_PAGE,
            keyword_filter=is_creatine_like,
        ),
    }
    flavour_selector = '.variation-group select option[value]:not([value="null"])'
    interstitial_wait = SPRINTFIT_INTERSTITIAL_WAIT

    def select_cards(self, soup: BeautifulSoup, config: ListingConfig) -> List[Tag]:
        return soup.select(".product")

    async def parse_card(
        self, card: Tag, index: int, category: Category, config: ListingConfig
    ) -> Optional[Product]:
        anchor = card.select_one("a")
        url = self.absolute_url(anchor.get("href") if anchor else None)

        lines = name_lines(card.select_one(".name"))
        full_name = " ".join(lines)
        if not config.accepts(full_name):
            return None

        price_el = card.select_one(".price-area .price")
        if price_el is None:
            price_text = ""
        elif "special" in (price_el.get("class") or []):
            # sale markup nests the struck-out price in a child span
            price_text = own_text(price_el)
        else:
            price_text = price_el.get_text(strip=True)
        price = self.require_price(price_text, index, url)

        in_stock = card.select_one(".product-tag.tag-out-of-stock") is None

        brand = capitalisation(lines[0]) if lines else self.store_brand
        name = capitalisation(strip_weight_suffix(lines[1] if len(lines) > 1 else ""))

        flavours = await self.lookup_flavours(url) if config.lookup_flavours else None

        return self.build_product(
            brand=brand,
            name=name,
            price=price,
            in_stock=in_stock,
            url=url,
            weight_source=full_name,
            flavours=flavours,
        )
