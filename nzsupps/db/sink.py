"""Persistence sink: one transaction of snapshot inserts per batch."""

from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from nzsupps.core.exceptions import SinkError
from nzsupps.models import ScrapedProductRow
from nzsupps.scrapers.schema import Category, Product

logger = structlog.get_logger(__name__)


def _parse_scraped_at(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def product_to_row(product: Product, category: Category) -> ScrapedProductRow:
    """Map a Product onto a scraped_products row."""
    return ScrapedProductRow(
        retailer=product.retailer.value,
        category=Category(category).value,
        product_key=product.id,
        brand_scraped=product.brand,
        name_scraped=product.name,
        flavours_scraped=list(product.flavours or ()),
        weight_grams=product.weight_grams,
        amount_cents=product.price.amount_cents,
        currency_scraped=product.price.currency.value,
        url=product.url,
        in_stock=product.in_stock,
        scraped_at=_parse_scraped_at(product.scraped_at),
        json=product.to_dict(),
    )


async def save_products(
    products: List[Product],
    category: Category,
    session_factory: Optional[async_sessionmaker] = None,
) -> int:
    """Insert one snapshot row per product, all or nothing.

    Args:
        products: Products from a single extractor run
        category: Category they were scraped under
        session_factory: Session factory (defaults to the configured database)

    Returns:
        Number of rows written

    Raises:
        SinkError: If the batch could not be written; nothing is kept
    """
    if not products:
        return 0

    if session_factory is None:
        from nzsupps.db.session import async_session_factory

        session_factory = async_session_factory

    retailer = products[0].retailer.value
    rows = [product_to_row(p, category) for p in products]

    async with session_factory() as session:
        try:
            async with session.begin():
                session.add_all(rows)
        except SQLAlchemyError as e:
            logger.error("sink_batch_rolled_back", retailer=retailer, rows=len(rows), error=str(e))
            raise SinkError(retailer, str(e)) from e

    logger.info("products_saved", retailer=retailer, category=Category(category).value, rows=len(rows))
    return len(rows)
