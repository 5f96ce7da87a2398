"""Snapshot rows of scraped products."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nzsupps.models.base import Base


class ScrapedProductRow(Base):
    """One product as seen by one scrape.

    Rows are appended, never updated, so price history falls out of the
    table directly. ``product_key`` is the brand:name:weight id and is not
    unique across retailers.
    """

    __tablename__ = "scraped_products"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )

    retailer: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    product_key: Mapped[str] = mapped_column(String(500), nullable=False)

    brand_scraped: Mapped[str] = mapped_column(String(200), nullable=False)
    name_scraped: Mapped[str] = mapped_column(String(500), nullable=False)
    flavours_scraped: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    weight_grams: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency_scraped: Mapped[str] = mapped_column(String(3), nullable=False, default="NZD")

    url: Mapped[str] = mapped_column(Text, nullable=False)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False)
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Full Product.to_dict() payload
    json: Mapped[dict] = mapped_column(JSON, nullable=False)

    __table_args__ = (
        Index("idx_scraped_products_key_scraped", "product_key", "scraped_at"),
        Index("idx_scraped_products_category_retailer", "category", "retailer"),
    )

    def __repr__(self) -> str:
        return f"<ScrapedProductRow {self.retailer} {self.product_key} {self.amount_cents}>"
