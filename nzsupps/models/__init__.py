"""SQLAlchemy models.

All models are imported here so metadata.create_all sees every table.
"""

from nzsupps.models.base import Base
from nzsupps.models.scraped_product import ScrapedProductRow

__all__ = [
    "Base",
    "ScrapedProductRow",
]
