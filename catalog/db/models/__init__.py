"""Model module imports for SQLAlchemy metadata registration."""

from catalog.db.models.product import Base
from catalog.db.models.product import Product

__all__ = [
    "Base",
    "Product",
]
