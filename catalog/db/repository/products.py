"""Repository for product entities.

Every operation returns a ``Result``. Expected misses and duplicates come back
as failed outcomes, and storage faults are logged here and reduced to a
generic 500 outcome so nothing storage-specific leaks to callers.
"""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
import logging
from typing import Protocol

from sqlalchemy import func
from sqlalchemy import select
from sqlalchemy import update
from sqlalchemy.orm import Session

from catalog.core.error_codes import ErrorCode
from catalog.core.result import Err
from catalog.core.result import Result
from catalog.core.result import created
from catalog.core.result import failure
from catalog.core.result import not_found
from catalog.core.result import success
from catalog.db.base import SessionFactory
from catalog.db.models.product import Product

logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Data-access contract consumed by the product services."""

    def list(self) -> Result[list[Product]]: ...

    def get_by_id(self, product_id: int) -> Result[Product]: ...

    def create(self, product: Product) -> Result[Product]: ...

    def update(self, product: Product) -> Result[bool]: ...

    def delete(self, product_id: int) -> Result[bool]: ...


def _not_found(product_id: int) -> Err:
    return not_found(f"Product with ID {product_id} not found", error_code=ErrorCode.PRODUCT_NOT_FOUND.value)


def _storage_failure(message: str) -> Err:
    return failure(message, 500, error_code=ErrorCode.DATABASE_ERROR.value)


class SqlAlchemyProductRepository:
    """``ProductRepository`` backed by a SQLAlchemy session factory.

    Each call opens one session and closes it on every exit path.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def list(self) -> Result[list[Product]]:
        try:
            with self._session_factory() as session:
                stmt = (
                    select(Product)
                    .where(Product.is_active.is_(True))
                    .order_by(Product.created_at.desc(), Product.id.desc())
                )
                return success(list(session.scalars(stmt)))
        except Exception:
            logger.exception("Error retrieving all products")
            return _storage_failure("An error occurred while retrieving products")

    def get_by_id(self, product_id: int) -> Result[Product]:
        try:
            with self._session_factory() as session:
                product = self._get_active(session, product_id)
                if product is None:
                    return _not_found(product_id)
                return success(product)
        except Exception:
            logger.exception("Error retrieving product", extra={"product_id": product_id})
            return _storage_failure(f"An error occurred while retrieving product with ID {product_id}")

    def create(self, product: Product) -> Result[Product]:
        try:
            with self._session_factory() as session:
                if self._name_taken(session, product.name):
                    return self._duplicate(product.name)

                session.add(product)
                session.commit()
                logger.info("Product created with ID %s", product.id, extra={"product_id": product.id})
                return created(product)
        except Exception:
            logger.exception("Error creating product", extra={"product_name": product.name})
            return _storage_failure("An error occurred while creating the product")

    def update(self, product: Product) -> Result[bool]:
        try:
            with self._session_factory() as session:
                if self._get_active(session, product.id) is None:
                    return _not_found(product.id)

                if self._name_taken(session, product.name, exclude_id=product.id):
                    return self._duplicate(product.name)

                stmt = (
                    update(Product)
                    .where(Product.id == product.id)
                    .values(
                        name=product.name,
                        description=product.description,
                        price=product.price,
                        category=product.category,
                        updated_at=product.updated_at,
                    )
                )
                affected = session.execute(stmt).rowcount
                session.commit()
                if affected > 0:
                    logger.info("Product with ID %s updated", product.id, extra={"product_id": product.id})
                    return success(True)
                return failure("Product could not be updated", 500)
        except Exception:
            logger.exception("Error updating product", extra={"product_id": product.id})
            return _storage_failure("An error occurred while updating the product")

    def delete(self, product_id: int) -> Result[bool]:
        try:
            with self._session_factory() as session:
                if self._get_active(session, product_id) is None:
                    return _not_found(product_id)

                stmt = (
                    update(Product)
                    .where(Product.id == product_id)
                    .values(is_active=False, updated_at=datetime.now(timezone.utc))
                )
                affected = session.execute(stmt).rowcount
                session.commit()
                if affected > 0:
                    logger.info("Product with ID %s deleted", product_id, extra={"product_id": product_id})
                    return success(True)
                return failure("Product could not be deleted", 500)
        except Exception:
            logger.exception("Error deleting product", extra={"product_id": product_id})
            return _storage_failure("An error occurred while deleting the product")

    @staticmethod
    def _get_active(session: Session, product_id: int) -> Product | None:
        stmt = select(Product).where(Product.id == product_id, Product.is_active.is_(True))
        return session.scalars(stmt).first()

    @staticmethod
    def _name_taken(session: Session, name: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(func.count()).select_from(Product).where(
            Product.name == name,
            Product.is_active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return session.scalar(stmt) > 0

    @staticmethod
    def _duplicate(name: str) -> Err:
        logger.info("Rejected duplicate product name", extra={"product_name": name})
        return failure(
            f"Product with name '{name}' already exists",
            400,
            error_code=ErrorCode.PRODUCT_NAME_DUPLICATE.value,
        )
