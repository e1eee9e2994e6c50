"""Service helpers for product API operations.

Each function sequences validation, the repository call and outcome mapping.
None of them raise: upstream failures are returned unchanged.
"""

from __future__ import annotations

from datetime import datetime
from datetime import timezone

from catalog.core.result import Result
from catalog.core.result import created
from catalog.core.result import success
from catalog.core.result import validation_failure
from catalog.db.models.product import Product
from catalog.db.repository.products import ProductRepository
from catalog.schemas.product import Product as ProductSchema
from catalog.schemas.product import ProductCreate
from catalog.schemas.product import ProductUpdate
from catalog.services.validation import validate_product


def _to_schema(product: Product) -> ProductSchema:
    return ProductSchema.model_validate(product)


def list_products_service(repository: ProductRepository) -> Result[list[ProductSchema]]:
    """List active products in their external shape."""
    return repository.list().map(lambda products: [_to_schema(product) for product in products])


def get_product_service(repository: ProductRepository, product_id: int) -> Result[ProductSchema]:
    """Fetch one active product."""
    return repository.get_by_id(product_id).map(_to_schema)


def create_product_service(repository: ProductRepository, payload: ProductCreate) -> Result[ProductSchema]:
    """Validate and persist a new product."""
    validation = validate_product(payload)
    if not validation.is_success:
        return validation_failure(validation.validation_errors or ())

    now = datetime.now(timezone.utc)
    product = Product(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        category=payload.category,
        created_at=now,
        updated_at=now,
        is_active=True,
    )

    result = repository.create(product)
    if not result.is_success:
        return result
    return created(_to_schema(result.data))


def update_product_service(
    repository: ProductRepository,
    payload: ProductUpdate,
    *,
    enforce_validation: bool = False,
) -> Result[bool]:
    """Replace the mutable fields of an existing product.

    Creation rules are only applied when ``enforce_validation`` is set.
    """
    if enforce_validation:
        validation = validate_product(payload)
        if not validation.is_success:
            return validation_failure(validation.validation_errors or ())

    existing = repository.get_by_id(payload.id)
    if not existing.is_success:
        return existing

    product = existing.data
    product.name = payload.name
    product.description = payload.description
    product.price = payload.price
    product.category = payload.category
    product.updated_at = datetime.now(timezone.utc)

    result = repository.update(product)
    if not result.is_success:
        return result
    return success(True)


def delete_product_service(repository: ProductRepository, product_id: int) -> Result[bool]:
    """Soft-delete a product."""
    result = repository.delete(product_id)
    if not result.is_success:
        return result
    return success(True)
