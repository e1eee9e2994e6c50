"""Business validation rules for product payloads."""

from __future__ import annotations

from decimal import Decimal

from catalog.core.result import Result
from catalog.core.result import success
from catalog.core.result import validation_failure
from catalog.db.models.product import CATEGORY_MAX_LENGTH
from catalog.db.models.product import NAME_MAX_LENGTH
from catalog.schemas.product import ProductCreate
from catalog.schemas.product import ProductUpdate

NAME_MIN_LENGTH = 3
MAX_PRICE = Decimal("1000000")


def validate_product(payload: ProductCreate | ProductUpdate) -> Result[bool]:
    """Collect every rule violation for ``payload``, in check order.

    Only the name checks short-circuit: a missing name suppresses its length
    checks. All other checks always run.
    """
    errors: list[str] = []

    name = payload.name
    if not name or not name.strip():
        errors.append("Product name is required")
    elif len(name) < NAME_MIN_LENGTH:
        errors.append(f"Product name must be at least {NAME_MIN_LENGTH} characters")
    elif len(name) > NAME_MAX_LENGTH:
        errors.append(f"Product name cannot exceed {NAME_MAX_LENGTH} characters")

    if payload.price <= 0:
        errors.append("Price must be greater than 0")

    if payload.price > MAX_PRICE:
        errors.append("Price cannot exceed 1,000,000")

    if payload.category and len(payload.category) > CATEGORY_MAX_LENGTH:
        errors.append(f"Category cannot exceed {CATEGORY_MAX_LENGTH} characters")

    if errors:
        return validation_failure(errors)
    return success(True)
