"""Integration tests for the SQLAlchemy product repository on SQLite."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from catalog.core.error_codes import ErrorCode
from catalog.core.errors import StorageError
from catalog.db.base import SessionFactory
from catalog.db.base import check_database
from catalog.db.models.product import Product
from catalog.db.repository.products import SqlAlchemyProductRepository
from catalog.schemas.product import ProductCreate
from catalog.services.products import create_product_service
from catalog.services.products import get_product_service


@pytest.fixture
def repository(session_factory: SessionFactory) -> SqlAlchemyProductRepository:
    return SqlAlchemyProductRepository(session_factory)


def _new_product(name: str, *, price: str = "25.00") -> Product:
    now = datetime.now(timezone.utc)
    return Product(
        name=name,
        description=f"{name} description",
        price=Decimal(price),
        category="Tools",
        created_at=now,
        updated_at=now,
        is_active=True,
    )


def test_create_assigns_identity(repository: SqlAlchemyProductRepository) -> None:
    result = repository.create(_new_product("Widget"))

    assert result.is_success
    assert result.status_code == 201
    assert result.data.id == 1


def test_get_missing_id_returns_not_found_outcome(repository: SqlAlchemyProductRepository) -> None:
    result = repository.get_by_id(999)

    assert not result.is_success
    assert result.status_code == 404
    assert result.error_message == "Product with ID 999 not found"
    assert result.error_code == ErrorCode.PRODUCT_NOT_FOUND.value


def test_list_returns_only_active_products_newest_first(repository: SqlAlchemyProductRepository) -> None:
    first = repository.create(_new_product("Alpha")).data
    second = repository.create(_new_product("Bravo")).data
    repository.delete(first.id)

    result = repository.list()

    assert result.is_success
    assert [product.id for product in result.data] == [second.id]


def test_duplicate_active_name_is_rejected_until_soft_deleted(repository: SqlAlchemyProductRepository) -> None:
    original = repository.create(_new_product("Widget")).data

    duplicate = repository.create(_new_product("Widget"))
    assert duplicate.status_code == 400
    assert duplicate.error_message == "Product with name 'Widget' already exists"
    assert duplicate.error_code == ErrorCode.PRODUCT_NAME_DUPLICATE.value

    assert repository.create(_new_product("widget")).is_success

    assert repository.delete(original.id).is_success
    assert repository.create(_new_product("Widget")).is_success


def test_update_excludes_own_row_from_duplicate_check(repository: SqlAlchemyProductRepository) -> None:
    product = repository.create(_new_product("Widget")).data
    other = repository.create(_new_product("Gadget")).data

    product.price = Decimal("30.00")
    product.updated_at = datetime.now(timezone.utc)
    assert repository.update(product).is_success

    other.name = "Widget"
    clash = repository.update(other)
    assert clash.status_code == 400
    assert clash.error_code == ErrorCode.PRODUCT_NAME_DUPLICATE.value

    reloaded = repository.get_by_id(product.id).data
    assert reloaded.price == Decimal("30.00")
    assert reloaded.updated_at is not None


def test_update_missing_product_returns_not_found(repository: SqlAlchemyProductRepository) -> None:
    ghost = _new_product("Ghost")
    ghost.id = 404

    result = repository.update(ghost)

    assert result.status_code == 404


def test_delete_is_soft_and_second_delete_is_not_found(
    repository: SqlAlchemyProductRepository,
    session_factory: SessionFactory,
) -> None:
    product = repository.create(_new_product("Widget")).data

    assert repository.delete(product.id).data is True
    second = repository.delete(product.id)

    assert second.status_code == 404
    assert second.error_code == ErrorCode.PRODUCT_NOT_FOUND.value
    with session_factory() as session:
        row = session.get(Product, product.id)
        assert row is not None
        assert row.is_active is False
        assert row.updated_at is not None


def test_create_then_get_round_trips_request_fields(repository: SqlAlchemyProductRepository) -> None:
    payload = ProductCreate(name="Widget", description="Blue", price=Decimal("25.0"), category="Tools")

    created = create_product_service(repository, payload)
    fetched = get_product_service(repository, created.data.id)

    assert fetched.is_success
    assert fetched.data.id == created.data.id
    assert fetched.data.name == payload.name
    assert fetched.data.description == payload.description
    assert fetched.data.price == payload.price
    assert fetched.data.category == payload.category
    assert fetched.data.created_at is not None
    assert "updated_at" not in fetched.data.model_dump()


def test_storage_fault_during_list_becomes_500_outcome(broken_session_factory: SessionFactory) -> None:
    repository = SqlAlchemyProductRepository(broken_session_factory)

    result = repository.list()

    assert result.is_success is False
    assert result.status_code == 500
    assert result.error_message == "An error occurred while retrieving products"
    assert result.error_code == ErrorCode.DATABASE_ERROR.value


@pytest.mark.parametrize(
    ("operation", "message"),
    [
        (lambda repo: repo.get_by_id(3), "An error occurred while retrieving product with ID 3"),
        (lambda repo: repo.create(_new_product("Widget")), "An error occurred while creating the product"),
        (lambda repo: repo.delete(3), "An error occurred while deleting the product"),
    ],
)
def test_storage_faults_never_raise(broken_session_factory: SessionFactory, operation, message: str) -> None:
    result = operation(SqlAlchemyProductRepository(broken_session_factory))

    assert result.status_code == 500
    assert result.error_message == message


def test_driver_error_outside_sqlalchemy_becomes_500_outcome(
    repository: SqlAlchemyProductRepository,
    caplog: pytest.LogCaptureFixture,
) -> None:
    # sqlite3 raises a bare OverflowError for ids beyond 64 bits.
    result = repository.get_by_id(2**70)

    assert result.is_success is False
    assert result.status_code == 500
    assert result.error_message == f"An error occurred while retrieving product with ID {2**70}"
    assert result.error_code == ErrorCode.DATABASE_ERROR.value
    assert any(record.exc_info for record in caplog.records if record.levelname == "ERROR")


def test_sub_cent_price_is_rejected_before_storage() -> None:
    with pytest.raises(ValidationError):
        ProductCreate(name="Penny", price=Decimal("0.001"))


def test_created_at_is_utc_after_reload(repository: SqlAlchemyProductRepository) -> None:
    created = create_product_service(repository, ProductCreate(name="Widget", price=Decimal("25.00")))
    fetched = get_product_service(repository, created.data.id)

    assert fetched.data.created_at.tzinfo is not None
    assert fetched.data.created_at.utcoffset() == timedelta(0)
    assert fetched.data.created_at == created.data.created_at


def test_storage_fault_logs_details(
    broken_session_factory: SessionFactory,
    caplog: pytest.LogCaptureFixture,
) -> None:
    SqlAlchemyProductRepository(broken_session_factory).list()

    assert any(record.exc_info for record in caplog.records if record.levelname == "ERROR")


def test_check_database_raises_storage_error(broken_session_factory: SessionFactory, session_factory: SessionFactory) -> None:
    check_database(session_factory)

    with pytest.raises(StorageError) as excinfo:
        check_database(broken_session_factory)

    assert excinfo.value.error_code == ErrorCode.DATABASE_ERROR.value
    assert excinfo.value.__cause__ is not None
