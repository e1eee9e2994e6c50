"""Product API routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Request
from fastapi import Response
from fastapi.responses import JSONResponse

from catalog.core.config import Settings
from catalog.core.errors import BusinessRuleError
from catalog.core.error_codes import ErrorCode
from catalog.core.errors import ErrorTranslator
from catalog.core.result import Err
from catalog.db.repository.products import ProductRepository
from catalog.db.repository.products import SqlAlchemyProductRepository
from catalog.schemas.product import Product
from catalog.schemas.product import ProductCreate
from catalog.schemas.product import ProductListResponse
from catalog.schemas.product import ProductUpdate
from catalog.services.products import create_product_service
from catalog.services.products import delete_product_service
from catalog.services.products import get_product_service
from catalog.services.products import list_products_service
from catalog.services.products import update_product_service

router = APIRouter(prefix="/api/v1", tags=["products"])


def get_product_repository(request: Request) -> ProductRepository:
    """Build a repository over the application's session factory."""
    return SqlAlchemyProductRepository(request.app.state.session_factory)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_error_translator(request: Request) -> ErrorTranslator:
    return request.app.state.error_translator


def _failure_response(translator: ErrorTranslator, outcome: Err) -> JSONResponse:
    return translator.render(translator.from_outcome(outcome))


@router.get("/products", response_model=ProductListResponse)
def list_products_endpoint(
    repository: ProductRepository = Depends(get_product_repository),
    translator: ErrorTranslator = Depends(get_error_translator),
) -> ProductListResponse | JSONResponse:
    """List active products."""
    result = list_products_service(repository)
    if not result.is_success:
        return _failure_response(translator, result)
    return ProductListResponse(items=result.data)


@router.get("/products/{product_id}", response_model=Product)
def get_product_endpoint(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository),
    translator: ErrorTranslator = Depends(get_error_translator),
) -> Product | JSONResponse:
    """Get a single product by id."""
    result = get_product_service(repository, product_id)
    if not result.is_success:
        return _failure_response(translator, result)
    return result.data


@router.post("/products", response_model=Product, status_code=201)
def create_product_endpoint(
    payload: ProductCreate,
    repository: ProductRepository = Depends(get_product_repository),
    translator: ErrorTranslator = Depends(get_error_translator),
) -> Product | JSONResponse:
    """Create a product."""
    result = create_product_service(repository, payload)
    if not result.is_success:
        return _failure_response(translator, result)
    return result.data


@router.put("/products/{product_id}", status_code=204)
def update_product_endpoint(
    product_id: int,
    payload: ProductUpdate,
    repository: ProductRepository = Depends(get_product_repository),
    translator: ErrorTranslator = Depends(get_error_translator),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Replace a product's mutable fields."""
    if payload.id != product_id:
        raise BusinessRuleError("Invalid product ID.", ErrorCode.PRODUCT_ID_MISMATCH)

    result = update_product_service(
        repository,
        payload,
        enforce_validation=settings.enforce_validation_on_update,
    )
    if not result.is_success:
        return _failure_response(translator, result)
    return Response(status_code=204)


@router.delete("/products/{product_id}", status_code=204)
def delete_product_endpoint(
    product_id: int,
    repository: ProductRepository = Depends(get_product_repository),
    translator: ErrorTranslator = Depends(get_error_translator),
) -> Response:
    """Soft-delete a product."""
    result = delete_product_service(repository, product_id)
    if not result.is_success:
        return _failure_response(translator, result)
    return Response(status_code=204)
