"""
ordersync — Dependency providers and error mapping for the HTTP surface

Repositories are process-wide singletons: a MutationQueue only orders the
work issued through its own instance.
"""
from functools import lru_cache

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from ordersync.clients.order_api import OrderApiClient
from ordersync.core.config import get_settings
from ordersync.core.errors import (
    BusinessRejection,
    MenuUnavailableError,
    NetworkError,
    NotFoundError,
    OrderStateError,
    OrderSyncError,
    RetryExhaustedError,
    StorageWriteError,
    ValidationFailure,
)
from ordersync.core.redis_client import close_redis, get_redis_store
from ordersync.core.storage import KeyValueStore
from ordersync.models.checkout import ApiResponse
from ordersync.repositories.cart import CartRepository
from ordersync.repositories.checkout import CheckoutRepository
from ordersync.repositories.delivery import DeliveryRepository
from ordersync.repositories.menu import MenuRepository


def get_store() -> KeyValueStore:
    return get_redis_store(get_settings())


@lru_cache()
def get_api_client() -> OrderApiClient:
    return OrderApiClient(get_settings())


@lru_cache()
def get_cart_repository() -> CartRepository:
    return CartRepository(get_store())


@lru_cache()
def get_delivery_repository() -> DeliveryRepository:
    return DeliveryRepository(get_store())


@lru_cache()
def get_menu_repository() -> MenuRepository:
    return MenuRepository(get_store(), get_api_client(), get_settings())


@lru_cache()
def get_checkout_repository() -> CheckoutRepository:
    return CheckoutRepository(get_store(), get_api_client(), get_settings())


_PROVIDERS = (
    get_api_client,
    get_cart_repository,
    get_delivery_repository,
    get_menu_repository,
    get_checkout_repository,
)


async def shutdown() -> None:
    if get_api_client.cache_info().currsize:
        await get_api_client().aclose()
    for provider in _PROVIDERS:
        provider.cache_clear()
    await close_redis()


def to_http_error(exc: OrderSyncError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, OrderStateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ValidationFailure):
        return HTTPException(
            status_code=422,
            detail={"message": "Order validation failed", "errors": exc.errors},
        )
    if isinstance(exc, RetryExhaustedError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc), "attempts": exc.attempts},
        )
    if isinstance(exc, NetworkError):
        code = status.HTTP_504_GATEWAY_TIMEOUT if exc.status_code == 408 else status.HTTP_503_SERVICE_UNAVAILABLE
        return HTTPException(status_code=code, detail=str(exc))
    if isinstance(exc, BusinessRejection):
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    if isinstance(exc, (MenuUnavailableError, StorageWriteError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def envelope(result: ApiResponse) -> JSONResponse:
    """Send an ApiResponse with its own status code."""
    return JSONResponse(content=result.model_dump(mode="json"), status_code=result.status_code)
