"""
ordersync — Checkout and Orders API

Checkout flow:
  1. Cart and delivery default to what is stored for the user
  2. Pipeline builds, validates, records pending and submits the order
  3. On confirmation the ordered entries are taken out of the stored cart
  4. The pipeline's ApiResponse is returned with its own status code
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from ordersync.api.deps import (
    envelope,
    get_cart_repository,
    get_checkout_repository,
    get_delivery_repository,
    to_http_error,
)
from ordersync.core.errors import OrderSyncError, StorageWriteError
from ordersync.models.order import Order
from ordersync.repositories.cart import CartRepository
from ordersync.repositories.checkout import CheckoutRepository
from ordersync.repositories.delivery import DeliveryRepository
from ordersync.schemas.checkout import CancelOrderBody, CheckoutBody, RetryOrderBody

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


@router.post("/checkout")
async def checkout(
    payload: CheckoutBody,
    checkout_repo: CheckoutRepository = Depends(get_checkout_repository),
    cart: CartRepository = Depends(get_cart_repository),
    delivery: DeliveryRepository = Depends(get_delivery_repository),
):
    cart_items = payload.cart_items if payload.cart_items is not None else await cart.get_cart_items()
    delivery_info = payload.delivery_info or await delivery.get_delivery_info()
    customer_info = payload.customer_info.model_dump(exclude_none=True) if payload.customer_info else {}

    result = await checkout_repo.process_checkout(cart_items, delivery_info, customer_info)

    if result.success and payload.clear_cart_on_success:
        try:
            await cart.remove_ordered_items(cart_items)
        except StorageWriteError as exc:
            logger.warning("Order placed but ordered items could not be removed from the cart: %s", exc)
    return envelope(result)


@router.get("/orders", response_model=list[Order], response_model_by_alias=True)
async def get_order_history(checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    """Confirmed and cancelled orders, most recent first."""
    return await checkout_repo.get_order_history()


@router.delete("/orders", status_code=status.HTTP_204_NO_CONTENT)
async def clear_order_history(checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    try:
        await checkout_repo.clear_order_history()
    except OrderSyncError as exc:
        raise to_http_error(exc)


@router.get("/orders/pending", response_model=list[Order], response_model_by_alias=True)
async def get_pending_orders(checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    return await checkout_repo.get_pending_orders()


@router.post("/orders/retry")
async def retry_order(payload: RetryOrderBody, checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    """Resubmit a client-held order with bounded retries."""
    try:
        result = await checkout_repo.retry_order(payload.order, payload.max_attempts)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return envelope(result)


@router.get("/orders/{order_id}", response_model=Order, response_model_by_alias=True)
async def get_order(order_id: str, checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    order = await checkout_repo.get_order_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order '{order_id}' not found.")
    return order


@router.get("/orders/{order_number}/status")
async def get_order_status(order_number: str, checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    """Live status from the ordering service."""
    return envelope(await checkout_repo.get_order_status(order_number))


@router.post("/orders/{order_number}/cancel")
async def cancel_order(
    order_number: str,
    payload: CancelOrderBody | None = None,
    checkout_repo: CheckoutRepository = Depends(get_checkout_repository),
):
    reason = payload.reason if payload else ""
    try:
        result = await checkout_repo.cancel_order(order_number, reason)
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return envelope(result)


@router.post("/orders/{order_id}/retry")
async def retry_failed_order(order_id: str, checkout_repo: CheckoutRepository = Depends(get_checkout_repository)):
    """Move a failed pending order back to pending and submit it once more."""
    try:
        result = await checkout_repo.retry_failed_order(order_id)
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return envelope(result)
