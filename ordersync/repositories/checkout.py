"""
ordersync — Checkout repository (order submission pipeline)

Flow for process_checkout:
  1. Build the Order aggregate from cart, delivery and customer data (pure)
  2. Validate it; report every violated rule at once, before any IO
  3. Append it to the pending list so a crash mid-submit leaves it recoverable
  4. Submit to the ordering service
  5. Confirmed → stamp server ids, move from pending to history
  6. Rejected  → mark failed, keep in pending, hand the rejection back
  7. Exception → mark failed, keep in pending, wrap the message

The pending and history lists are each rewritten as whole JSON blobs, so
every mutation of either goes through this repository's MutationQueue.
"""
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ordersync.clients.order_api import OrderApiClient
from ordersync.core.config import Settings, get_settings
from ordersync.core.errors import (
    BusinessRejection,
    NetworkError,
    NotFoundError,
    OrderStateError,
    OrderSyncError,
    StorageWriteError,
    ValidationFailure,
)
from ordersync.core.retry import retry_async
from ordersync.core.serial import MutationQueue, serialized
from ordersync.core.storage import (
    ORDER_HISTORY_KEY,
    PENDING_ORDERS_KEY,
    KeyValueStore,
    read_json,
    write_json,
)
from ordersync.models.checkout import ApiResponse, CheckoutResponse
from ordersync.models.delivery import DeliveryInfo
from ordersync.models.order import Order, OrderStatus
from ordersync.validation import validate_order

logger = logging.getLogger(__name__)


class _AttemptFailed(OrderSyncError):
    """One submission attempt inside retry_order did not confirm the order."""


class CheckoutRepository:
    def __init__(self, store: KeyValueStore, api: OrderApiClient, settings: Settings | None = None):
        self.store = store
        self.api = api
        self.settings = settings or get_settings()
        self._queue = MutationQueue("orders")

    # ── Bookkeeping lists ─────────────────────────────────────────────────────
    async def _load(self, key: str) -> list[Order]:
        data = await read_json(self.store, key, default=[])
        if not isinstance(data, list):
            logger.warning("Order list %s is not a list, treating as empty", key)
            return []
        orders = []
        for entry in data:
            try:
                orders.append(Order.from_storage(entry))
            except ValidationError:
                logger.warning("Skipping unreadable order entry in %s", key)
        return orders

    async def _dump(self, key: str, orders: list[Order]) -> None:
        await write_json(self.store, key, [order.to_storage() for order in orders])

    @serialized()
    async def _upsert_pending(self, order: Order) -> None:
        pending = await self._load(PENDING_ORDERS_KEY)
        for index, existing in enumerate(pending):
            if existing.local_id == order.local_id:
                pending[index] = order
                break
        else:
            pending.append(order)
        await self._dump(PENDING_ORDERS_KEY, pending)

    @serialized()
    async def _record_confirmed(self, order: Order) -> None:
        history = [o for o in await self._load(ORDER_HISTORY_KEY) if o.local_id != order.local_id]
        history.insert(0, order)
        await self._dump(ORDER_HISTORY_KEY, history[: self.settings.ORDER_HISTORY_LIMIT])

        # History is written first: if this second write fails the pending
        # entry stays behind as evidence the order needs reconciling.
        pending = await self._load(PENDING_ORDERS_KEY)
        await self._dump(PENDING_ORDERS_KEY, [o for o in pending if o.local_id != order.local_id])

    @serialized()
    async def _replace_in_history(self, order: Order) -> None:
        history = await self._load(ORDER_HISTORY_KEY)
        history = [order if o.local_id == order.local_id else o for o in history]
        await self._dump(ORDER_HISTORY_KEY, history)

    @serialized()
    async def clear_order_history(self) -> bool:
        await self._dump(ORDER_HISTORY_KEY, [])
        return True

    # ── Pipeline ──────────────────────────────────────────────────────────────
    def build_order(
        self,
        cart_items: list[dict[str, Any]],
        delivery_info: DeliveryInfo | Mapping[str, Any] | None,
        customer_info: Mapping[str, Any] | None = None,
    ) -> Order:
        return Order.from_cart_and_delivery(
            cart_items,
            delivery_info,
            customer_info or {},
            tax_rate=self.settings.TAX_RATE,
            delivery_fee=self.settings.DELIVERY_FEE,
            currency=self.settings.CURRENCY,
        )

    async def process_checkout(
        self,
        cart_items: list[dict[str, Any]],
        delivery_info: DeliveryInfo | Mapping[str, Any] | None,
        customer_info: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        order = self.build_order(cart_items, delivery_info, customer_info)

        errors = validate_order(order)
        if errors:
            logger.info("Checkout rejected locally: %s", errors)
            return ApiResponse.error(f"Order validation failed: {', '.join(errors)}", 400)

        try:
            await self._upsert_pending(order)
        except StorageWriteError as exc:
            logger.error("Could not persist pending order %s: %s", order.local_id, exc)
            return ApiResponse.error(f"Checkout processing failed: {exc}", 500)

        logger.info("Submitting order %s (%d items, total %.2f)", order.local_id, order.item_count, order.total)
        return await self._submit(order)

    async def _submit(self, order: Order) -> ApiResponse:
        """Steps 4–7 for one attempt. Never raises for remote failures."""
        try:
            reply = await self.api.submit_checkout(order)
        except Exception as exc:
            logger.warning("Checkout for %s failed: %s", order.local_id, exc)
            await self._mark_failed(order, str(exc))
            return ApiResponse.error(f"Checkout processing failed: {exc}", 500)

        if reply.is_success():
            return await self._confirm(order, reply)

        message = reply.error_message()
        logger.info("Checkout for %s rejected by service: %s", order.local_id, message)
        await self._mark_failed(order, message)
        return ApiResponse.error(
            message,
            reply.http_status if reply.http_status >= 400 else 400,
            data=reply.model_dump(),
            error_code=reply.error_code,
        )

    async def _confirm(self, order: Order, reply: CheckoutResponse) -> ApiResponse:
        order.mark_confirmed(
            order_number=reply.order_number or reply.confirmation_number,
            order_id=reply.order_id,
            estimated_delivery_time=reply.estimated_delivery_time,
        )
        try:
            await self._record_confirmed(order)
        except StorageWriteError as exc:
            logger.error(
                "Order %s confirmed as %s but bookkeeping failed: %s",
                order.local_id, order.order_number, exc,
            )
        logger.info("Order %s confirmed as %s", order.local_id, order.order_number)
        return ApiResponse.ok(
            {"order": order.to_storage(), "checkoutResponse": reply.model_dump()},
            "Order placed successfully",
        )

    async def _mark_failed(self, order: Order, reason: str) -> None:
        order.mark_failed(reason)
        try:
            await self._upsert_pending(order)
        except StorageWriteError as exc:
            logger.error("Could not record failure for order %s: %s", order.local_id, exc)

    async def retry_order(self, order: Order | Mapping[str, Any], max_attempts: int | None = None) -> ApiResponse:
        """
        Resubmit an order up to `max_attempts` times, stopping at the first
        confirmation. Raises RetryExhaustedError when every attempt fails and
        ValidationFailure, without any IO, when the order itself is invalid.
        """
        attempts = self.settings.CHECKOUT_MAX_ATTEMPTS if max_attempts is None else max_attempts
        if isinstance(order, Order):
            order = order.model_copy(deep=True)
        else:
            order = Order.from_storage(order)
        if order.status in (OrderStatus.CONFIRMED, OrderStatus.CANCELLED):
            raise OrderStateError(f"Order {order.local_id} is already {order.status.value}.")
        errors = validate_order(order)
        if errors:
            raise ValidationFailure(errors)

        async def attempt(number: int) -> ApiResponse:
            if order.status == OrderStatus.FAILED:
                order.transition(OrderStatus.PENDING)
            result = await self._submit(order)
            if not result.success:
                raise _AttemptFailed(result.message)
            return result

        return await retry_async(
            attempt,
            max_attempts=attempts,
            delay_seconds=self.settings.CHECKOUT_RETRY_DELAY_SECONDS,
            retry_on=(_AttemptFailed,),
            label="submit order",
        )

    async def retry_failed_order(self, order_id: str) -> ApiResponse:
        pending = await self._load(PENDING_ORDERS_KEY)
        order = next(
            (o for o in pending if o.matches(order_id) and o.status == OrderStatus.FAILED), None
        )
        if order is None:
            raise NotFoundError(f"No failed order '{order_id}' awaiting retry.")

        order.transition(OrderStatus.PENDING)
        await self._upsert_pending(order)
        return await self._submit(order)

    # ── Lookups and remote delegation ─────────────────────────────────────────
    async def get_order_history(self) -> list[Order]:
        return await self._load(ORDER_HISTORY_KEY)

    async def get_pending_orders(self) -> list[Order]:
        return await self._load(PENDING_ORDERS_KEY)

    async def get_order_by_id(self, order_id: str) -> Order | None:
        for order in await self.get_order_history():
            if order.matches(order_id):
                return order
        for order in await self.get_pending_orders():
            if order.matches(order_id):
                return order
        return None

    async def get_order_status(self, order_number: str) -> ApiResponse:
        try:
            body = await self.api.get_order_status(order_number)
        except (NetworkError, BusinessRejection) as exc:
            return ApiResponse.error(str(exc), exc.status_code)
        return ApiResponse.ok(body, "Order status retrieved")

    async def cancel_order(self, order_number: str, reason: str = "") -> ApiResponse:
        history = await self.get_order_history()
        order = next((o for o in history if o.matches(order_number)), None)
        if order is None:
            raise NotFoundError(f"Order '{order_number}' not found in order history.")
        if order.status != OrderStatus.CONFIRMED:
            raise OrderStateError(f"Only confirmed orders can be cancelled (status: {order.status.value}).")

        try:
            body = await self.api.cancel_order(order.order_number or order_number, reason)
        except (NetworkError, BusinessRejection) as exc:
            logger.warning("Cancellation of %s failed: %s", order_number, exc)
            return ApiResponse.error(str(exc), exc.status_code)

        order.transition(OrderStatus.CANCELLED)
        if reason:
            order.notes = reason
        try:
            await self._replace_in_history(order)
        except StorageWriteError as exc:
            logger.error("Order %s cancelled remotely but history update failed: %s", order_number, exc)
        logger.info("Order %s cancelled", order_number)
        return ApiResponse.ok({"order": order.to_storage(), "cancellation": body}, "Order cancellation processed")
