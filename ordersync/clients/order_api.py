"""
ordersync — Remote Order/Menu Service client

Network-level classification lives here:
  - timeout           → NetworkError(408)
  - transport failure → NetworkError(503)
  - service answered  → parsed reply (checkout) or BusinessRejection (status/cancel)
"""
import logging
from typing import Any

import httpx

from ordersync.core.config import Settings, get_settings
from ordersync.core.errors import BusinessRejection, NetworkError
from ordersync.models.checkout import CheckoutRequest, CheckoutResponse
from ordersync.models.delivery import utc_now_iso
from ordersync.models.order import Order

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> str:
    body = _json_body(response)
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        if detail:
            return str(detail)
    return f"Server error: {response.status_code}"


class OrderApiClient:
    """Thin async wrapper over the ordering backend's PHP endpoints."""

    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or get_settings()
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.ORDER_API_BASE_URL,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, what: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s timed out: %s", what, exc)
            raise NetworkError(f"{what} request timeout - please try again", status_code=408) from exc
        except httpx.RequestError as exc:
            logger.warning("%s failed to connect: %s", what, exc)
            raise NetworkError("Network error - unable to connect to server", status_code=503) from exc

    async def fetch_menu(self) -> dict[str, Any]:
        response = await self._request("GET", "/menu.php", what="Menu")
        if not response.is_success:
            raise NetworkError(f"Menu fetch failed: {response.status_code}", status_code=response.status_code)
        data = _json_body(response)
        if not isinstance(data, dict):
            raise NetworkError("Invalid menu data received", status_code=502)
        return data

    async def submit_checkout(self, order: Order) -> CheckoutResponse:
        payload = CheckoutRequest.from_order(order).to_json()
        response = await self._request(
            "POST",
            "/checkout.php",
            what="Checkout",
            json=payload,
            headers=JSON_HEADERS,
            timeout=self.settings.CHECKOUT_TIMEOUT_SECONDS,
        )
        body = _json_body(response)
        if not response.is_success:
            data = body if isinstance(body, dict) else {}
            return CheckoutResponse.from_json(
                {**data, "success": False, "error": _error_detail(response)},
                http_status=response.status_code,
            )
        if not isinstance(body, dict):
            return CheckoutResponse.from_json(
                {"success": False, "error": "Invalid checkout response from server"},
                http_status=502,
            )
        logger.info("Checkout reply for %s: success=%s", order.local_id, body.get("success"))
        return CheckoutResponse.from_json(body, http_status=response.status_code)

    async def get_order_status(self, order_number: str) -> dict[str, Any]:
        response = await self._request(
            "GET",
            "/order-status.php",
            what="Order status",
            params={"order_number": order_number},
            headers={"Accept": "application/json"},
        )
        return self._business_body(response, "Failed to get order status")

    async def cancel_order(self, order_number: str, reason: str = "") -> dict[str, Any]:
        response = await self._request(
            "POST",
            "/cancel-order.php",
            what="Cancel order",
            json={"order_number": order_number, "reason": reason, "timestamp": utc_now_iso()},
            headers=JSON_HEADERS,
        )
        return self._business_body(response, "Failed to cancel order")

    async def ping(self) -> bool:
        try:
            response = await self._client.get("/menu.php", timeout=self.settings.HEALTH_CHECK_TIMEOUT)
        except httpx.HTTPError:
            return False
        return response.status_code < 500

    @staticmethod
    def _business_body(response: httpx.Response, fallback: str) -> dict[str, Any]:
        body = _json_body(response)
        if not response.is_success:
            raise BusinessRejection(
                f"{fallback}: {_error_detail(response)}", status_code=response.status_code
            )
        if not isinstance(body, dict):
            raise BusinessRejection(f"{fallback}: invalid response", status_code=502)
        if body.get("success") is False:
            raise BusinessRejection(
                str(body.get("error") or body.get("message") or fallback),
                status_code=400,
                error_code=body.get("errorCode") or body.get("error_code"),
            )
        return body
