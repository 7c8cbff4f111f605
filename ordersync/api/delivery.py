"""
ordersync — Delivery info API
"""
from fastapi import APIRouter, Depends

from ordersync.api.deps import get_delivery_repository, to_http_error
from ordersync.core.errors import OrderSyncError
from ordersync.models.delivery import DeliveryInfo
from ordersync.repositories.delivery import DeliveryRepository
from ordersync.schemas.delivery import DeliveryUpdateRequest, DeliveryValidationResponse

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.get("", response_model=DeliveryInfo, response_model_by_alias=True)
async def get_delivery_info(delivery: DeliveryRepository = Depends(get_delivery_repository)):
    return await delivery.get_delivery_info()


@router.put("", response_model=DeliveryInfo, response_model_by_alias=True)
async def save_delivery_info(payload: DeliveryInfo, delivery: DeliveryRepository = Depends(get_delivery_repository)):
    try:
        return await delivery.save_delivery_info(payload)
    except OrderSyncError as exc:
        raise to_http_error(exc)


@router.patch("", response_model=DeliveryInfo, response_model_by_alias=True)
async def update_delivery_info(
    payload: DeliveryUpdateRequest,
    delivery: DeliveryRepository = Depends(get_delivery_repository),
):
    try:
        return await delivery.update_delivery_info(payload.to_updates())
    except OrderSyncError as exc:
        raise to_http_error(exc)


@router.delete("", response_model=DeliveryInfo, response_model_by_alias=True)
async def clear_delivery_info(delivery: DeliveryRepository = Depends(get_delivery_repository)):
    try:
        return await delivery.clear_delivery_info()
    except OrderSyncError as exc:
        raise to_http_error(exc)


@router.post("/validate", response_model=DeliveryValidationResponse, response_model_by_alias=True)
async def validate_delivery_info(payload: DeliveryInfo | None = None, delivery: DeliveryRepository = Depends(get_delivery_repository)):
    """Validate the posted info, or the saved profile when no body is sent."""
    info = payload if payload is not None else await delivery.get_delivery_info()
    result = delivery.validate(info)
    return DeliveryValidationResponse(is_valid=result.is_valid, errors=result.errors)
