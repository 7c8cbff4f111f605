"""
ordersync — Delivery info repository
"""
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ordersync.core.serial import MutationQueue, serialized
from ordersync.core.storage import DELIVERY_INFO_KEY, KeyValueStore, read_json, write_json
from ordersync.models.delivery import DeliveryInfo, utc_now_iso
from ordersync.validation import ValidationResult, validate_delivery_info

logger = logging.getLogger(__name__)


class DeliveryRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self._queue = MutationQueue("delivery")

    async def get_delivery_info(self) -> DeliveryInfo:
        data = await read_json(self.store, DELIVERY_INFO_KEY)
        if not isinstance(data, dict):
            return DeliveryInfo()
        try:
            return DeliveryInfo.model_validate(data)
        except ValidationError:
            logger.warning("Stored delivery info is corrupted, returning defaults")
            return DeliveryInfo()

    async def _save(self, info: DeliveryInfo) -> DeliveryInfo:
        info.updated_at = utc_now_iso()
        await write_json(self.store, DELIVERY_INFO_KEY, info.to_storage())
        return info

    @serialized()
    async def save_delivery_info(self, info: DeliveryInfo | Mapping[str, Any]) -> DeliveryInfo:
        if not isinstance(info, DeliveryInfo):
            info = DeliveryInfo.model_validate(dict(info))
        return await self._save(info)

    @serialized()
    async def update_delivery_info(self, updates: Mapping[str, Any]) -> DeliveryInfo:
        current = await self.get_delivery_info()
        merged = DeliveryInfo.model_validate({**current.to_storage(), **updates})
        return await self._save(merged)

    @serialized()
    async def clear_delivery_info(self) -> DeliveryInfo:
        await self.store.remove(DELIVERY_INFO_KEY)
        return DeliveryInfo()

    @staticmethod
    def validate(info: DeliveryInfo | Mapping[str, Any]) -> ValidationResult:
        return validate_delivery_info(info)
