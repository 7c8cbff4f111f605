"""
ordersync — Menu repository (cache-aside with stale-on-error)

Flow:
  1. Optional freshness shortcut: a cache entry younger than the TTL is served
     without touching the network.
  2. Fetch from the service, wrap into Menu, overwrite the cache slot.
  3. Network failure or an unusable reply → serve the cached payload at any
     age, or fail hard when there is nothing usable cached.
"""
import logging
import time

from pydantic import ValidationError

from ordersync.clients.order_api import OrderApiClient
from ordersync.core.config import Settings, get_settings
from ordersync.core.errors import MenuUnavailableError, NetworkError, StorageWriteError
from ordersync.core.storage import MENU_DATA_KEY, KeyValueStore, read_json, write_json
from ordersync.models.menu import CacheEntry, CacheInfo, Menu

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No internet connection and no cached data available"


class MenuRepository:
    def __init__(self, store: KeyValueStore, api: OrderApiClient, settings: Settings | None = None):
        self.store = store
        self.api = api
        self.settings = settings or get_settings()

    async def _read_cache(self) -> CacheEntry | None:
        data = await read_json(self.store, MENU_DATA_KEY)
        if data is None:
            return None
        try:
            return CacheEntry.model_validate(data)
        except ValidationError:
            logger.warning("Menu cache entry is corrupted, ignoring it")
            return None

    async def _fetch_and_store(self) -> Menu:
        raw = await self.api.fetch_menu()
        menu = Menu.build(raw)
        logger.info(
            "Fetched menu: %d items, %d addons, drink of the day=%s",
            len(menu.menu_items), len(menu.addons),
            menu.drink_of_the_day.name if menu.drink_of_the_day else None,
        )
        try:
            await write_json(self.store, MENU_DATA_KEY, CacheEntry.now(raw).model_dump())
        except StorageWriteError as exc:
            # Fresh data is still good even if we could not cache it
            logger.warning("Could not cache menu: %s", exc)
        return menu

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return entry.age_seconds() < self.settings.MENU_CACHE_TTL_SECONDS

    async def get_menu(self) -> Menu:
        if self.settings.MENU_CACHE_FRESHNESS_ENABLED:
            cached = await self._read_cache()
            if cached is not None and self._is_fresh(cached):
                logger.debug("Serving menu from cache (age %.0fs)", cached.age_seconds())
                return Menu.build(cached.payload)

        try:
            return await self._fetch_and_store()
        except (NetworkError, ValidationError) as exc:
            logger.warning("Menu fetch failed, trying cache: %s", exc)

        cached = await self._read_cache()
        if cached is None:
            raise MenuUnavailableError(NO_DATA_MESSAGE)
        logger.info("Serving stale menu from cache (age %.0fs)", cached.age_seconds())
        return Menu.build(cached.payload)

    async def refresh_menu(self) -> Menu:
        """Always go to the network. No stale fallback."""
        try:
            return await self._fetch_and_store()
        except (NetworkError, ValidationError) as exc:
            raise MenuUnavailableError(f"Failed to refresh menu: {exc}") from exc

    async def clear_cache(self) -> None:
        try:
            await self.store.remove(MENU_DATA_KEY)
        except StorageWriteError as exc:
            logger.warning("Could not clear menu cache: %s", exc)

    async def get_cache_info(self) -> CacheInfo:
        cached = await self._read_cache()
        if cached is None:
            return CacheInfo(has_cache=False, is_expired=True, age_seconds=0)
        age = cached.age_seconds(time.time())
        return CacheInfo(
            has_cache=True,
            is_expired=age >= self.settings.MENU_CACHE_TTL_SECONDS,
            age_seconds=age,
        )
