"""
Menu repository and model tests

Tests:
  1. Successful fetch overwrites the cache slot
  2. Stale-on-error: any cached payload is served when the service is down
     or its reply cannot be turned into a Menu
  3. No cache and no network → MenuUnavailableError
  4. Optional TTL shortcut skips the network for fresh entries
  5. Menu.build is idempotent and tolerates malformed payloads
"""
import time

import httpx
import pytest

from conftest import MENU_PAYLOAD
from ordersync.core.errors import MenuUnavailableError
from ordersync.core.storage import MENU_DATA_KEY
from ordersync.models.menu import Menu, MenuItem
from ordersync.repositories.menu import NO_DATA_MESSAGE, MenuRepository

STALE_PAYLOAD = {
    "drink_of_the_day": None,
    "full_menu": {"menu": [{"id": "tea", "name": "Black Tea", "type": "drink", "price": 2.0}], "addons": []},
}


@pytest.fixture
def menu_repo(store, api, settings) -> MenuRepository:
    return MenuRepository(store, api, settings)


def seed_cache(store, payload, age_seconds: float) -> None:
    store.put(MENU_DATA_KEY, {"payload": payload, "fetchedAt": time.time() - age_seconds})


# ─── Fetch path ────────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_fetch_builds_menu_and_caches_payload(menu_repo, service, store):
    service.reply("/menu.php", json=MENU_PAYLOAD)

    menu = await menu_repo.get_menu()

    assert menu.drink_of_the_day.name == "Honey Lavender Latte"
    assert [i.id for i in menu.menu_items] == ["latte", "croissant"]
    assert [a.id for a in menu.addons] == ["oat"]
    cached = store.load(MENU_DATA_KEY)
    assert cached["payload"] == MENU_PAYLOAD
    assert cached["fetchedAt"] <= time.time()


@pytest.mark.asyncio
async def test_fresh_fetch_replaces_old_cache(menu_repo, service, store):
    seed_cache(store, STALE_PAYLOAD, age_seconds=60)
    service.reply("/menu.php", json=MENU_PAYLOAD)

    menu = await menu_repo.get_menu()

    assert menu.find_item_by_id("tea") is None
    assert store.load(MENU_DATA_KEY)["payload"] == MENU_PAYLOAD


@pytest.mark.asyncio
async def test_cache_write_failure_still_returns_menu(menu_repo, service, store):
    service.reply("/menu.php", json=MENU_PAYLOAD)
    store.fail_keys.add(MENU_DATA_KEY)

    menu = await menu_repo.get_menu()

    assert len(menu.menu_items) == 2
    assert MENU_DATA_KEY not in store.data


# ─── Stale-on-error ────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_network_failure_serves_stale_cache_regardless_of_age(menu_repo, service, store):
    seed_cache(store, STALE_PAYLOAD, age_seconds=10 * 24 * 3600)
    service.reply("/menu.php", raises=httpx.ConnectError("connection refused"))

    menu = await menu_repo.get_menu()

    assert [i.name for i in menu.menu_items] == ["Black Tea"]


@pytest.mark.asyncio
async def test_server_error_serves_stale_cache(menu_repo, service, store):
    seed_cache(store, STALE_PAYLOAD, age_seconds=5)
    service.reply("/menu.php", status_code=500, json={"error": "boom"})

    menu = await menu_repo.get_menu()

    assert menu.find_item_by_id("tea") is not None


@pytest.mark.asyncio
async def test_non_string_fields_are_coerced(menu_repo, service):
    service.reply("/menu.php", json={"full_menu": {"menu": [{"id": "x", "name": 42}]}})

    menu = await menu_repo.get_menu()

    assert menu.find_item_by_id("x").name == "42"


@pytest.mark.asyncio
async def test_reply_failing_validation_serves_cache(menu_repo, service, store, monkeypatch):
    seed_cache(store, MENU_PAYLOAD, age_seconds=5)
    service.reply("/menu.php", json={"full_menu": {"menu": [{"id": "x", "name": 42}]}})
    real_build = Menu.build
    calls = []

    def build_without_coercion(data):
        calls.append(data)
        if len(calls) == 1:
            MenuItem.model_validate(data["full_menu"]["menu"][0])
        return real_build(data)

    monkeypatch.setattr(Menu, "build", build_without_coercion)

    menu = await menu_repo.get_menu()

    assert [i.id for i in menu.menu_items] == ["latte", "croissant"]
    assert store.load(MENU_DATA_KEY)["payload"] == MENU_PAYLOAD


@pytest.mark.asyncio
async def test_no_cache_and_no_network_raises(menu_repo, service):
    service.reply("/menu.php", raises=httpx.ConnectTimeout("timed out"))

    with pytest.raises(MenuUnavailableError) as exc_info:
        await menu_repo.get_menu()
    assert str(exc_info.value) == NO_DATA_MESSAGE


@pytest.mark.asyncio
async def test_corrupted_cache_counts_as_no_cache(menu_repo, service, store):
    store.put(MENU_DATA_KEY, {"payload": "nope"})
    service.reply("/menu.php", raises=httpx.ConnectError("down"))

    with pytest.raises(MenuUnavailableError):
        await menu_repo.get_menu()


@pytest.mark.asyncio
async def test_refresh_has_no_stale_fallback(menu_repo, service, store):
    seed_cache(store, STALE_PAYLOAD, age_seconds=5)
    service.reply("/menu.php", raises=httpx.ConnectError("down"))

    with pytest.raises(MenuUnavailableError, match="Failed to refresh menu"):
        await menu_repo.refresh_menu()


# ─── TTL shortcut ──────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_fresh_cache_skips_network_when_enabled(store, api, settings, service):
    settings.MENU_CACHE_FRESHNESS_ENABLED = True
    repo = MenuRepository(store, api, settings)
    seed_cache(store, STALE_PAYLOAD, age_seconds=10)
    service.reply("/menu.php", json=MENU_PAYLOAD)

    menu = await repo.get_menu()

    assert menu.find_item_by_id("tea") is not None
    assert service.calls("/menu.php") == []


@pytest.mark.asyncio
async def test_expired_cache_is_refetched_when_enabled(store, api, settings, service):
    settings.MENU_CACHE_FRESHNESS_ENABLED = True
    repo = MenuRepository(store, api, settings)
    seed_cache(store, STALE_PAYLOAD, age_seconds=settings.MENU_CACHE_TTL_SECONDS + 1)
    service.reply("/menu.php", json=MENU_PAYLOAD)

    menu = await repo.get_menu()

    assert menu.find_item_by_id("latte") is not None
    assert len(service.calls("/menu.php")) == 1


@pytest.mark.asyncio
async def test_fresh_cache_still_fetches_when_disabled(menu_repo, service, store):
    seed_cache(store, STALE_PAYLOAD, age_seconds=10)
    service.reply("/menu.php", json=MENU_PAYLOAD)

    await menu_repo.get_menu()

    assert len(service.calls("/menu.php")) == 1


# ─── Cache management ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_cache_info(menu_repo, store, settings):
    info = await menu_repo.get_cache_info()
    assert (info.has_cache, info.is_expired, info.age_seconds) == (False, True, 0)

    seed_cache(store, MENU_PAYLOAD, age_seconds=60)
    info = await menu_repo.get_cache_info()
    assert info.has_cache is True
    assert info.is_expired is False
    assert 59 <= info.age_seconds < 120

    seed_cache(store, MENU_PAYLOAD, age_seconds=settings.MENU_CACHE_TTL_SECONDS + 5)
    assert (await menu_repo.get_cache_info()).is_expired is True


@pytest.mark.asyncio
async def test_clear_cache(menu_repo, store):
    seed_cache(store, MENU_PAYLOAD, age_seconds=1)

    await menu_repo.clear_cache()

    assert MENU_DATA_KEY not in store.data


@pytest.mark.asyncio
async def test_clear_cache_swallows_storage_errors(menu_repo, store):
    seed_cache(store, MENU_PAYLOAD, age_seconds=1)
    store.fail_keys.add(MENU_DATA_KEY)

    await menu_repo.clear_cache()

    assert MENU_DATA_KEY in store.data


# ─── Models ────────────────────────────────────────────────────────────────────
def test_build_is_idempotent():
    menu = Menu.build(MENU_PAYLOAD)
    assert Menu.build(menu) is menu
    assert Menu.build(menu.to_raw()) == menu


def test_build_tolerates_malformed_payloads():
    assert Menu.build(None) == Menu()
    assert Menu.build({"full_menu": "oops"}).menu_items == []
    menu = Menu.build({"full_menu": {"menu": [{"name": "Mocha"}, 42, None], "addons": "x"}})
    assert [i.name for i in menu.menu_items] == ["Mocha"]
    assert menu.addons == []


def test_menu_lookups():
    menu = Menu.build(MENU_PAYLOAD)

    assert [i.id for i in menu.all_items()] == ["dotd", "latte", "croissant"]
    assert [i.id for i in menu.items_by_type("food")] == ["croissant"]
    assert menu.find_item_by_name("Latte").id == "latte"
    assert menu.find_item_by_id("missing") is None


def test_menu_item_prices():
    latte = MenuItem.from_raw(MENU_PAYLOAD["full_menu"]["menu"][0])
    assert latte.get_price("large") == 4.5
    assert latte.available_sizes() == ["small", "large"]

    scalar = MenuItem.from_raw({"name": "Scone", "price": "3.25"})
    assert scalar.id == "Scone"
    assert scalar.get_price() == 3.25
    assert MenuItem.from_raw({"name": "Bad", "price": "free"}).get_price() == 0
