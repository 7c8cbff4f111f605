"""
ordersync — Menu API
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ordersync.api.deps import get_menu_repository, to_http_error
from ordersync.core.errors import OrderSyncError
from ordersync.models.menu import CacheInfo, Menu, MenuItem
from ordersync.repositories.menu import MenuRepository

router = APIRouter(prefix="/menu", tags=["menu"])


async def _load(menu: MenuRepository) -> Menu:
    try:
        return await menu.get_menu()
    except OrderSyncError as exc:
        raise to_http_error(exc)


@router.get("")
async def get_menu(menu: MenuRepository = Depends(get_menu_repository)):
    """Current menu in the service's own shape. Falls back to the cache when offline."""
    return (await _load(menu)).to_raw()


@router.get("/items", response_model=list[MenuItem])
async def list_items(
    item_type: str | None = Query(None, alias="type"),
    menu: MenuRepository = Depends(get_menu_repository),
):
    current = await _load(menu)
    return current.items_by_type(item_type) if item_type else current.all_items()


@router.get("/items/{item_id}", response_model=MenuItem)
async def get_item(item_id: str, menu: MenuRepository = Depends(get_menu_repository)):
    item = (await _load(menu)).find_item_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Menu item '{item_id}' not found.")
    return item


@router.post("/refresh")
async def refresh_menu(menu: MenuRepository = Depends(get_menu_repository)):
    try:
        return (await menu.refresh_menu()).to_raw()
    except OrderSyncError as exc:
        raise to_http_error(exc)


@router.get("/cache", response_model=CacheInfo)
async def cache_info(menu: MenuRepository = Depends(get_menu_repository)):
    return await menu.get_cache_info()


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(menu: MenuRepository = Depends(get_menu_repository)):
    await menu.clear_cache()
