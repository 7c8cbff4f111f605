"""
ordersync — Cart API
"""
from fastapi import APIRouter, Depends, HTTPException, status

from ordersync.api.deps import get_cart_repository, get_menu_repository, to_http_error
from ordersync.core.errors import OrderSyncError
from ordersync.repositories.cart import CartRepository
from ordersync.repositories.menu import MenuRepository
from ordersync.schemas.cart import AddToCartRequest, CartResponse, UpdateCartItemRequest

router = APIRouter(prefix="/cart", tags=["cart"])


async def _snapshot(cart: CartRepository) -> CartResponse:
    return CartResponse(
        items=await cart.get_cart_items(),
        total=await cart.get_cart_total(),
        item_count=await cart.get_item_count(),
    )


@router.get("", response_model=CartResponse, response_model_by_alias=True)
async def get_cart(cart: CartRepository = Depends(get_cart_repository)):
    return await _snapshot(cart)


@router.post("/items", response_model=CartResponse, response_model_by_alias=True, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    payload: AddToCartRequest,
    cart: CartRepository = Depends(get_cart_repository),
    menu: MenuRepository = Depends(get_menu_repository),
):
    """
    Add an item, merging into an existing entry with the same name and size.
    Items given by menuItemId are resolved against the current menu.
    """
    item = payload.item
    try:
        if payload.menu_item_id is not None:
            menu_item = (await menu.get_menu()).find_item_by_id(payload.menu_item_id)
            if menu_item is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Menu item '{payload.menu_item_id}' not found.",
                )
            item = menu_item
        await cart.add_to_cart(item, payload.quantity, payload.selected_size, payload.selected_options)
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return await _snapshot(cart)


@router.patch("/items/{item_id}", response_model=CartResponse, response_model_by_alias=True)
async def update_cart_item(
    item_id: str,
    payload: UpdateCartItemRequest,
    cart: CartRepository = Depends(get_cart_repository),
):
    """A quantity of 0 removes the entry."""
    try:
        if payload.quantity == 0:
            await cart.remove_from_cart(item_id)
        else:
            await cart.update_cart_item(item_id, payload.to_updates())
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return await _snapshot(cart)


@router.delete("/items/{item_id}", response_model=CartResponse, response_model_by_alias=True)
async def remove_from_cart(item_id: str, cart: CartRepository = Depends(get_cart_repository)):
    try:
        await cart.remove_from_cart(item_id)
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return await _snapshot(cart)


@router.delete("", response_model=CartResponse, response_model_by_alias=True)
async def clear_cart(cart: CartRepository = Depends(get_cart_repository)):
    try:
        await cart.clear_cart()
    except OrderSyncError as exc:
        raise to_http_error(exc)
    return await _snapshot(cart)
