from fastapi import APIRouter, Depends

from refashion.dependencies import get_cart, get_product_store
from refashion.errors import NotFoundError
from refashion.models.schemas import AddToCartRequest, CartView, UpdateQuantityRequest
from refashion.state.cart import Cart
from refashion.state.products import ProductStore

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=CartView)
async def read_cart(cart: Cart = Depends(get_cart)):
    return cart.view()


@router.post("/items", response_model=CartView)
async def add_to_cart(
    body: AddToCartRequest,
    cart: Cart = Depends(get_cart),
    store: ProductStore = Depends(get_product_store),
):
    product = store.get(body.product_id)
    if product is None:
        raise NotFoundError("Product not found")
    await cart.add_item(product)
    return cart.view()


@router.patch("/items/{item_id}", response_model=CartView)
async def update_quantity(
    item_id: str,
    body: UpdateQuantityRequest,
    cart: Cart = Depends(get_cart),
):
    await cart.update_quantity(item_id, body.quantity)
    return cart.view()


@router.delete("/items/{item_id}", response_model=CartView)
async def remove_from_cart(item_id: str, cart: Cart = Depends(get_cart)):
    await cart.remove_item(item_id)
    return cart.view()


@router.delete("", response_model=CartView)
async def clear_cart(cart: Cart = Depends(get_cart)):
    await cart.clear()
    return cart.view()
