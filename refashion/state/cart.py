import json

from pydantic import ValidationError as PydanticValidationError

from refashion.logger import get_logger
from refashion.models.schemas import CartItem, CartView, Product
from refashion.state.storage import CART_KEY, LocalStorage

logger = get_logger(__name__)


class Cart:
    """One browser's cart: at most one line per product id.

    Every mutation re-persists the whole snapshot under a key derived from
    the cart id, so a reload reproduces the same ordered items.
    """

    def __init__(self, storage: LocalStorage, cart_id: str):
        self.storage = storage
        self.key = f"{CART_KEY}:{cart_id}"
        self.items: list[CartItem] = []

    async def load(self) -> "Cart":
        stored = await self.storage.get_item(self.key)
        if stored:
            try:
                self.items = [CartItem(**item) for item in json.loads(stored)]
            except (ValueError, TypeError, PydanticValidationError):
                logger.warning("Discarding unreadable cart snapshot %s", self.key)
                self.items = []
        return self

    async def _persist(self):
        await self.storage.set_item(self.key, json.dumps([i.model_dump() for i in self.items]))

    @property
    def total(self) -> float:
        return sum(item.price * item.quantity for item in self.items)

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    def view(self) -> CartView:
        return CartView(items=list(self.items), total=self.total, count=self.count)

    async def add_item(self, product: Product | CartItem):
        for item in self.items:
            if item.id == product.id:
                item.quantity += 1
                break
        else:
            self.items.append(
                CartItem(
                    id=product.id,
                    name=product.name,
                    artisan=product.artisan,
                    price=product.price,
                    image=product.image,
                    quantity=1,
                )
            )
        await self._persist()

    async def remove_item(self, item_id: str):
        self.items = [item for item in self.items if item.id != item_id]
        await self._persist()

    async def update_quantity(self, item_id: str, quantity: int):
        if quantity <= 0:
            await self.remove_item(item_id)
            return
        for item in self.items:
            if item.id == item_id:
                item.quantity = quantity
        await self._persist()

    async def clear(self):
        self.items = []
        await self.storage.remove_item(self.key)
