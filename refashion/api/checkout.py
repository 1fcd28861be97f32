import asyncio
import uuid

from fastapi import APIRouter, Depends

from refashion.config import Settings
from refashion.dependencies import get_cart, get_settings
from refashion.errors import ValidationError
from refashion.logger import get_logger
from refashion.models.schemas import CheckoutRequest, CheckoutResponse
from refashion.state.cart import Cart

logger = get_logger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.post("", response_model=CheckoutResponse)
async def checkout(
    body: CheckoutRequest,
    cart: Cart = Depends(get_cart),
    settings: Settings = Depends(get_settings),
):
    """Simulated payment: nothing is charged, the cart is emptied on success."""
    if not cart.items:
        raise ValidationError("Cart is empty")

    # Bill exactly this snapshot; lines added while payment runs stay for the next order
    summary = cart.view()
    await cart.clear()
    await asyncio.sleep(settings.CHECKOUT_DELAY_SECONDS)
    order_id = uuid.uuid4().hex[:12].upper()

    logger.info(
        "Order %s paid by %s via %s: %d item(s), total %.2f",
        order_id, body.email, body.method, summary.count, summary.total,
    )
    return CheckoutResponse(
        order_id=order_id,
        status="paid",
        method=body.method,
        total=summary.total,
        count=summary.count,
        items=summary.items,
    )
