import uuid

from fastapi import Depends, Request, Response

from refashion.config import Settings
from refashion.errors import AuthError
from refashion.models.schemas import Session
from refashion.services.mailer import ResendMailer
from refashion.services.remote_store import RemoteStore
from refashion.state.cart import Cart
from refashion.state.products import ProductStore
from refashion.state.session import get_session
from refashion.state.storage import LocalStorage

CART_COOKIE = "cart_id"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_remote_store(request: Request) -> RemoteStore:
    return request.app.state.remote


def get_local_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_product_store(request: Request) -> ProductStore:
    return request.app.state.products


def get_mailer(request: Request) -> ResendMailer:
    return request.app.state.mailer


def current_session(request: Request) -> Session | None:
    return get_session(request)


def require_session(request: Request) -> Session:
    """Reject the request unless a well-formed session cookie is present."""
    session = get_session(request)
    if session is None:
        raise AuthError("Sign in required")
    return session


async def get_cart(
    request: Request,
    response: Response,
    storage: LocalStorage = Depends(get_local_storage),
    settings: Settings = Depends(get_settings),
) -> Cart:
    """Load this browser's cart, issuing a cart_id cookie on first use."""
    cart_id = request.cookies.get(CART_COOKIE)
    if not cart_id:
        cart_id = uuid.uuid4().hex
        response.set_cookie(
            CART_COOKIE,
            cart_id,
            max_age=settings.SESSION_MAX_AGE,
            path="/",
            secure=settings.cookie_secure,
            httponly=True,
            samesite="lax",
        )
    return await Cart(storage, cart_id).load()
