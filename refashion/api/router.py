from fastapi import APIRouter
from refashion.api.auth import router as auth_router
from refashion.api.cart import router as cart_router
from refashion.api.checkout import router as checkout_router
from refashion.api.contact import router as contact_router
from refashion.api.products import router as products_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(products_router)
router.include_router(cart_router)
router.include_router(checkout_router)
router.include_router(contact_router)
