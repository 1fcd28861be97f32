from fastapi import APIRouter, Depends, Query

from refashion.dependencies import get_product_store, require_session
from refashion.models.schemas import MigrationReport, ProductCreate, Session
from refashion.state.products import ProductStore

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def list_products(store: ProductStore = Depends(get_product_store)):
    return {"products": [p.model_dump() for p in store.products]}


@router.post("")
async def create_product(
    fields: ProductCreate,
    session: Session = Depends(require_session),
    store: ProductStore = Depends(get_product_store),
):
    product = await store.add_product(fields)
    return {"product": product.model_dump()}


@router.delete("")
async def delete_product(
    id: str = Query(...),
    session: Session = Depends(require_session),
    store: ProductStore = Depends(get_product_store),
):
    await store.remove_product(id)
    return {"ok": True}


@router.post("/migrate", response_model=MigrationReport)
async def migrate_products(
    session: Session = Depends(require_session),
    store: ProductStore = Depends(get_product_store),
):
    return await store.migrate()
