"""Local product catalog cache with best-effort mirroring to the remote store.

The local snapshot is authoritative for the running process. Writes are
applied locally first and propagated through the BackgroundWriter; the
remote is only ever read to append records this cache has not seen.
"""
import asyncio
import enum
import json
import uuid
from datetime import datetime, timezone

from pydantic import ValidationError as PydanticValidationError

from refashion.errors import NotFoundError, RemoteUnavailable
from refashion.logger import get_logger
from refashion.models.schemas import (
    PLACEHOLDER_IMAGE,
    MigrationReport,
    Product,
    ProductCreate,
)
from refashion.services.remote_store import RemoteStore
from refashion.state.background import BackgroundWriter
from refashion.state.storage import MIGRATED_KEY, PRODUCTS_KEY, LocalStorage

logger = get_logger(__name__)

APPEND_MISSING = "append_missing"
LAST_WRITE_WINS = "last_write_wins"

DEFAULT_PRODUCTS = [
    Product(
        id="1",
        name="Embroidered Denim Jacket",
        artisan="Meera Devi",
        price=2499,
        image="/images/product-1.jpg",
        images=["/images/product-1.jpg"],
        tag="Best Seller",
        description="Hand-embroidered floral motifs on upcycled denim. One of a kind.",
    ),
    Product(
        id="2",
        name="Botanical Canvas Tote",
        artisan="Priya Sharma",
        price=899,
        image="/images/product-2.jpg",
        images=["/images/product-2.jpg"],
        tag="New",
        description="Hand-painted botanical art on repurposed canvas. Carry your story.",
    ),
    Product(
        id="3",
        name="Patchwork Quilted Vest",
        artisan="Fatima Begum",
        price=1899,
        image="/images/product-3.jpg",
        images=["/images/product-3.jpg"],
        tag="Limited",
        description="Vintage fabric scraps stitched into a warm, wearable mosaic.",
    ),
    Product(
        id="4",
        name="Embroidered Jeans",
        artisan="Lakshmi Iyer",
        price=1999,
        image="/images/product-4.jpg",
        images=["/images/product-4.jpg"],
        tag=None,
        description="Floral and butterfly embroidery breathing new life into classic denim.",
    ),
    Product(
        id="5",
        name="Silk Beaded Headband",
        artisan="Anjali Patel",
        price=599,
        image="/images/product-5.jpg",
        images=["/images/product-5.jpg"],
        tag="New",
        description="Repurposed vintage silk with hand-stitched beadwork detailing.",
    ),
    Product(
        id="6",
        name="Block-Printed Cotton Tee",
        artisan="Ravi Kumar",
        price=1299,
        image="/images/product-6.jpg",
        images=["/images/product-6.jpg"],
        tag=None,
        description="Traditional block printing technique on sustainably sourced cotton.",
    ),
]


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOCAL_LOADED = "local_loaded"
    REMOTE_SYNCED = "remote_synced"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProductStore:
    def __init__(
        self,
        storage: LocalStorage,
        remote: RemoteStore,
        writer: BackgroundWriter,
        sync_policy: str = APPEND_MISSING,
    ):
        self.storage = storage
        self.remote = remote
        self.writer = writer
        self.sync_policy = sync_policy
        self.products: list[Product] = []
        self.state = StoreState.UNINITIALIZED
        self._sync_task: asyncio.Task | None = None

    async def _persist(self):
        await self.storage.set_item(
            PRODUCTS_KEY, json.dumps([p.model_dump() for p in self.products])
        )

    def get(self, product_id: str) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    async def load(self):
        """Populate from the local snapshot, seeding the defaults when there is none."""
        stored = await self.storage.get_item(PRODUCTS_KEY)
        products = None
        if stored:
            try:
                products = [Product(**p) for p in json.loads(stored)]
            except (ValueError, TypeError, PydanticValidationError):
                logger.warning("Product cache is unreadable; reseeding defaults")

        if products is None:
            self.products = [p.model_copy() for p in DEFAULT_PRODUCTS]
            await self._persist()
        else:
            self.products = products

        if self.state is StoreState.UNINITIALIZED:
            self.state = StoreState.LOCAL_LOADED
        logger.info("Loaded %d products from local cache", len(self.products))

    def start_sync(self) -> asyncio.Task:
        """Fire-and-forget sync_from_remote; callers never await it."""
        self._sync_task = asyncio.create_task(self.sync_from_remote())
        return self._sync_task

    async def sync_from_remote(self) -> int:
        """Merge the remote collection into the cache. Returns how many records changed.

        Records missing locally are appended. Local records are never removed.
        Under last_write_wins a remote record replaces the local one only when
        its updated_at is newer.
        """
        try:
            remote_products = await self.remote.list_products()
        except RemoteUnavailable as e:
            logger.warning("Product sync skipped, remote unavailable: %s", e)
            return 0

        index = {p.id: i for i, p in enumerate(self.products)}
        changed = 0
        for remote_product in remote_products:
            i = index.get(remote_product.id)
            if i is None:
                self.products.append(remote_product)
                index[remote_product.id] = len(self.products) - 1
                changed += 1
            elif self.sync_policy == LAST_WRITE_WINS and self._is_newer(remote_product, self.products[i]):
                self.products[i] = remote_product
                changed += 1

        if changed:
            await self._persist()
        self.state = StoreState.REMOTE_SYNCED
        logger.info("Product sync merged %d remote record(s)", changed)
        return changed

    @staticmethod
    def _is_newer(remote: Product, local: Product) -> bool:
        if not remote.updated_at:
            return False
        return not local.updated_at or remote.updated_at > local.updated_at

    async def add_product(self, fields: ProductCreate) -> Product:
        images = fields.images
        product = Product(
            id=uuid.uuid4().hex,
            name=fields.name,
            artisan=fields.artisan,
            price=fields.price,
            image=images[0] if images else PLACEHOLDER_IMAGE,
            images=images,
            tag=fields.tag,
            description=fields.description,
            updated_at=_now(),
        )
        self.products.insert(0, product)
        await self._persist()
        self.writer.submit(f"create product {product.id}", lambda: self.remote.create_product(product))
        logger.info("Added product %s (%s)", product.id, product.name)
        return product

    async def remove_product(self, product_id: str):
        if self.get(product_id) is None:
            raise NotFoundError("Product not found")
        self.products = [p for p in self.products if p.id != product_id]
        await self._persist()
        self.writer.submit(f"delete product {product_id}", lambda: self.remote.delete_product(product_id))
        logger.info("Removed product %s", product_id)

    async def migrate(self) -> MigrationReport:
        """One-time upload of the default catalog into an empty remote collection."""
        if await self.storage.get_item(MIGRATED_KEY):
            return MigrationReport(status="already_migrated")

        try:
            existing = await self.remote.list_products()
        except RemoteUnavailable as e:
            logger.error("Migration aborted, remote unavailable: %s", e)
            return MigrationReport(status="partial", failed=len(DEFAULT_PRODUCTS))

        if existing:
            await self.storage.set_item(MIGRATED_KEY, "true")
            logger.info("Remote already holds %d products; migration skipped", len(existing))
            return MigrationReport(status="already_migrated")

        uploaded = failed = 0
        for product in DEFAULT_PRODUCTS:
            try:
                await self.remote.create_product(product)
                uploaded += 1
            except RemoteUnavailable as e:
                logger.error("Migration of product %s failed: %s", product.id, e)
                failed += 1

        if failed:
            logger.warning("Migration partial: %d uploaded, %d failed", uploaded, failed)
            return MigrationReport(status="partial", uploaded=uploaded, failed=failed)

        await self.storage.set_item(MIGRATED_KEY, "true")
        logger.info("Migrated %d default products to the remote store", uploaded)
        return MigrationReport(status="migrated", uploaded=uploaded)
