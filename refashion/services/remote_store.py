import hashlib
import hmac
import os
import uuid
from abc import ABC, abstractmethod

import aiosqlite
from pydantic import ValidationError as PydanticValidationError

from refashion.errors import AuthError, ConflictError, RemoteUnavailable
from refashion.logger import get_logger
from refashion.models import database
from refashion.models.schemas import Product, Session

logger = get_logger(__name__)


class RemoteStore(ABC):
    """Authoritative store for products and accounts.

    Implementations raise ``RemoteUnavailable`` when the backend cannot be
    reached, ``ConflictError`` for a duplicate account and ``AuthError`` for
    bad credentials.
    """

    # -- Products --

    @abstractmethod
    async def list_products(self) -> list[Product]: ...

    @abstractmethod
    async def create_product(self, product: Product) -> Product: ...

    @abstractmethod
    async def delete_product(self, product_id: str) -> None: ...

    # -- Accounts --

    @abstractmethod
    async def register(self, name: str, email: str, password: str) -> Session: ...

    @abstractmethod
    async def login(self, email: str, password: str) -> Session: ...

    @abstractmethod
    async def set_profile(self, uid: str, name: str, email: str) -> None: ...

    @abstractmethod
    async def get_profile(self, uid: str) -> Session | None: ...

    async def close(self):
        """Release network resources, if any."""


def hash_password(password: str, salt: bytes | None = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, 200_000)
    return f"{salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    salt_hex, _, digest_hex = stored.partition("$")
    try:
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    return hmac.compare_digest(hash_password(password, salt).partition("$")[2], digest_hex)


class SqliteRemoteStore(RemoteStore):
    """Self-hosted backend: accounts and products in one SQLite file."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def init(self):
        try:
            await database.init_db(self.db_path)
        except (aiosqlite.Error, OSError) as e:
            raise RemoteUnavailable(f"Cannot open product database: {e}") from e

    async def list_products(self) -> list[Product]:
        try:
            rows = await database.list_products(self.db_path)
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot list products: {e}") from e
        products = []
        for row in rows:
            try:
                products.append(Product(**row))
            except PydanticValidationError as e:
                logger.warning("Skipping malformed product row %s: %s", row.get("id"), e.error_count())
        return products

    async def create_product(self, product: Product) -> Product:
        try:
            await database.insert_product(self.db_path, product.model_dump())
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot create product {product.id}: {e}") from e
        return product

    async def delete_product(self, product_id: str) -> None:
        try:
            await database.delete_product(self.db_path, product_id)
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot delete product {product_id}: {e}") from e

    async def register(self, name: str, email: str, password: str) -> Session:
        uid = uuid.uuid4().hex
        try:
            await database.create_user(self.db_path, uid, name, email.lower(), hash_password(password))
        except aiosqlite.IntegrityError as e:
            raise ConflictError("Account already exists") from e
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot create account: {e}") from e
        return Session(uid=uid, name=name, email=email.lower())

    async def login(self, email: str, password: str) -> Session:
        try:
            user = await database.get_user_by_email(self.db_path, email.lower())
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot look up account: {e}") from e
        if user is None or not verify_password(password, user["password_hash"]):
            raise AuthError("Invalid email or password")
        return Session(uid=user["uid"], name=user["name"], email=user["email"])

    async def set_profile(self, uid: str, name: str, email: str) -> None:
        try:
            await database.update_user_profile(self.db_path, uid, name, email)
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot update profile {uid}: {e}") from e

    async def get_profile(self, uid: str) -> Session | None:
        try:
            user = await database.get_user(self.db_path, uid)
        except aiosqlite.Error as e:
            raise RemoteUnavailable(f"Cannot load profile {uid}: {e}") from e
        if user is None:
            return None
        return Session(uid=user["uid"], name=user["name"], email=user["email"])
