import json
from pathlib import Path
import aiosqlite


async def init_db(db_path: str):
    """Create tables if they don't exist. Called once on app startup."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(db_path) as db:
        await db.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                uid           TEXT PRIMARY KEY,
                name          TEXT NOT NULL,
                email         TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at    TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at    TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS products (
                id          TEXT PRIMARY KEY,
                name        TEXT NOT NULL,
                artisan     TEXT NOT NULL,
                price       REAL NOT NULL,
                image       TEXT NOT NULL,
                images      TEXT NOT NULL DEFAULT '[]',
                tag         TEXT,
                description TEXT NOT NULL,
                updated_at  TEXT,
                created_at  TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_products_created
                ON products(created_at);
        """)
        await db.commit()


# --- User CRUD ---

async def create_user(db_path: str, uid: str, name: str, email: str, password_hash: str):
    """Insert a user row. Raises aiosqlite.IntegrityError on a duplicate email."""
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            "INSERT INTO users (uid, name, email, password_hash) VALUES (?, ?, ?, ?)",
            (uid, name, email, password_hash),
        )
        await db.commit()


async def get_user_by_email(db_path: str, email: str) -> dict | None:
    """Fetch a user by email. Returns None if not found."""
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute(
            "SELECT * FROM users WHERE email = ?",
            (email,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)


async def get_user(db_path: str, uid: str) -> dict | None:
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute("SELECT * FROM users WHERE uid = ?", (uid,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)


async def update_user_profile(db_path: str, uid: str, name: str, email: str):
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            "UPDATE users SET name = ?, email = ?, updated_at = datetime('now') WHERE uid = ?",
            (name, email, uid),
        )
        await db.commit()


# --- Product CRUD ---

async def insert_product(db_path: str, product: dict):
    """Insert or replace a product document keyed by its id."""
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            """INSERT OR REPLACE INTO products
               (id, name, artisan, price, image, images, tag, description, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                product["id"],
                product["name"],
                product["artisan"],
                product["price"],
                product["image"],
                json.dumps(product.get("images") or []),
                product.get("tag"),
                product["description"],
                product.get("updated_at"),
            ),
        )
        await db.commit()


async def list_products(db_path: str) -> list[dict]:
    """Load every product, oldest first."""
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute(
            "SELECT * FROM products ORDER BY created_at ASC, rowid ASC"
        )
        rows = await cursor.fetchall()
        products = []
        for row in rows:
            product = dict(row)
            product["images"] = json.loads(product["images"] or "[]")
            product.pop("created_at", None)
            products.append(product)
        return products


async def delete_product(db_path: str, product_id: str) -> bool:
    """Delete a product. Returns True if a row was removed."""
    async with aiosqlite.connect(db_path) as db:
        cursor = await db.execute("DELETE FROM products WHERE id = ?", (product_id,))
        await db.commit()
        return cursor.rowcount > 0
