"""
Demo data: one shop with an admin account plus starter inventory.
Safe to run repeatedly; existing rows are left as they are.

Usage:
    SEED_ADMIN_PASSWORD=... python -m tailorshop.seed
"""
import asyncio
import logging
import sys
import uuid

from tailorshop.config import settings
from tailorshop.db import close_pool, get_pool, init_schema, register_shop
from tailorshop.security import hash_password

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

STARTER_INVENTORY = [
    {"item_name": "Buttons", "unit": "pieces", "quantity": 100, "low_stock_threshold": 20},
    {"item_name": "Thread Boxes", "unit": "boxes", "quantity": 10, "low_stock_threshold": 3},
    {"item_name": "Lining/Asttar", "unit": "meters", "quantity": 50, "low_stock_threshold": 10},
]


async def seed_shop(pool) -> uuid.UUID:
    row = await pool.fetchrow(
        "SELECT id, shop_code FROM shops WHERE shop_name = $1 ORDER BY created_at LIMIT 1;",
        settings.seed_shop_name,
    )
    if row is not None:
        logger.info("Shop %r exists (code %s)", settings.seed_shop_name, row["shop_code"])
        return row["id"]
    shop, admin = await register_shop(
        pool,
        settings.seed_shop_name,
        phone="",
        address="",
        admin_username=settings.seed_admin_username,
        password_hash=hash_password(settings.seed_admin_password),
    )
    logger.info("Created shop %r code=%s admin=%s", shop.shop_name, shop.shop_code, admin.username)
    return shop.id


async def seed_inventory(pool, shop_id: uuid.UUID) -> None:
    for item in STARTER_INVENTORY:
        await pool.execute(
            """
            INSERT INTO inventory (id, shop_id, item_name, quantity, unit, low_stock_threshold)
            VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT (item_name, shop_id) DO NOTHING;
            """,
            uuid.uuid4(),
            shop_id,
            item["item_name"],
            item["quantity"],
            item["unit"],
            item["low_stock_threshold"],
        )
        logger.info("Inventory item: %s", item["item_name"])


async def run_seed() -> None:
    pool = await get_pool()
    try:
        await init_schema(pool)
        shop_id = await seed_shop(pool)
        await seed_inventory(pool, shop_id)
    finally:
        await close_pool()
    logger.info("Seed complete.")


def main() -> None:
    if not settings.seed_admin_password:
        logger.error("SEED_ADMIN_PASSWORD is not set")
        sys.exit(1)
    asyncio.run(run_seed())


if __name__ == "__main__":
    main()
