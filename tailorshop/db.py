"""
Async Postgres: one table per entity, every tenant row carries shop_id.
Every query below takes the caller's shop_id and filters on it; a row owned by
another shop is reported exactly like a missing row.
Order mutations run in a single transaction: lock the order row, apply a pure
lifecycle function, write back the changed columns.
"""
import json
import logging
import random
import re
import time
import uuid
from collections.abc import Callable
from datetime import datetime

import asyncpg
from asyncpg.exceptions import UniqueViolationError

from tailorshop.config import settings
from tailorshop.errors import ConflictError, NotFoundError
from tailorshop.metrics import (
    inventory_adjustments_total,
    order_number_conflicts_total,
    orders_created_total,
)
from tailorshop.models import (
    ORDER_MUTABLE_COLUMNS,
    Customer,
    CustomerRef,
    InventoryItem,
    Measurement,
    Order,
    Shop,
    StaffMember,
)
from tailorshop.order_number import ORDER_NUMBER_SQL_PATTERN, next_order_number
from tailorshop.order_state import ORDER_PLACED, READY_FOR_PICKUP, Role

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

STAFF_TABLES: dict[Role, str] = {
    Role.ADMIN: "admins",
    Role.TAILOR: "tailors",
    Role.CUTTING_MASTER: "cutting_masters",
}
STAFF_LABELS: dict[Role, str] = {
    Role.ADMIN: "Admin",
    Role.TAILOR: "Tailor",
    Role.CUTTING_MASTER: "Cutting Master",
}

SHOP_CODE_CONSTRAINT = "shops_shop_code_key"
ORDER_NUMBER_CONSTRAINT = "orders_order_number_shop_key"


async def _init_connection(conn: asyncpg.Connection) -> None:
    await conn.set_type_codec("jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog")


async def create_pool(database_url: str | None = None) -> asyncpg.Pool:
    return await asyncpg.create_pool(
        database_url or settings.database_url,
        min_size=1,
        max_size=5,
        command_timeout=60,
        init=_init_connection,
    )


async def get_pool() -> asyncpg.Pool:
    global _pool
    if _pool is None:
        _pool = await create_pool()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


def _staff_table_sql(table: str) -> str:
    return f"""
        CREATE TABLE IF NOT EXISTS {table} (
            id UUID PRIMARY KEY,
            shop_id UUID NOT NULL REFERENCES shops(id),
            username VARCHAR(100) NOT NULL,
            name VARCHAR(255) NOT NULL DEFAULT '',
            password_hash VARCHAR(255) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
            CONSTRAINT {table}_username_shop_key UNIQUE (username, shop_id)
        );
    """


async def init_schema(pool: asyncpg.Pool) -> None:
    """Idempotent. Shop foreign keys do not cascade."""
    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS shops (
                id UUID PRIMARY KEY,
                shop_name VARCHAR(255) NOT NULL,
                shop_code VARCHAR(32) NOT NULL,
                phone VARCHAR(32) NOT NULL DEFAULT '',
                address TEXT NOT NULL DEFAULT '',
                created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                CONSTRAINT shops_shop_code_key UNIQUE (shop_code)
            );
        """)
        for table in STAFF_TABLES.values():
            await conn.execute(_staff_table_sql(table))
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS customers (
                id UUID PRIMARY KEY,
                shop_id UUID NOT NULL REFERENCES shops(id),
                name VARCHAR(255) NOT NULL,
                phone VARCHAR(15) NOT NULL,
                notes TEXT NOT NULL DEFAULT '',
                measurements JSONB NOT NULL DEFAULT '[]'::jsonb,
                created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                CONSTRAINT customers_phone_shop_key UNIQUE (phone, shop_id)
            );
        """)
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS orders (
                id UUID PRIMARY KEY,
                shop_id UUID NOT NULL REFERENCES shops(id),
                customer_id UUID NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
                order_number VARCHAR(16) NOT NULL,
                garment_type VARCHAR(16) NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                status VARCHAR(32) NOT NULL DEFAULT 'OrderPlaced',
                price DOUBLE PRECISION NOT NULL DEFAULT 0 CHECK (price >= 0),
                advance_paid DOUBLE PRECISION NOT NULL DEFAULT 0 CHECK (advance_paid >= 0),
                due_date TIMESTAMPTZ,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                ready_photo_url TEXT,
                pending_ready_photo TEXT,
                pending_approval BOOLEAN NOT NULL DEFAULT FALSE,
                assigned_tailor_id UUID REFERENCES tailors(id) ON DELETE SET NULL,
                assigned_cutting_master_id UUID REFERENCES cutting_masters(id) ON DELETE SET NULL,
                cutting_status VARCHAR(16) NOT NULL DEFAULT 'Pending',
                created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                CONSTRAINT orders_order_number_shop_key UNIQUE (order_number, shop_id)
            );
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_orders_shop_created
            ON orders(shop_id, created_at DESC);
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_orders_tailor_shop
            ON orders(assigned_tailor_id, shop_id);
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_orders_customer_status
            ON orders(customer_id, status);
        """)
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS inventory (
                id UUID PRIMARY KEY,
                shop_id UUID NOT NULL REFERENCES shops(id),
                item_name VARCHAR(255) NOT NULL,
                quantity INT NOT NULL DEFAULT 0 CHECK (quantity >= 0),
                unit VARCHAR(16) NOT NULL,
                low_stock_threshold INT NOT NULL DEFAULT 10,
                created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
                CONSTRAINT inventory_item_name_shop_key UNIQUE (item_name, shop_id)
            );
        """)


def parse_id(value, what: str) -> uuid.UUID:
    """Malformed ids can never match a row: report them as not found."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{what} not found")


def _row_count(status: str) -> int:
    # asyncpg returns command tags like "UPDATE 3"
    return int(status.split()[-1])


# ---------------------------------------------------------------------------
# Shops
# ---------------------------------------------------------------------------

def generate_shop_code(shop_name: str) -> str:
    """First three letters of the name + last 3 digits of epoch millis + 2 random digits."""
    prefix = re.sub(r"[^a-zA-Z]", "", shop_name)[:3].upper()
    time_part = f"{int(time.time() * 1000) % 1000:03d}"
    return f"{prefix}{time_part}{random.randint(10, 99)}"


async def register_shop(
    pool: asyncpg.Pool,
    shop_name: str,
    phone: str,
    address: str,
    admin_username: str,
    password_hash: str,
    max_attempts: int | None = None,
) -> tuple[Shop, StaffMember]:
    """Create a shop and its first admin in one transaction. Shop code collisions are retried."""
    attempts = max_attempts or settings.shop_code_max_attempts
    async with pool.acquire() as conn:
        for attempt in range(1, attempts + 1):
            shop_code = generate_shop_code(shop_name)
            try:
                async with conn.transaction():
                    shop_row = await conn.fetchrow(
                        """
                        INSERT INTO shops (id, shop_name, shop_code, phone, address)
                        VALUES ($1, $2, $3, $4, $5)
                        RETURNING *;
                        """,
                        uuid.uuid4(),
                        shop_name,
                        shop_code,
                        phone,
                        address,
                    )
                    admin_row = await conn.fetchrow(
                        """
                        INSERT INTO admins (id, shop_id, username, password_hash)
                        VALUES ($1, $2, $3, $4)
                        RETURNING *;
                        """,
                        uuid.uuid4(),
                        shop_row["id"],
                        admin_username,
                        password_hash,
                    )
            except UniqueViolationError as e:
                if e.constraint_name != SHOP_CODE_CONSTRAINT:
                    raise ConflictError("Admin username already exists in this shop")
                logger.warning("Shop code %s taken (attempt %d/%d), retrying", shop_code, attempt, attempts)
                continue
            logger.info("Registered shop %s (%s)", shop_row["shop_code"], shop_row["id"])
            return Shop.model_validate(dict(shop_row)), StaffMember.model_validate(dict(admin_row))
    raise ConflictError("Shop code conflict, please try again")


async def get_shop(pool: asyncpg.Pool, shop_id) -> Shop:
    row = await pool.fetchrow("SELECT * FROM shops WHERE id = $1;", parse_id(shop_id, "Shop"))
    if row is None:
        raise NotFoundError("Shop not found")
    return Shop.model_validate(dict(row))


async def get_shop_by_code(pool: asyncpg.Pool, shop_code: str) -> Shop:
    row = await pool.fetchrow("SELECT * FROM shops WHERE shop_code = $1;", shop_code.strip().upper())
    if row is None:
        raise NotFoundError("Shop not found")
    return Shop.model_validate(dict(row))


# ---------------------------------------------------------------------------
# Staff accounts (admins, tailors, cutting masters)
# ---------------------------------------------------------------------------

async def find_staff_by_username(pool: asyncpg.Pool, role: Role, shop_id, username: str) -> StaffMember | None:
    row = await pool.fetchrow(
        f"SELECT * FROM {STAFF_TABLES[role]} WHERE username = $1 AND shop_id = $2;",
        username,
        parse_id(shop_id, "Shop"),
    )
    return StaffMember.model_validate(dict(row)) if row else None


async def get_staff(pool: asyncpg.Pool, role: Role, shop_id, staff_id) -> StaffMember:
    row = await pool.fetchrow(
        f"SELECT * FROM {STAFF_TABLES[role]} WHERE id = $1 AND shop_id = $2;",
        parse_id(staff_id, STAFF_LABELS[role]),
        shop_id,
    )
    if row is None:
        raise NotFoundError(f"{STAFF_LABELS[role]} not found")
    return StaffMember.model_validate(dict(row))


async def list_staff(pool: asyncpg.Pool, role: Role, shop_id, order_by: str = "created_at DESC") -> list[StaffMember]:
    rows = await pool.fetch(
        f"SELECT * FROM {STAFF_TABLES[role]} WHERE shop_id = $1 ORDER BY {order_by};",
        shop_id,
    )
    return [StaffMember.model_validate(dict(r)) for r in rows]


async def create_staff(
    pool: asyncpg.Pool, role: Role, shop_id, username: str, name: str, password_hash: str
) -> StaffMember:
    try:
        row = await pool.fetchrow(
            f"""
            INSERT INTO {STAFF_TABLES[role]} (id, shop_id, username, name, password_hash)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *;
            """,
            uuid.uuid4(),
            shop_id,
            username,
            name,
            password_hash,
        )
    except UniqueViolationError:
        raise ConflictError("Username already exists")
    return StaffMember.model_validate(dict(row))


async def delete_staff(pool: asyncpg.Pool, role: Role, shop_id, staff_id) -> StaffMember:
    row = await pool.fetchrow(
        f"DELETE FROM {STAFF_TABLES[role]} WHERE id = $1 AND shop_id = $2 RETURNING *;",
        parse_id(staff_id, STAFF_LABELS[role]),
        shop_id,
    )
    if row is None:
        raise NotFoundError(f"{STAFF_LABELS[role]} not found")
    return StaffMember.model_validate(dict(row))


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

def _measurements_json(measurements: list[Measurement]) -> list[dict]:
    return [m.model_dump(mode="json") for m in measurements]


async def list_customers(
    pool: asyncpg.Pool, shop_id, phone: str | None = None, page: int = 1, limit: int = 20
) -> tuple[list[Customer], int]:
    where = "shop_id = $1"
    params: list = [shop_id]
    if phone:
        params.append(f"%{phone}%")
        where += f" AND phone LIKE ${len(params)}"
    total = await pool.fetchval(f"SELECT COUNT(*) FROM customers WHERE {where};", *params)
    rows = await pool.fetch(
        f"""
        SELECT * FROM customers WHERE {where}
        ORDER BY created_at DESC
        OFFSET ${len(params) + 1} LIMIT ${len(params) + 2};
        """,
        *params,
        (page - 1) * limit,
        limit,
    )
    return [Customer.model_validate(dict(r)) for r in rows], total


async def get_customer(pool: asyncpg.Pool, shop_id, customer_id) -> Customer:
    row = await pool.fetchrow(
        "SELECT * FROM customers WHERE id = $1 AND shop_id = $2;",
        parse_id(customer_id, "Customer"),
        shop_id,
    )
    if row is None:
        raise NotFoundError("Customer not found")
    return Customer.model_validate(dict(row))


async def find_customer_by_phone(pool: asyncpg.Pool, shop_id, phone: str) -> Customer | None:
    row = await pool.fetchrow(
        "SELECT * FROM customers WHERE phone = $1 AND shop_id = $2;",
        phone,
        shop_id,
    )
    return Customer.model_validate(dict(row)) if row else None


async def create_customer(
    pool: asyncpg.Pool,
    shop_id,
    name: str,
    phone: str,
    notes: str = "",
    measurements: list[Measurement] | None = None,
) -> Customer:
    try:
        row = await pool.fetchrow(
            """
            INSERT INTO customers (id, shop_id, name, phone, notes, measurements)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *;
            """,
            uuid.uuid4(),
            shop_id,
            name,
            phone,
            notes,
            _measurements_json(measurements or []),
        )
    except UniqueViolationError:
        raise ConflictError("Customer with this phone number already exists")
    return Customer.model_validate(dict(row))


async def update_customer(
    pool: asyncpg.Pool,
    shop_id,
    customer_id,
    name: str | None = None,
    phone: str | None = None,
    notes: str | None = None,
    measurements: list[Measurement] | None = None,
) -> Customer:
    """None leaves a field unchanged."""
    current = await get_customer(pool, shop_id, customer_id)
    try:
        row = await pool.fetchrow(
            """
            UPDATE customers
            SET name = $3, phone = $4, notes = $5, measurements = $6, updated_at = NOW()
            WHERE id = $1 AND shop_id = $2
            RETURNING *;
            """,
            current.id,
            shop_id,
            name or current.name,
            phone or current.phone,
            notes if notes is not None else current.notes,
            _measurements_json(measurements if measurements is not None else current.measurements),
        )
    except UniqueViolationError:
        raise ConflictError("Phone number in use by another customer")
    if row is None:
        raise NotFoundError("Customer not found")
    return Customer.model_validate(dict(row))


async def delete_customer(pool: asyncpg.Pool, shop_id, customer_id) -> int:
    """Delete a customer and their orders. Returns number of orders removed."""
    cid = parse_id(customer_id, "Customer")
    async with pool.acquire() as conn:
        async with conn.transaction():
            status = await conn.execute(
                "DELETE FROM orders WHERE customer_id = $1 AND shop_id = $2;",
                cid,
                shop_id,
            )
            row = await conn.fetchrow(
                "DELETE FROM customers WHERE id = $1 AND shop_id = $2 RETURNING id;",
                cid,
                shop_id,
            )
            if row is None:
                raise NotFoundError("Customer not found")
    return _row_count(status)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

ORDER_SELECT = """
    SELECT o.*, c.name AS customer_name, c.phone AS customer_phone
    FROM orders o
    JOIN customers c ON c.id = o.customer_id
"""


def _order_from_row(row: asyncpg.Record) -> Order:
    data = dict(row)
    name = data.pop("customer_name", None)
    phone = data.pop("customer_phone", None)
    if name is not None:
        data["customer"] = CustomerRef(id=data["customer_id"], name=name, phone=phone)
    return Order.model_validate(data)


async def generate_next_order_number(conn, shop_id) -> str:
    """Next code after the most recently created well-formed order number of this shop."""
    last_code = await conn.fetchval(
        """
        SELECT order_number FROM orders
        WHERE shop_id = $1 AND order_number ~ $2
        ORDER BY created_at DESC
        LIMIT 1;
        """,
        shop_id,
        ORDER_NUMBER_SQL_PATTERN,
    )
    return next_order_number(last_code)


async def create_order(
    pool: asyncpg.Pool,
    shop_id,
    customer_id,
    garment_type: str,
    description: str = "",
    price: float = 0,
    advance_paid: float = 0,
    due_date: datetime | None = None,
    status: str = ORDER_PLACED,
    max_attempts: int | None = None,
) -> Order:
    """
    Insert an order under the next order number. A concurrent insert can take the
    same number first; the unique (order_number, shop_id) constraint rejects ours and
    generation is retried against the new history.
    """
    customer = await get_customer(pool, shop_id, customer_id)
    attempts = max_attempts or settings.order_number_max_attempts
    async with pool.acquire() as conn:
        for attempt in range(1, attempts + 1):
            order_number = await generate_next_order_number(conn, shop_id)
            try:
                async with conn.transaction():
                    order_id = await conn.fetchval(
                        """
                        INSERT INTO orders (id, shop_id, customer_id, order_number, garment_type,
                                            description, status, price, advance_paid, due_date)
                        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                        RETURNING id;
                        """,
                        uuid.uuid4(),
                        shop_id,
                        customer.id,
                        order_number,
                        garment_type,
                        description,
                        status,
                        price,
                        advance_paid,
                        due_date,
                    )
            except UniqueViolationError as e:
                if e.constraint_name != ORDER_NUMBER_CONSTRAINT:
                    raise ConflictError("Order already exists")
                order_number_conflicts_total.inc()
                logger.warning(
                    "Order number %s already taken in shop %s (attempt %d/%d)",
                    order_number, shop_id, attempt, attempts,
                )
                continue
            orders_created_total.inc()
            logger.info("Created order %s for shop %s", order_number, shop_id)
            return await get_order(pool, shop_id, order_id)
    raise ConflictError("Could not allocate a unique order number, please try again")


def _order_filters(
    shop_id,
    status: str | None = None,
    include_inactive: bool = False,
    customer_id=None,
    assigned_tailor_id=None,
    assigned_cutting_master_id=None,
    pending_only: bool = False,
) -> tuple[str, list]:
    clauses = ["o.shop_id = $1"]
    params: list = [shop_id]
    if not include_inactive:
        clauses.append("o.is_active")
    if pending_only:
        clauses.append("o.pending_approval")
    for column, value in (
        ("o.status", status),
        ("o.customer_id", customer_id),
        ("o.assigned_tailor_id", assigned_tailor_id),
        ("o.assigned_cutting_master_id", assigned_cutting_master_id),
    ):
        if value is not None:
            params.append(value)
            clauses.append(f"{column} = ${len(params)}")
    return " AND ".join(clauses), params


async def list_orders(
    pool: asyncpg.Pool,
    shop_id,
    page: int = 1,
    limit: int | None = 20,
    **filters,
) -> tuple[list[Order], int]:
    where, params = _order_filters(shop_id, **filters)
    total = await pool.fetchval(f"SELECT COUNT(*) FROM orders o WHERE {where};", *params)
    query = f"{ORDER_SELECT} WHERE {where} ORDER BY o.created_at DESC"
    if limit is not None:
        query += f" OFFSET ${len(params) + 1} LIMIT ${len(params) + 2}"
        params += [(page - 1) * limit, limit]
    rows = await pool.fetch(query + ";", *params)
    return [_order_from_row(r) for r in rows], total


async def get_order(
    pool: asyncpg.Pool,
    shop_id,
    order_id,
    assigned_tailor_id=None,
    assigned_cutting_master_id=None,
) -> Order:
    """Assignee filters restrict staff portals to their own orders."""
    where, params = _order_filters(
        shop_id,
        include_inactive=True,
        assigned_tailor_id=assigned_tailor_id,
        assigned_cutting_master_id=assigned_cutting_master_id,
    )
    params.append(parse_id(order_id, "Order"))
    row = await pool.fetchrow(f"{ORDER_SELECT} WHERE {where} AND o.id = ${len(params)};", *params)
    if row is None:
        raise NotFoundError("Order not found")
    return _order_from_row(row)


async def mutate_order(
    pool: asyncpg.Pool,
    shop_id,
    order_id,
    change: Callable[[Order], Order],
    assigned_tailor_id=None,
    assigned_cutting_master_id=None,
) -> Order:
    """
    Lock the order row, apply change(order) and persist the columns it altered.
    Errors raised by change() roll the transaction back untouched.
    """
    where, params = _order_filters(
        shop_id,
        include_inactive=True,
        assigned_tailor_id=assigned_tailor_id,
        assigned_cutting_master_id=assigned_cutting_master_id,
    )
    params.append(parse_id(order_id, "Order"))
    async with pool.acquire() as conn:
        async with conn.transaction():
            row = await conn.fetchrow(
                f"SELECT o.* FROM orders o WHERE {where} AND o.id = ${len(params)} FOR UPDATE;",
                *params,
            )
            if row is None:
                raise NotFoundError("Order not found")
            current = _order_from_row(row)
            updated = change(current)
            changed = [
                col for col in ORDER_MUTABLE_COLUMNS
                if getattr(updated, col) != getattr(current, col)
            ]
            if changed:
                assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(changed, start=3))
                await conn.execute(
                    f"UPDATE orders SET {assignments}, updated_at = NOW() WHERE id = $1 AND shop_id = $2;",
                    current.id,
                    shop_id,
                    *[getattr(updated, col) for col in changed],
                )
    return await get_order(pool, shop_id, order_id)


async def delete_order(pool: asyncpg.Pool, shop_id, order_id) -> None:
    status = await pool.execute(
        "DELETE FROM orders WHERE id = $1 AND shop_id = $2;",
        parse_id(order_id, "Order"),
        shop_id,
    )
    if _row_count(status) == 0:
        raise NotFoundError("Order not found")


async def bulk_assign_tailor(pool: asyncpg.Pool, shop_id, order_ids: list[str], tailor_id) -> int:
    """
    Assign every listed order of this shop to one tailor. Unknown ids and other
    shops' orders are skipped. Returns the number of orders actually changed.
    """
    tailor = await get_staff(pool, Role.TAILOR, shop_id, tailor_id)
    ids = []
    for raw in order_ids:
        try:
            ids.append(parse_id(raw, "Order"))
        except NotFoundError:
            continue
    if not ids:
        return 0
    status = await pool.execute(
        """
        UPDATE orders SET assigned_tailor_id = $1, updated_at = NOW()
        WHERE shop_id = $2 AND id = ANY($3::uuid[])
          AND assigned_tailor_id IS DISTINCT FROM $1;
        """,
        tailor.id,
        shop_id,
        ids,
    )
    modified = _row_count(status)
    logger.info("Bulk-assigned %d/%d orders to tailor %s in shop %s", modified, len(order_ids), tailor.id, shop_id)
    return modified


async def order_stats(pool: asyncpg.Pool, shop_id) -> dict:
    row = await pool.fetchrow(
        """
        SELECT
            (SELECT COUNT(*) FROM customers WHERE shop_id = $1) AS total_customers,
            COUNT(*) FILTER (WHERE is_active) AS total_active_orders,
            COUNT(*) FILTER (WHERE is_active AND status = $2) AS ready_for_pickup,
            COUNT(*) FILTER (WHERE pending_approval) AS pending_approval
        FROM orders WHERE shop_id = $1;
        """,
        shop_id,
        READY_FOR_PICKUP,
    )
    return dict(row)


async def status_breakdown(pool: asyncpg.Pool, shop_id) -> list[dict]:
    rows = await pool.fetch(
        """
        SELECT status, COUNT(*) AS count FROM orders
        WHERE shop_id = $1 AND is_active
        GROUP BY status ORDER BY status;
        """,
        shop_id,
    )
    return [{"status": r["status"], "count": r["count"]} for r in rows]


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

async def list_inventory(pool: asyncpg.Pool, shop_id, low_stock_only: bool = False) -> list[InventoryItem]:
    query = "SELECT * FROM inventory WHERE shop_id = $1"
    if low_stock_only:
        query += " AND quantity <= low_stock_threshold"
    rows = await pool.fetch(query + " ORDER BY item_name;", shop_id)
    return [InventoryItem.model_validate(dict(r)) for r in rows]


async def create_inventory_item(
    pool: asyncpg.Pool, shop_id, item_name: str, unit: str, quantity: int = 0, low_stock_threshold: int = 10
) -> InventoryItem:
    try:
        row = await pool.fetchrow(
            """
            INSERT INTO inventory (id, shop_id, item_name, quantity, unit, low_stock_threshold)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING *;
            """,
            uuid.uuid4(),
            shop_id,
            item_name,
            quantity,
            unit,
            low_stock_threshold,
        )
    except UniqueViolationError:
        raise ConflictError("Inventory item with this name already exists")
    return InventoryItem.model_validate(dict(row))


async def adjust_inventory(pool: asyncpg.Pool, shop_id, item_id, delta: int) -> InventoryItem:
    """Atomic counter update; decrements clamp at zero."""
    row = await pool.fetchrow(
        """
        UPDATE inventory SET quantity = GREATEST(quantity + $3, 0), updated_at = NOW()
        WHERE id = $1 AND shop_id = $2
        RETURNING *;
        """,
        parse_id(item_id, "Item"),
        shop_id,
        delta,
    )
    if row is None:
        raise NotFoundError("Item not found")
    inventory_adjustments_total.labels(direction="increment" if delta >= 0 else "decrement").inc()
    return InventoryItem.model_validate(dict(row))


async def delete_inventory_item(pool: asyncpg.Pool, shop_id, item_id) -> InventoryItem:
    row = await pool.fetchrow(
        "DELETE FROM inventory WHERE id = $1 AND shop_id = $2 RETURNING *;",
        parse_id(item_id, "Item"),
        shop_id,
    )
    if row is None:
        raise NotFoundError("Item not found")
    return InventoryItem.model_validate(dict(row))
