"""
Serialization and upload helpers shared by the admin and staff routers.
"""
import logging
import math

import asyncpg
from fastapi import UploadFile

from tailorshop import db, order_state
from tailorshop.metrics import order_status_changes_total
from tailorshop.models import Order
from tailorshop.order_state import ORDER_STATUSES, STATUS_COLORS, STATUS_LABELS
from tailorshop.photo_store import delete_photo, save_photo
from tailorshop.security import Principal

logger = logging.getLogger(__name__)

PUBLIC_ORDER_FIELDS = {
    "id",
    "order_number",
    "garment_type",
    "description",
    "status",
    "status_index",
    "price",
    "advance_paid",
    "balance_due",
    "due_date",
    "created_at",
    "ready_photo_url",
}


def order_json(order: Order) -> dict:
    data = order.to_json()
    data["statusLabel"] = STATUS_LABELS.get(order.status, order.status)
    data["statusColor"] = STATUS_COLORS.get(order.status, "gray")
    return data


def public_order_json(order: Order) -> dict:
    return order.model_dump(mode="json", by_alias=True, include=PUBLIC_ORDER_FIELDS)


def page_json(key: str, items: list[dict], total: int, page: int, limit: int) -> dict:
    return {
        key: items,
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit) if limit else 1,
    }


def statuses_json() -> list[dict]:
    return [{"value": s, "label": STATUS_LABELS[s], "color": STATUS_COLORS[s]} for s in ORDER_STATUSES]


def record_status_change(before_status: str, order: Order, principal: Principal) -> None:
    if order.status != before_status:
        order_status_changes_total.labels(status=order.status).inc()
        logger.info(
            "Order %s status %s -> %s by %s %s",
            order.order_number, before_status, order.status, principal.role.value, principal.id,
        )
    elif order.pending_approval:
        logger.info("Order %s ready photo awaiting approval (by %s)", order.order_number, principal.id)


async def upload_ready_photo(
    pool: asyncpg.Pool,
    principal: Principal,
    order_id: str,
    photo: UploadFile,
    **assignee,
) -> Order:
    """Store the photo, then mark the order ready (or pending approval for tailors)."""
    before = await db.get_order(pool, principal.shop_id, order_id, **assignee)
    url = await save_photo(await photo.read(), photo.filename, photo.content_type)
    try:
        order = await db.mutate_order(
            pool,
            principal.shop_id,
            order_id,
            lambda o: order_state.transition_to_ready(o, principal.role, url),
            **assignee,
        )
    except Exception:
        logger.warning("Order %s not updated, removing uploaded photo %s", order_id, url)
        await delete_photo(url)
        raise
    record_status_change(before.status, order, principal)
    return order
