import re

from fastapi import APIRouter

from tailorshop import db
from tailorshop.config import settings
from tailorshop.errors import NotFoundError, ValidationError
from tailorshop.models import CamelModel
from tailorshop.routes.common import public_order_json

router = APIRouter(prefix="/api", tags=["public"])


class TrackBody(CamelModel):
    phone: str = ""
    shop_code: str = ""


@router.post("/track")
async def track_orders(body: TrackBody) -> dict:
    """Customer-facing lookup of the newest active orders by phone within one shop."""
    phone = re.sub(r"\D", "", body.phone)
    if not phone:
        raise ValidationError("Phone number is required")
    if not body.shop_code.strip():
        raise ValidationError("Shop code is required")

    pool = await db.get_pool()
    shop = await db.get_shop_by_code(pool, body.shop_code)
    customer = await db.find_customer_by_phone(pool, shop.id, phone)
    if customer is None:
        raise NotFoundError("No customer found with that phone number")

    orders, _ = await db.list_orders(
        pool, shop.id, customer_id=customer.id, limit=settings.public_track_limit
    )
    if not orders:
        raise NotFoundError("No active orders found for this phone number")

    return {
        "customer": {"id": str(customer.id), "name": customer.name, "phone": customer.phone},
        "shop": {"name": shop.shop_name, "address": shop.address, "phone": shop.phone},
        "orders": [public_order_json(o) for o in orders],
    }
