"""
Cutting-master portal: tracks the cutting sub-status of assigned orders and
hands them on to a tailor. Cutting status never moves the main order status.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import Field

from tailorshop import db, order_state
from tailorshop.models import CamelModel
from tailorshop.order_state import CUTTING_DONE, Role
from tailorshop.routes.common import order_json, statuses_json
from tailorshop.security import Principal, require_cutting_master

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cuttingmaster", tags=["cutting master"])


class CuttingStatusBody(CamelModel):
    cutting_status: str | None = None


class AssignTailorBody(CamelModel):
    tailor_id: str = Field(..., min_length=1)


@router.get("/dashboard")
async def dashboard(principal: Principal = Depends(require_cutting_master)) -> dict:
    pool = await db.get_pool()
    orders, total = await db.list_orders(
        pool, principal.shop_id, assigned_cutting_master_id=principal.id, limit=None
    )
    done = sum(1 for o in orders if o.cutting_status == CUTTING_DONE)
    return {
        "stats": {"totalOrders": total, "cuttingPending": total - done, "cuttingDone": done},
        "orders": [order_json(o) for o in orders],
    }


@router.get("/orders/{order_id}")
async def get_order(order_id: str, principal: Principal = Depends(require_cutting_master)) -> dict:
    pool = await db.get_pool()
    order = await db.get_order(
        pool, principal.shop_id, order_id, assigned_cutting_master_id=principal.id
    )
    customer = await db.get_customer(pool, principal.shop_id, order.customer_id)
    data = order_json(order)
    data["customer"] = customer.to_json()
    return {"order": data, "statuses": statuses_json()}


@router.patch("/orders/{order_id}/cutting-status")
async def update_cutting_status(
    order_id: str, body: CuttingStatusBody, principal: Principal = Depends(require_cutting_master)
) -> dict:
    pool = await db.get_pool()
    order = await db.mutate_order(
        pool,
        principal.shop_id,
        order_id,
        lambda o: order_state.set_cutting_status(o, body.cutting_status),
        assigned_cutting_master_id=principal.id,
    )
    logger.info("Order %s cutting status %s", order.order_number, order.cutting_status)
    return {"order": {"id": str(order.id), "cuttingStatus": order.cutting_status, "status": order.status}}


@router.patch("/orders/{order_id}/assign-tailor")
async def assign_tailor(
    order_id: str, body: AssignTailorBody, principal: Principal = Depends(require_cutting_master)
) -> dict:
    pool = await db.get_pool()
    tailor = await db.get_staff(pool, Role.TAILOR, principal.shop_id, body.tailor_id)
    order = await db.mutate_order(
        pool,
        principal.shop_id,
        order_id,
        lambda o: order_state.assign_tailor(o, tailor.id),
        assigned_cutting_master_id=principal.id,
    )
    return {
        "order": {
            "id": str(order.id),
            "assignedTailorId": str(tailor.id),
            "tailorName": tailor.name,
        }
    }


@router.get("/tailors")
async def list_tailors(principal: Principal = Depends(require_cutting_master)) -> dict:
    pool = await db.get_pool()
    tailors = await db.list_staff(pool, Role.TAILOR, principal.shop_id, order_by="name")
    return {"tailors": [{"id": str(t.id), "name": t.name, "username": t.username} for t in tailors]}
