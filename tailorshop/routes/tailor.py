"""
Tailor portal. A tailor sees only orders assigned to them. Marking an order
ready submits the photo for admin approval instead of changing the status.
"""
from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import Field, field_validator

from tailorshop import db, order_state
from tailorshop.models import CamelModel, Measurement, check_measurements
from tailorshop.order_state import IN_PROGRESS_STATUSES, READY_FOR_PICKUP, Role
from tailorshop.routes.common import order_json, record_status_change, statuses_json, upload_ready_photo
from tailorshop.security import Principal, require_tailor

router = APIRouter(prefix="/api/tailor", tags=["tailor"])


class StatusBody(CamelModel):
    status: str | None = None
    ready_photo_url: str | None = None


class MeasurementsBody(CamelModel):
    measurements: list[Measurement] = Field(default_factory=list)

    @field_validator("measurements")
    @classmethod
    def _one_per_type(cls, v: list[Measurement]) -> list[Measurement]:
        return check_measurements(v)


@router.get("/dashboard")
async def dashboard(principal: Principal = Depends(require_tailor)) -> dict:
    pool = await db.get_pool()
    orders, total = await db.list_orders(
        pool, principal.shop_id, assigned_tailor_id=principal.id, limit=None
    )
    return {
        "stats": {
            "totalOrders": total,
            "readyForPickup": sum(1 for o in orders if o.status == READY_FOR_PICKUP),
            "inProgress": sum(1 for o in orders if o.status in IN_PROGRESS_STATUSES),
            "pendingApproval": sum(1 for o in orders if o.pending_approval),
        },
        "orders": [order_json(o) for o in orders],
    }


@router.get("/orders/{order_id}")
async def get_order(order_id: str, principal: Principal = Depends(require_tailor)) -> dict:
    pool = await db.get_pool()
    order = await db.get_order(pool, principal.shop_id, order_id, assigned_tailor_id=principal.id)
    customer = await db.get_customer(pool, principal.shop_id, order.customer_id)
    data = order_json(order)
    data["customer"] = customer.to_json()
    return {"order": data, "statuses": statuses_json()}


@router.patch("/orders/{order_id}/status")
async def update_status(order_id: str, body: StatusBody, principal: Principal = Depends(require_tailor)) -> dict:
    order_state.validate_status(body.status)
    pool = await db.get_pool()
    before = await db.get_order(pool, principal.shop_id, order_id, assigned_tailor_id=principal.id)
    order = await db.mutate_order(
        pool,
        principal.shop_id,
        order_id,
        lambda o: order_state.set_status(o, Role.TAILOR, body.status, body.ready_photo_url),
        assigned_tailor_id=principal.id,
    )
    record_status_change(before.status, order, principal)
    return {"order": order_json(order)}


@router.post("/orders/{order_id}/ready-photo")
async def ready_photo(
    order_id: str,
    photo: UploadFile = File(...),
    principal: Principal = Depends(require_tailor),
) -> dict:
    pool = await db.get_pool()
    order = await upload_ready_photo(pool, principal, order_id, photo, assigned_tailor_id=principal.id)
    return {"order": order_json(order)}


@router.put("/customers/{customer_id}/measurements")
async def update_measurements(
    customer_id: str, body: MeasurementsBody, principal: Principal = Depends(require_tailor)
) -> dict:
    pool = await db.get_pool()
    customer = await db.update_customer(
        pool, principal.shop_id, customer_id, measurements=body.measurements
    )
    return {"customer": customer.to_json()}
