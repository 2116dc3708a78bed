import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, Query, UploadFile
from pydantic import Field

from tailorshop import db, order_state
from tailorshop.errors import ValidationError
from tailorshop.metrics import order_approvals_total
from tailorshop.models import CamelModel, GarmentType
from tailorshop.order_state import ORDER_PLACED, READY_FOR_PICKUP, Role
from tailorshop.routes.common import (
    order_json,
    page_json,
    record_status_change,
    statuses_json,
    upload_ready_photo,
)
from tailorshop.security import Principal, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/orders", tags=["admin"])


class CreateOrderBody(CamelModel):
    customer_id: str = Field(..., min_length=1)
    garment_type: GarmentType
    description: str = ""
    price: float = Field(default=0, ge=0)
    advance_paid: float = Field(default=0, ge=0)
    due_date: datetime | None = None
    status: str = ORDER_PLACED


class UpdateOrderBody(CamelModel):
    garment_type: GarmentType | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    advance_paid: float | None = Field(default=None, ge=0)
    due_date: datetime | None = None
    status: str | None = None
    ready_photo_url: str | None = None


class StatusBody(CamelModel):
    status: str | None = None
    ready_photo_url: str | None = None


class ApprovalBody(CamelModel):
    approved: bool


class AssignBody(CamelModel):
    tailor_id: str | None = None
    cutting_master_id: str | None = None


class BulkAssignBody(CamelModel):
    order_ids: list[str] = Field(..., min_length=1)
    tailor_id: str = Field(..., min_length=1)


class ActiveBody(CamelModel):
    is_active: bool


@router.get("")
async def list_orders(
    status: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    principal: Principal = Depends(require_admin),
) -> dict:
    if status == "all":
        status = None
    if status is not None:
        order_state.validate_status(status)
    pool = await db.get_pool()
    orders, total = await db.list_orders(
        pool,
        principal.shop_id,
        page=page,
        limit=limit,
        status=status,
        include_inactive=include_inactive,
    )
    result = page_json("orders", [order_json(o) for o in orders], total, page, limit)
    result["statuses"] = statuses_json()
    return result


@router.get("/pending-approval")
async def list_pending_approval(principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    orders, total = await db.list_orders(
        pool, principal.shop_id, pending_only=True, include_inactive=True, limit=None
    )
    return {"orders": [order_json(o) for o in orders], "total": total}


@router.post("", status_code=201)
async def create_order(body: CreateOrderBody, principal: Principal = Depends(require_admin)) -> dict:
    status = order_state.validate_status(body.status)
    if status == READY_FOR_PICKUP:
        raise ValidationError(f"Photo is required for {READY_FOR_PICKUP} status")
    pool = await db.get_pool()
    order = await db.create_order(
        pool,
        principal.shop_id,
        body.customer_id,
        garment_type=body.garment_type,
        description=body.description.strip(),
        price=body.price,
        advance_paid=body.advance_paid,
        due_date=body.due_date,
        status=status,
    )
    return {"order": order_json(order)}


@router.post("/bulk-assign")
async def bulk_assign(body: BulkAssignBody, principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    modified = await db.bulk_assign_tailor(pool, principal.shop_id, body.order_ids, body.tailor_id)
    return {"modifiedCount": modified}


@router.get("/{order_id}")
async def get_order(order_id: str, principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    order = await db.get_order(pool, principal.shop_id, order_id)
    return {"order": order_json(order), "statuses": statuses_json()}


@router.put("/{order_id}")
async def update_order(
    order_id: str, body: UpdateOrderBody, principal: Principal = Depends(require_admin)
) -> dict:
    if body.ready_photo_url is not None and body.status != READY_FOR_PICKUP:
        raise ValidationError(f"readyPhotoUrl is only accepted with status {READY_FOR_PICKUP}")
    # Only dueDate may be cleared with null
    fields = {
        k: v
        for k, v in body.model_dump(exclude_unset=True, exclude={"status", "ready_photo_url"}).items()
        if v is not None or k == "due_date"
    }

    def change(order):
        updated = order.model_copy(update=fields)
        if body.status is not None and (body.status != order.status or body.ready_photo_url):
            updated = order_state.set_status(
                updated, Role.ADMIN, body.status, body.ready_photo_url or order.ready_photo_url
            )
        return updated

    pool = await db.get_pool()
    before = await db.get_order(pool, principal.shop_id, order_id)
    order = await db.mutate_order(pool, principal.shop_id, order_id, change)
    record_status_change(before.status, order, principal)
    return {"order": order_json(order)}


@router.patch("/{order_id}/status")
async def update_status(
    order_id: str, body: StatusBody, principal: Principal = Depends(require_admin)
) -> dict:
    order_state.validate_status(body.status)
    pool = await db.get_pool()
    before = await db.get_order(pool, principal.shop_id, order_id)
    order = await db.mutate_order(
        pool,
        principal.shop_id,
        order_id,
        lambda o: order_state.set_status(
            o, Role.ADMIN, body.status, body.ready_photo_url or o.ready_photo_url
        ),
    )
    record_status_change(before.status, order, principal)
    return {"order": order_json(order)}


@router.post("/{order_id}/ready-photo")
async def ready_photo(
    order_id: str,
    photo: UploadFile = File(...),
    principal: Principal = Depends(require_admin),
) -> dict:
    pool = await db.get_pool()
    order = await upload_ready_photo(pool, principal, order_id, photo)
    return {"order": order_json(order)}


@router.post("/{order_id}/approval")
async def resolve_approval(
    order_id: str, body: ApprovalBody, principal: Principal = Depends(require_admin)
) -> dict:
    pool = await db.get_pool()
    before = await db.get_order(pool, principal.shop_id, order_id)
    order = await db.mutate_order(
        pool,
        principal.shop_id,
        order_id,
        lambda o: order_state.approve_pending(o, body.approved),
    )
    outcome = "approved" if body.approved else "rejected"
    order_approvals_total.labels(outcome=outcome).inc()
    logger.info("Ready photo for order %s %s by admin %s", order.order_number, outcome, principal.id)
    record_status_change(before.status, order, principal)
    return {"order": order_json(order)}


@router.patch("/{order_id}/assign")
async def assign_staff(
    order_id: str, body: AssignBody, principal: Principal = Depends(require_admin)
) -> dict:
    """Fields left out are untouched; explicit null clears the assignment."""
    pool = await db.get_pool()
    tailor_id = cutting_master_id = None
    if body.tailor_id is not None:
        tailor_id = (await db.get_staff(pool, Role.TAILOR, principal.shop_id, body.tailor_id)).id
    if body.cutting_master_id is not None:
        cutting_master_id = (
            await db.get_staff(pool, Role.CUTTING_MASTER, principal.shop_id, body.cutting_master_id)
        ).id

    def change(order):
        if "tailor_id" in body.model_fields_set:
            order = order_state.assign_tailor(order, tailor_id)
        if "cutting_master_id" in body.model_fields_set:
            order = order_state.assign_cutting_master(order, cutting_master_id)
        return order

    order = await db.mutate_order(pool, principal.shop_id, order_id, change)
    return {"order": order_json(order)}


@router.patch("/{order_id}/active")
async def set_active(
    order_id: str, body: ActiveBody, principal: Principal = Depends(require_admin)
) -> dict:
    pool = await db.get_pool()
    order = await db.mutate_order(
        pool, principal.shop_id, order_id, lambda o: order_state.set_active(o, body.is_active)
    )
    return {"order": order_json(order)}


@router.delete("/{order_id}")
async def delete_order(order_id: str, principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    await db.delete_order(pool, principal.shop_id, order_id)
    logger.info("Deleted order %s in shop %s", order_id, principal.shop_id)
    return {"message": "Order deleted successfully"}
