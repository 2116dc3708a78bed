import logging
import re

from fastapi import APIRouter, Depends, Query
from pydantic import Field, field_validator

from tailorshop import db
from tailorshop.errors import ConflictError, ValidationError
from tailorshop.models import CamelModel, Measurement, check_measurements, normalize_phone
from tailorshop.routes.common import order_json, page_json
from tailorshop.security import Principal, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/customers", tags=["admin"])


class CustomerBody(CamelModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    notes: str = ""
    measurements: list[Measurement] = Field(default_factory=list)

    @field_validator("measurements")
    @classmethod
    def _one_per_type(cls, v: list[Measurement]) -> list[Measurement]:
        return check_measurements(v)


class UpdateCustomerBody(CamelModel):
    name: str | None = None
    phone: str | None = None
    notes: str | None = None
    measurements: list[Measurement] | None = None

    @field_validator("measurements")
    @classmethod
    def _one_per_type(cls, v: list[Measurement] | None) -> list[Measurement] | None:
        return check_measurements(v) if v is not None else v


@router.get("")
async def list_customers(
    phone: str | None = Query(default=None, description="Digits to search for"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(require_admin),
) -> dict:
    pool = await db.get_pool()
    digits = re.sub(r"\D", "", phone or "")
    customers, total = await db.list_customers(pool, principal.shop_id, digits or None, page, limit)
    return page_json("customers", [c.to_json() for c in customers], total, page, limit)


@router.post("", status_code=201)
async def create_customer(body: CustomerBody, principal: Principal = Depends(require_admin)) -> dict:
    name = body.name.strip()
    if not name:
        raise ValidationError("Name and phone are required")
    phone = normalize_phone(body.phone)
    pool = await db.get_pool()
    customer = await db.create_customer(
        pool, principal.shop_id, name, phone, body.notes.strip(), body.measurements
    )
    logger.info("Created customer %s in shop %s", customer.id, principal.shop_id)
    return {"customer": customer.to_json()}


@router.get("/{customer_id}")
async def get_customer(customer_id: str, principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    customer = await db.get_customer(pool, principal.shop_id, customer_id)
    orders, _ = await db.list_orders(
        pool, principal.shop_id, customer_id=customer.id, include_inactive=True, limit=None
    )
    return {"customer": customer.to_json(), "orders": [order_json(o) for o in orders]}


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str, body: UpdateCustomerBody, principal: Principal = Depends(require_admin)
) -> dict:
    pool = await db.get_pool()
    phone = normalize_phone(body.phone) if body.phone else None
    if phone:
        other = await db.find_customer_by_phone(pool, principal.shop_id, phone)
        if other is not None and other.id != db.parse_id(customer_id, "Customer"):
            raise ConflictError("Phone number in use by another customer")
    customer = await db.update_customer(
        pool,
        principal.shop_id,
        customer_id,
        name=body.name.strip() if body.name else None,
        phone=phone,
        notes=body.notes.strip() if body.notes is not None else None,
        measurements=body.measurements,
    )
    return {"customer": customer.to_json()}


@router.delete("/{customer_id}")
async def delete_customer(customer_id: str, principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    removed = await db.delete_customer(pool, principal.shop_id, customer_id)
    logger.info("Deleted customer %s and %d order(s) in shop %s", customer_id, removed, principal.shop_id)
    return {"message": "Customer deleted successfully", "ordersDeleted": removed}
