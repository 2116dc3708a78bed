import logging

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from tailorshop import db
from tailorshop.errors import ValidationError
from tailorshop.models import CamelModel, InventoryUnit
from tailorshop.security import Principal, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/inventory", tags=["admin"])


class InventoryItemBody(CamelModel):
    item_name: str = Field(..., min_length=1)
    quantity: int = Field(default=0, ge=0)
    unit: InventoryUnit
    low_stock_threshold: int = Field(default=10, ge=0)


class AdjustBody(CamelModel):
    amount: int = Field(default=1, ge=1)


@router.get("")
async def list_items(
    low_stock: bool = Query(default=False, alias="lowStock"),
    principal: Principal = Depends(require_admin),
) -> dict:
    pool = await db.get_pool()
    items = await db.list_inventory(pool, principal.shop_id, low_stock_only=low_stock)
    return {"items": [i.to_json() for i in items]}


@router.post("", status_code=201)
async def create_item(body: InventoryItemBody, principal: Principal = Depends(require_admin)) -> dict:
    item_name = body.item_name.strip()
    if not item_name:
        raise ValidationError("Item name is required")
    pool = await db.get_pool()
    item = await db.create_inventory_item(
        pool, principal.shop_id, item_name, body.unit, body.quantity, body.low_stock_threshold
    )
    return {"item": item.to_json()}


@router.post("/{item_id}/increment")
async def increment(
    item_id: str, body: AdjustBody | None = None, principal: Principal = Depends(require_admin)
) -> dict:
    amount = body.amount if body else 1
    pool = await db.get_pool()
    item = await db.adjust_inventory(pool, principal.shop_id, item_id, amount)
    logger.info("%s quantity increased by %d", item.item_name, amount)
    return {"item": item.to_json()}


@router.post("/{item_id}/decrement")
async def decrement(
    item_id: str, body: AdjustBody | None = None, principal: Principal = Depends(require_admin)
) -> dict:
    """Quantity floors at zero."""
    amount = body.amount if body else 1
    pool = await db.get_pool()
    item = await db.adjust_inventory(pool, principal.shop_id, item_id, -amount)
    logger.info("%s quantity decreased by %d", item.item_name, amount)
    return {"item": item.to_json()}


@router.delete("/{item_id}")
async def delete_item(item_id: str, principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    item = await db.delete_inventory_item(pool, principal.shop_id, item_id)
    return {"message": f'Item "{item.item_name}" deleted'}
