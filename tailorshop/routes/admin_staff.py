"""
Tailor and cutting-master accounts. Both share one shape and one set of routes.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import Field

from tailorshop import db
from tailorshop.errors import ValidationError
from tailorshop.models import CamelModel
from tailorshop.order_state import Role
from tailorshop.security import Principal, hash_password, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


class StaffBody(CamelModel):
    username: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


async def _list(role: Role, principal: Principal) -> list[dict]:
    pool = await db.get_pool()
    return [s.to_json() for s in await db.list_staff(pool, role, principal.shop_id)]


async def _create(role: Role, body: StaffBody, principal: Principal) -> dict:
    username, name = body.username.strip(), body.name.strip()
    if not username or not name:
        raise ValidationError("Username, name, and password are required")
    password_hash = hash_password(body.password)
    pool = await db.get_pool()
    staff = await db.create_staff(pool, role, principal.shop_id, username, name, password_hash)
    logger.info("Created %s %s in shop %s", role.value, username, principal.shop_id)
    return staff.to_json()


async def _delete(role: Role, staff_id: str, principal: Principal) -> dict:
    pool = await db.get_pool()
    staff = await db.delete_staff(pool, role, principal.shop_id, staff_id)
    return {"message": f'{db.STAFF_LABELS[role]} "{staff.name}" deleted'}


@router.get("/tailors")
async def list_tailors(principal: Principal = Depends(require_admin)) -> dict:
    return {"tailors": await _list(Role.TAILOR, principal)}


@router.post("/tailors", status_code=201)
async def create_tailor(body: StaffBody, principal: Principal = Depends(require_admin)) -> dict:
    return {"tailor": await _create(Role.TAILOR, body, principal)}


@router.delete("/tailors/{tailor_id}")
async def delete_tailor(tailor_id: str, principal: Principal = Depends(require_admin)) -> dict:
    return await _delete(Role.TAILOR, tailor_id, principal)


@router.get("/cutting-masters")
async def list_cutting_masters(principal: Principal = Depends(require_admin)) -> dict:
    return {"cuttingMasters": await _list(Role.CUTTING_MASTER, principal)}


@router.post("/cutting-masters", status_code=201)
async def create_cutting_master(body: StaffBody, principal: Principal = Depends(require_admin)) -> dict:
    return {"cuttingMaster": await _create(Role.CUTTING_MASTER, body, principal)}


@router.delete("/cutting-masters/{cutting_master_id}")
async def delete_cutting_master(cutting_master_id: str, principal: Principal = Depends(require_admin)) -> dict:
    return await _delete(Role.CUTTING_MASTER, cutting_master_id, principal)
