import logging
import time

from fastapi import APIRouter, Depends
from pydantic import Field

from tailorshop import db
from tailorshop.errors import AuthError, NotFoundError
from tailorshop.metrics import logins_total
from tailorshop.models import CamelModel
from tailorshop.order_state import Role
from tailorshop.redis_client import revoke_token
from tailorshop.security import Principal, current_principal, issue_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginBody(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    shop_id: str = Field(..., min_length=1, description="Shop the account belongs to")


async def _login(role: Role, body: LoginBody) -> dict:
    pool = await db.get_pool()
    try:
        staff = await db.find_staff_by_username(pool, role, body.shop_id, body.username.strip())
    except NotFoundError:
        staff = None
    if staff is None or not verify_password(staff.password_hash, body.password):
        logins_total.labels(role=role.value, outcome="failure").inc()
        logger.warning("Failed %s login for username=%s shop=%s", role.value, body.username, body.shop_id)
        raise AuthError("Invalid credentials")

    logins_total.labels(role=role.value, outcome="success").inc()
    account = {"id": str(staff.id), "username": staff.username}
    if role != Role.ADMIN:
        account["name"] = staff.name
    return {"token": issue_token(staff, role), role.value: account}


@router.post("/admin/login")
async def admin_login(body: LoginBody) -> dict:
    return await _login(Role.ADMIN, body)


@router.post("/tailor/login")
async def tailor_login(body: LoginBody) -> dict:
    return await _login(Role.TAILOR, body)


@router.post("/cuttingmaster/login")
async def cutting_master_login(body: LoginBody) -> dict:
    return await _login(Role.CUTTING_MASTER, body)


@router.post("/logout")
async def logout(principal: Principal = Depends(current_principal)) -> dict:
    """Revoke the presented token for the rest of its lifetime."""
    await revoke_token(principal.jti, principal.expires_at - int(time.time()))
    return {"message": "Logged out"}
