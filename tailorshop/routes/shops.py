from fastapi import APIRouter, Query
from pydantic import Field

from tailorshop import db
from tailorshop.errors import ValidationError
from tailorshop.models import CamelModel
from tailorshop.order_state import Role
from tailorshop.security import hash_password, issue_token

router = APIRouter(prefix="/api/shops", tags=["shops"])


class RegisterShopBody(CamelModel):
    shop_name: str = Field(..., min_length=1)
    phone: str = ""
    address: str = ""
    admin_username: str = Field(..., min_length=1)
    admin_password: str = Field(..., min_length=1)


def _shop_json(shop) -> dict:
    return {"id": str(shop.id), "shopName": shop.shop_name, "shopCode": shop.shop_code}


@router.post("/register", status_code=201)
async def register_shop(body: RegisterShopBody) -> dict:
    """Create a shop with its first admin and log that admin in."""
    shop_name = body.shop_name.strip()
    if not shop_name:
        raise ValidationError("Shop name is required")
    password_hash = hash_password(body.admin_password)
    pool = await db.get_pool()
    shop, admin = await db.register_shop(
        pool,
        shop_name,
        body.phone.strip(),
        body.address.strip(),
        body.admin_username.strip(),
        password_hash,
    )
    return {
        "shop": _shop_json(shop),
        "admin": {"id": str(admin.id), "username": admin.username},
        "token": issue_token(admin, Role.ADMIN),
    }


@router.get("/lookup")
async def lookup_shop(code: str = Query(default="", description="Shop code")) -> dict:
    if not code.strip():
        raise ValidationError("Shop code is required")
    pool = await db.get_pool()
    shop = await db.get_shop_by_code(pool, code)
    return {"shop": _shop_json(shop)}
