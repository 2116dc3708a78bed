"""
Password hashing and bearer tokens for the mobile client. The shop a request
acts on always comes from the verified token, never from the request body.
"""
import time
import uuid
from dataclasses import dataclass

import jwt
from fastapi import Depends, Request
from werkzeug.security import check_password_hash, generate_password_hash

from tailorshop.config import settings
from tailorshop.errors import AuthError, ValidationError
from tailorshop.models import StaffMember
from tailorshop.order_state import Role
from tailorshop.redis_client import is_token_revoked


@dataclass(frozen=True)
class Principal:
    id: uuid.UUID
    role: Role
    shop_id: uuid.UUID
    username: str
    name: str
    jti: str
    expires_at: int


def hash_password(password: str) -> str:
    if not password or len(password) < settings.password_min_length:
        raise ValidationError(f"Password must be at least {settings.password_min_length} characters")
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def issue_token(staff: StaffMember, role: Role, now: int | None = None) -> str:
    issued_at = now if now is not None else int(time.time())
    payload = {
        "sub": str(staff.id),
        "role": role.value,
        "shop_id": str(staff.shop_id),
        "username": staff.username,
        "name": staff.name,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + settings.jwt_expires_minutes * 60,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return Principal(
            id=uuid.UUID(payload["sub"]),
            role=Role(payload["role"]),
            shop_id=uuid.UUID(payload["shop_id"]),
            username=payload.get("username", ""),
            name=payload.get("name", ""),
            jti=payload["jti"],
            expires_at=int(payload["exp"]),
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise AuthError("Invalid token")


def _bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Authentication required")
    return token.strip()


async def current_principal(request: Request) -> Principal:
    principal = decode_token(_bearer_token(request))
    if await is_token_revoked(principal.jti):
        raise AuthError("Token revoked")
    return principal


def require_role(role: Role):
    async def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if principal.role != role:
            raise AuthError("Access denied")
        return principal
    return dependency


require_admin = require_role(Role.ADMIN)
require_tailor = require_role(Role.TAILOR)
require_cutting_master = require_role(Role.CUTTING_MASTER)
