import time
import uuid

import jwt
import pytest

from tailorshop.config import settings
from tailorshop.errors import AuthError, ValidationError
from tailorshop.models import StaffMember
from tailorshop.order_state import Role
from tailorshop.security import decode_token, hash_password, issue_token, verify_password


def _staff(name: str = "Ravi") -> StaffMember:
    return StaffMember(id=uuid.uuid4(), shop_id=uuid.uuid4(), username="ravi", name=name)


def test_password_hash_roundtrip():
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert verify_password(hashed, "secret1")
    assert not verify_password(hashed, "secret2")


def test_short_password_rejected():
    with pytest.raises(ValidationError):
        hash_password("12345")


def test_token_carries_role_and_shop():
    staff = _staff()
    principal = decode_token(issue_token(staff, Role.TAILOR))
    assert principal.id == staff.id
    assert principal.shop_id == staff.shop_id
    assert principal.role == Role.TAILOR
    assert principal.name == "Ravi"
    assert principal.expires_at - int(time.time()) <= settings.jwt_expires_minutes * 60


def test_tokens_have_distinct_ids():
    staff = _staff()
    assert decode_token(issue_token(staff, Role.ADMIN)).jti != decode_token(issue_token(staff, Role.ADMIN)).jti


def test_expired_token():
    issued = int(time.time()) - settings.jwt_expires_minutes * 60 - 60
    token = issue_token(_staff(), Role.ADMIN, now=issued)
    with pytest.raises(AuthError) as exc:
        decode_token(token)
    assert exc.value.message == "Token expired"


def test_token_signed_with_other_secret():
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "role": "admin", "shop_id": str(uuid.uuid4()), "jti": "x",
         "exp": int(time.time()) + 60},
        "some-other-secret-for-the-tailorshop-suite",
        algorithm="HS256",
    )
    with pytest.raises(AuthError) as exc:
        decode_token(token)
    assert exc.value.message == "Invalid token"


def test_token_with_unknown_role():
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "role": "owner", "shop_id": str(uuid.uuid4()), "jti": "x",
         "exp": int(time.time()) + 60},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(AuthError):
        decode_token(token)
