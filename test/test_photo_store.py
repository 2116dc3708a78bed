"""
Local photo storage (PHOTO_DIR from conftest, no bucket configured) and the
shared ready-photo upload helper.
"""
import asyncio
import io
import os
import re
import time
import uuid

import pytest
from starlette.datastructures import Headers, UploadFile

from tailorshop import db
from tailorshop.config import settings
from tailorshop.errors import NotFoundError, ValidationError
from tailorshop.order_state import Role
from tailorshop.photo_store import delete_photo, save_photo
from tailorshop.routes.common import upload_ready_photo
from tailorshop.security import Principal


def _local_path(url: str) -> str:
    return os.path.join(settings.photo_dir, url[len(settings.photo_base_url.rstrip("/")) + 1:])


def _files_in_ready_dir() -> set[str]:
    ready = os.path.join(settings.photo_dir, "ready")
    return set(os.listdir(ready)) if os.path.isdir(ready) else set()


def test_rejects_non_image_content_type():
    with pytest.raises(ValidationError):
        asyncio.run(save_photo(b"hello", "notes.txt", "text/plain"))


def test_rejects_missing_content_type():
    with pytest.raises(ValidationError):
        asyncio.run(save_photo(b"\xff\xd8\xff", "photo.jpg", None))


def test_rejects_empty_photo():
    with pytest.raises(ValidationError):
        asyncio.run(save_photo(b"", "photo.jpg", "image/jpeg"))


def test_local_write_returns_public_url():
    url = asyncio.run(save_photo(b"\xff\xd8\xffjpeg-bytes", "Suit Photo.JPG", "image/jpeg"))
    assert re.fullmatch(r"/uploads/ready/[0-9a-f]{32}\.jpg", url)
    with open(_local_path(url), "rb") as f:
        assert f.read() == b"\xff\xd8\xffjpeg-bytes"


def test_extension_falls_back_to_content_type():
    url = asyncio.run(save_photo(b"\x89PNG", None, "image/png"))
    assert url.endswith(".png")


def test_delete_photo_removes_local_file():
    url = asyncio.run(save_photo(b"\x89PNG", "p.png", "image/png"))
    asyncio.run(delete_photo(url))
    assert not os.path.exists(_local_path(url))
    # Unknown URLs and repeated deletes are ignored
    asyncio.run(delete_photo(url))
    asyncio.run(delete_photo("https://example.com/elsewhere.jpg"))


def _principal(role: Role) -> Principal:
    return Principal(
        id=uuid.uuid4(),
        role=role,
        shop_id=uuid.uuid4(),
        username="ravi",
        name="Ravi",
        jti=uuid.uuid4().hex,
        expires_at=int(time.time()) + 3600,
    )


def _upload(data: bytes = b"\xff\xd8\xffjpeg", content_type: str = "image/jpeg") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename="ready.jpg",
        headers=Headers({"content-type": content_type}),
    )


def test_upload_removes_photo_when_order_update_fails(monkeypatch):
    async def fake_get_order(pool, shop_id, order_id, **assignee):
        return object()

    async def fake_mutate_order(pool, shop_id, order_id, change, **assignee):
        # Unassigned between the first read and the locked update
        raise NotFoundError("Order not found")

    monkeypatch.setattr(db, "get_order", fake_get_order)
    monkeypatch.setattr(db, "mutate_order", fake_mutate_order)
    before = _files_in_ready_dir()

    with pytest.raises(NotFoundError):
        asyncio.run(upload_ready_photo(None, _principal(Role.TAILOR), str(uuid.uuid4()), _upload()))

    assert _files_in_ready_dir() == before


def test_upload_rejects_bad_type_before_touching_order(monkeypatch):
    calls = []

    async def fake_get_order(pool, shop_id, order_id, **assignee):
        return object()

    async def fake_mutate_order(*args, **kwargs):
        calls.append(args)

    monkeypatch.setattr(db, "get_order", fake_get_order)
    monkeypatch.setattr(db, "mutate_order", fake_mutate_order)

    with pytest.raises(ValidationError):
        asyncio.run(
            upload_ready_photo(None, _principal(Role.ADMIN), str(uuid.uuid4()), _upload(b"x", "text/plain"))
        )
    assert calls == []
