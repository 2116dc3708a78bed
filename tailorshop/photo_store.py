"""
Ready-photo storage. S3 when PHOTO_BUCKET is set, otherwise a local directory
served by the app under photo_base_url.
"""
import asyncio
import mimetypes
import os
import uuid
from typing import Any

import boto3

from tailorshop.config import settings
from tailorshop.errors import ValidationError

_s3_client: Any = None

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/heic"}


def _get_client():
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client("s3", region_name=settings.aws_region)
    return _s3_client


def _object_name(filename: str | None, content_type: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower() or mimetypes.guess_extension(content_type) or ""
    return f"ready/{uuid.uuid4().hex}{ext}"


def _write_local(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


async def save_photo(data: bytes, filename: str | None, content_type: str | None) -> str:
    """Store one image and return the URL to record on the order."""
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Only JPEG, PNG, WEBP or HEIC images are accepted")
    if not data:
        raise ValidationError("Photo is empty")
    name = _object_name(filename, content_type)

    if settings.photo_bucket:
        client = _get_client()
        await asyncio.to_thread(
            client.put_object,
            Bucket=settings.photo_bucket,
            Key=name,
            Body=data,
            ContentType=content_type,
        )
        return f"{_s3_url_prefix()}{name}"

    await asyncio.to_thread(_write_local, os.path.join(settings.photo_dir, name), data)
    return f"{_local_url_prefix()}{name}"


def _s3_url_prefix() -> str:
    return f"https://{settings.photo_bucket}.s3.{settings.aws_region}.amazonaws.com/"


def _local_url_prefix() -> str:
    return f"{settings.photo_base_url.rstrip('/')}/"


def _remove_local(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


async def delete_photo(url: str) -> None:
    """Remove a photo stored by save_photo. URLs it did not issue are ignored."""
    if settings.photo_bucket:
        prefix = _s3_url_prefix()
        if url.startswith(prefix):
            await asyncio.to_thread(
                _get_client().delete_object, Bucket=settings.photo_bucket, Key=url[len(prefix):]
            )
        return
    prefix = _local_url_prefix()
    if url.startswith(prefix):
        await asyncio.to_thread(_remove_local, os.path.join(settings.photo_dir, url[len(prefix):]))
