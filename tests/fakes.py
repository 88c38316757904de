"""
Test doubles and row factories shared by the test modules.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from models import Application, Estimate, Review, User
from services.storage import ObjectStorage, StorageError, StoredObject


class RecordingStorage(ObjectStorage):
    """In-memory object store that records every call; can be told to fail on given keys."""

    def __init__(self, fail_uploads_for: tuple[str, ...] = (), fail_deletes_for: tuple[str, ...] = ()):
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_uploads_for = fail_uploads_for
        self.fail_deletes_for = fail_deletes_for

    def url_for(self, key: str) -> str:
        return f"http://files.test/{key}"

    async def upload(self, key, data, content_type=None):
        self.calls.append(("upload", key))
        if any(key.endswith(name) for name in self.fail_uploads_for):
            raise StorageError(f"upload refused: {key}")
        self.objects[key] = data
        return StoredObject(key=key, url=self.url_for(key), size=len(data), content_type=content_type)

    async def delete(self, key):
        self.calls.append(("delete", key))
        if any(key.endswith(name) for name in self.fail_deletes_for):
            raise StorageError(f"delete refused: {key}")
        return self.objects.pop(key, None) is not None

    def put(self, key: str, data: bytes = b"x") -> dict:
        """Store an object directly and return its attachment record."""
        self.objects[key] = data
        return {
            "id": f"att-{uuid.uuid4().hex[:12]}",
            "url": self.url_for(key),
            "filename": key.rsplit("/", 1)[-1],
            "originalName": key.rsplit("/", 1)[-1],
            "mimeType": "image/png",
            "size": len(data),
            "objectKey": key,
            "uploadedAt": datetime.now(timezone.utc).isoformat(),
        }

    def keys_deleted(self) -> list[str]:
        return [key for op, key in self.calls if op == "delete"]


def _now(offset_minutes: int = 0) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=offset_minutes)


def make_user(
    name: str = "홍길동",
    email: Optional[str] = None,
    phone: Optional[str] = None,
    authority: str = "user",
    is_deleted: bool = False,
) -> User:
    uid = f"usr-{uuid.uuid4().hex[:12]}"
    return User(
        id=uid,
        name=name,
        email=email or f"{uid}@example.com",
        phone_number=phone,
        password=None,
        authority=authority,
        provider="credentials",
        is_deleted=is_deleted,
        created_at=_now(),
        updated_at=_now(),
    )


def make_application(
    user: User,
    app_type: str = "computer",
    status: str = "apply",
    files: Optional[list] = None,
    offset_minutes: int = 0,
) -> Application:
    return Application(
        id=f"app-{uuid.uuid4().hex[:12]}",
        type=app_type,
        user_id=user.id,
        information={"purpose": "gaming", "budget": "1500000", "os": "windows", "phone_number": "01012345678"},
        files=files or [],
        status=status,
        comment="",
        created_at=_now(offset_minutes),
        updated_at=_now(offset_minutes),
    )


def make_review(
    user: User,
    status: str = "register",
    is_deleted: bool = False,
    rating: int = 5,
    images: Optional[list] = None,
    offset_minutes: int = 0,
) -> Review:
    return Review(
        id=f"rev-{uuid.uuid4().hex[:12]}",
        service_type="computer",
        rating=rating,
        content="조립 PC 잘 받았습니다. 만족합니다.",
        user_id=user.id,
        status=status,
        is_deleted=is_deleted,
        images=images or [],
        created_at=_now(offset_minutes),
        updated_at=_now(offset_minutes),
    )


def make_estimate(
    name: str = "김철수",
    phone: str = "010-1111-2222",
    is_contractor: bool = False,
    estimate_type: str = "컴퓨터견적",
    created_at: Optional[datetime] = None,
    table_data: Optional[list] = None,
    notes: Optional[str] = None,
    description: Optional[str] = None,
) -> Estimate:
    created = created_at or _now()
    return Estimate(
        id=f"est-{uuid.uuid4().hex[:12]}",
        estimate_type=estimate_type,
        customer_info={"name": name, "phone": phone, "pcNumber": "PC-01", "contractType": "개인", "content": ""},
        table_data=table_data or [],
        service_data=[],
        payment_info={},
        calculated_values={},
        notes=notes,
        is_contractor=is_contractor,
        estimate_description=description,
        created_at=created,
        updated_at=created,
    )
