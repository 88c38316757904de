"""
Attachment upload with rollback.

A batch of files for one owner (an application or a review) is validated up
front, then uploaded strictly one at a time. Every successful upload is pushed
onto an applied stack; if a later file fails, the stack is unwound and each
uploaded object is deleted again before the original error is re-raised, so a
failed batch leaves neither records nor orphaned objects behind.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Callable, Optional

from config import settings
from services.storage import ObjectStorage, StoredObject

logger = logging.getLogger("service_desk.attachments")

ProgressCallback = Callable[[dict[str, Any]], None]


class AttachmentError(Exception):
    """Batch rejected before anything was uploaded."""


class AttachmentLimitError(AttachmentError):
    pass


class AttachmentSizeError(AttachmentError):
    pass


class AttachmentTypeError(AttachmentError):
    pass


@dataclass(frozen=True)
class AttachmentPolicy:
    resource: str
    max_file_size: int
    max_count: int = 5
    # Empty means any type
    allowed_mime_types: tuple[str, ...] = ()


APPLICATION_FILE_POLICY = AttachmentPolicy(
    resource="applications",
    max_file_size=settings.max_application_file_bytes,
    max_count=settings.max_attachments,
)

REVIEW_IMAGE_POLICY = AttachmentPolicy(
    resource="reviews",
    max_file_size=settings.max_review_image_bytes,
    max_count=settings.max_attachments,
    allowed_mime_types=("image/jpeg", "image/png"),
)


@dataclass
class UploadTask:
    original_name: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadedAttachment:
    stored: StoredObject
    original_name: str
    mime_type: Optional[str]
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: f"att-{uuid.uuid4().hex[:12]}")

    def to_record(self) -> dict[str, Any]:
        """Record stored in Application.files / Review.images."""
        return {
            "id": self.id,
            "url": self.stored.url,
            "filename": PurePosixPath(self.stored.key).name,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "size": self.stored.size,
            "objectKey": self.stored.key,
            "uploadedAt": self.uploaded_at.isoformat(),
        }


def validate_batch(policy: AttachmentPolicy, existing_count: int, tasks: list[UploadTask]) -> None:
    if not tasks:
        raise AttachmentError("No files provided")
    if existing_count + len(tasks) > policy.max_count:
        raise AttachmentLimitError(
            f"At most {policy.max_count} files are allowed "
            f"({existing_count} already attached, {len(tasks)} new)"
        )
    limit_mb = policy.max_file_size // (1024 * 1024)
    for task in tasks:
        if task.size > policy.max_file_size:
            raise AttachmentSizeError(f"{task.original_name} exceeds the {limit_mb}MB limit")
        if policy.allowed_mime_types and task.content_type not in policy.allowed_mime_types:
            raise AttachmentTypeError(
                f"{task.original_name}: only {', '.join(policy.allowed_mime_types)} files are allowed"
            )


def build_object_key(resource: str, owner_id: str, timestamp_ms: int, index: int, original_name: str) -> str:
    # Keep the basename only so a crafted filename cannot nest or escape the owner's prefix
    name = PurePosixPath(original_name.replace("\\", "/")).name or "file"
    return f"{resource}/{owner_id}/{timestamp_ms}_{index}_{name}"


def object_keys(records: list[dict[str, Any]] | None) -> list[str]:
    return [r["objectKey"] for r in (records or []) if r.get("objectKey")]


def _emit(on_progress: Optional[ProgressCallback], current: int, total: int, file_name: str, status: str) -> None:
    if on_progress is None:
        return
    on_progress({"current": current, "total": total, "fileName": file_name, "status": status})


async def delete_objects_best_effort(
    storage: ObjectStorage,
    keys: list[str],
    batch_size: Optional[int] = None,
    batch_delay: Optional[float] = None,
) -> int:
    """
    Delete objects in bounded sequential batches. Failures are logged and skipped.
    Returns how many deletions went through.
    """
    batch_size = max(1, batch_size or settings.rollback_batch_size)
    batch_delay = settings.rollback_batch_delay_seconds if batch_delay is None else batch_delay
    deleted = 0
    for start in range(0, len(keys), batch_size):
        if start and batch_delay:
            await asyncio.sleep(batch_delay)
        for key in keys[start:start + batch_size]:
            try:
                await storage.delete(key)
                deleted += 1
            except Exception:
                logger.warning("Failed to delete object %s", key, exc_info=True)
    return deleted


async def _rollback(storage: ObjectStorage, applied: list[StoredObject]) -> None:
    keys = []
    while applied:
        keys.append(applied.pop().key)
    if not keys:
        return
    deleted = await delete_objects_best_effort(storage, keys)
    logger.info("Rolled back %d of %d uploaded objects", deleted, len(keys))


async def upload_batch(
    storage: ObjectStorage,
    policy: AttachmentPolicy,
    owner_id: str,
    tasks: list[UploadTask],
    on_progress: Optional[ProgressCallback] = None,
    delay: Optional[float] = None,
    existing_count: int = 0,
) -> list[dict[str, Any]]:
    """
    Upload every task or none of them. Returns attachment records in task order.

    Raises AttachmentError subclasses before any upload when the batch is invalid;
    any upload failure triggers compensation and is then re-raised unchanged.
    """
    validate_batch(policy, existing_count, tasks)
    delay = settings.upload_delay_seconds if delay is None else delay
    timestamp_ms = int(time.time() * 1000)
    total = len(tasks)
    applied: list[StoredObject] = []
    records: list[dict[str, Any]] = []

    current = 0
    try:
        for index, task in enumerate(tasks):
            current = index + 1
            _emit(on_progress, current, total, task.original_name, "uploading")
            key = build_object_key(policy.resource, owner_id, timestamp_ms, index, task.original_name)
            stored = await storage.upload(key, task.data, task.content_type)
            applied.append(stored)
            records.append(
                UploadedAttachment(stored=stored, original_name=task.original_name, mime_type=task.content_type).to_record()
            )
            _emit(on_progress, current, total, task.original_name, "completed")
            if delay and current < total:
                await asyncio.sleep(delay)
    except BaseException:
        # Includes cancellation when the client disconnects mid-batch
        failed_name = tasks[current - 1].original_name if current else ""
        logger.warning("Upload of %s for %s/%s failed, rolling back", failed_name, policy.resource, owner_id)
        _emit(on_progress, current, total, failed_name, "error")
        await _rollback(storage, applied)
        raise

    logger.info("Uploaded %d files for %s/%s", total, policy.resource, owner_id)
    return records


async def commit_or_discard(db, storage: ObjectStorage, records: list[dict[str, Any]]) -> None:
    """
    Commit the rows that now reference freshly uploaded records. If the commit
    fails (or is cancelled) the uploaded objects are deleted again before the
    error propagates, so no object outlives its missing row.
    """
    try:
        await db.commit()
    except BaseException:
        keys = object_keys(records)
        logger.warning("Commit after upload failed, discarding %d objects", len(keys))
        await delete_objects_best_effort(storage, keys)
        raise
