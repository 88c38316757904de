"""
Soft-delete / hard-delete lifecycle for applications, reviews and users.

Soft deletion only moves a record into its terminal state; hard deletion is
allowed from that state alone and removes remote attachment objects first
(best-effort), then the rows.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Application, Review, User
from services.attachments import delete_objects_best_effort, object_keys
from services.storage import ObjectStorage

logger = logging.getLogger("service_desk.lifecycle")


class NotFoundError(LookupError):
    pass


class InvalidStateError(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def cancel_application(app: Application) -> Application:
    app.status = "cancelled"
    app.updated_at = _now()
    return app


def soft_delete_review(review: Review, resubmit: bool = False) -> Review:
    """
    Owner deletion. With resubmit the review goes back to the admin queue
    (status register) instead of the terminal deleted state.
    """
    review.is_deleted = True
    review.status = "register" if resubmit else "deleted"
    review.updated_at = _now()
    return review


def withdraw_user(user: User) -> User:
    if user.is_deleted:
        raise InvalidStateError("User is already withdrawn")
    user.is_deleted = True
    user.updated_at = _now()
    return user


async def hard_delete_application(db: AsyncSession, storage: ObjectStorage, application_id: str) -> Application:
    result = await db.execute(select(Application).where(Application.id == application_id))
    app = result.scalar_one_or_none()
    if not app:
        raise NotFoundError("Application not found")
    if app.status != "cancelled":
        raise InvalidStateError("Only cancelled applications can be deleted")

    keys = object_keys(app.files)
    if keys:
        await delete_objects_best_effort(storage, keys)
    await db.delete(app)
    await db.flush()
    logger.info("Hard-deleted application %s (%d files)", application_id, len(keys))
    return app


async def hard_delete_review(db: AsyncSession, storage: ObjectStorage, review_id: str) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()
    if not review:
        raise NotFoundError("Review not found")
    if review.status != "deleted":
        raise InvalidStateError("Only deleted reviews can be permanently removed")

    keys = object_keys(review.images)
    if keys:
        await delete_objects_best_effort(storage, keys)
    await db.delete(review)
    await db.flush()
    logger.info("Hard-deleted review %s (%d images)", review_id, len(keys))
    return review


async def hard_delete_user(db: AsyncSession, storage: ObjectStorage, user_id: str) -> dict[str, Any]:
    """
    Permanently remove a withdrawn user with all their applications and reviews.
    Returns the counts of what was removed.
    """
    result = await db.execute(select(User).where(User.id == user_id, User.is_deleted.is_(True)))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("Withdrawn user not found")

    apps = (await db.execute(select(Application).where(Application.user_id == user_id))).scalars().all()
    reviews = (await db.execute(select(Review).where(Review.user_id == user_id))).scalars().all()

    application_keys = [k for a in apps for k in object_keys(a.files)]
    review_keys = [k for r in reviews for k in object_keys(r.images)]
    if application_keys or review_keys:
        await delete_objects_best_effort(storage, application_keys + review_keys)

    await db.execute(delete(Application).where(Application.user_id == user_id))
    await db.execute(delete(Review).where(Review.user_id == user_id))
    user_name = user.name
    await db.delete(user)
    await db.flush()

    deleted = {
        "user": user_name,
        "applications": len(apps),
        "reviews": len(reviews),
        "applicationImages": len(application_keys),
        "reviewImages": len(review_keys),
    }
    logger.info("Permanently deleted user %s: %s", user_id, deleted)
    return deleted
