from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SessionUser, ensure_self, get_session, paginate, read_uploads, require_king
from database import get_db
from models import REVIEW_SERVICE_TYPES, REVIEW_STATUSES, Review, User
from schemas.review import ReviewCreate, ReviewStatusUpdate
from services.attachments import REVIEW_IMAGE_POLICY, AttachmentError, commit_or_discard, upload_batch
from services.lifecycle import InvalidStateError, NotFoundError, hard_delete_review, soft_delete_review
from services.review_feed import ReviewFeedStore, get_review_feed
from services.storage import ObjectStorage, get_storage

logger = logging.getLogger("service_desk.reviews")

router = APIRouter(prefix="/api/reviews", tags=["reviews"])

MSG_REVIEW_NOT_FOUND = "Review not found"
MIN_CONTENT_LENGTH = 10


def _image_meta(review_id: str, image: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": image.get("id"),
        "originalName": image.get("originalName"),
        "mimeType": image.get("mimeType"),
        "size": image.get("size"),
        "url": f"/api/reviews/images/{review_id}/{image.get('id')}",
    }


def _review_to_response(review: Review, include_images: bool = True) -> dict[str, Any]:
    out = {
        "id": review.id,
        "serviceType": review.service_type,
        "rating": review.rating,
        "content": review.content,
        "userId": review.user_id,
        "status": review.status,
        "isDeleted": bool(review.is_deleted),
        "imageCount": len(review.images or []),
        "createdAt": review.created_at.isoformat() if review.created_at else None,
        "updatedAt": review.updated_at.isoformat() if review.updated_at else None,
    }
    if include_images:
        out["images"] = [_image_meta(review.id, img) for img in (review.images or [])]
    return out


def _validate_review(body: ReviewCreate) -> tuple[str, int, str]:
    if not body.service_type or not body.rating or not body.content:
        raise HTTPException(status_code=400, detail="Service type, rating and content are required")
    if body.service_type not in REVIEW_SERVICE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown service type: {body.service_type}")
    if len(body.content.strip()) < MIN_CONTENT_LENGTH:
        raise HTTPException(status_code=400, detail=f"Review content must be at least {MIN_CONTENT_LENGTH} characters")
    if body.rating < 1 or body.rating > 5:
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")
    return body.service_type, body.rating, body.content


async def _get_review(db: AsyncSession, review_id: str) -> Review:
    review = (await db.execute(select(Review).where(Review.id == review_id))).scalar_one_or_none()
    if not review:
        raise HTTPException(status_code=404, detail=MSG_REVIEW_NOT_FOUND)
    return review


def _ensure_author(session: SessionUser, review: Review) -> None:
    if review.user_id != session.id:
        raise HTTPException(status_code=403, detail="Only the author can change this review")


async def _commit_and_invalidate(db: AsyncSession, feed: ReviewFeedStore) -> None:
    # Commit before clearing so a concurrent reload cannot cache pre-commit rows
    await db.commit()
    feed.invalidate()


async def load_active_feed(db: AsyncSession) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Review, User.name)
        .outerjoin(User, User.id == Review.user_id)
        .where(Review.status == "active")
        .order_by(Review.created_at.desc())
    )
    feed = []
    for review, author in result.all():
        item = _review_to_response(review)
        item["userName"] = author
        feed.append(item)
    return feed


@router.post("")
async def create_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    service_type, rating, content = _validate_review(body)
    now = datetime.now(timezone.utc)
    review = Review(
        id=f"rev-{uuid.uuid4().hex[:12]}",
        service_type=service_type,
        rating=rating,
        content=content,
        user_id=session.id,
        status="register",
        is_deleted=False,
        images=[],
        created_at=now,
        updated_at=now,
    )
    db.add(review)
    await _commit_and_invalidate(db, feed)
    return {"success": True, "message": "Review submitted", "review": _review_to_response(review)}


@router.get("")
async def list_reviews(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    stmt = select(Review, User.name).outerjoin(User, User.id == Review.user_id)
    if status:
        if status not in REVIEW_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status value")
        stmt = stmt.where(Review.status == status)
    result = await db.execute(stmt.order_by(Review.created_at.desc()))
    reviews = []
    for review, author in result.all():
        item = _review_to_response(review)
        item["userName"] = author
        reviews.append(item)
    return {"success": True, "reviews": reviews}


@router.get("/active")
async def list_active_reviews(
    db: AsyncSession = Depends(get_db),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    data = await feed.get(lambda: load_active_feed(db))
    return JSONResponse(content=data, headers={"Cache-Control": "no-store, max-age=0"})


@router.patch("/status")
async def update_review_status(
    body: ReviewStatusUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    if not body.id or not body.status:
        raise HTTPException(status_code=400, detail="Review id and status are required")
    if body.status not in REVIEW_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status value")
    review = await _get_review(db, body.id)
    review.status = body.status
    review.updated_at = datetime.now(timezone.utc)
    await _commit_and_invalidate(db, feed)
    logger.info("Review %s moved to %s", review.id, review.status)
    return {"success": True, "review": _review_to_response(review, include_images=False)}


@router.get("/user/{user_id}")
async def list_user_reviews(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    include_images: bool = Query(False, alias="includeImages"),
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    ensure_self(session, user_id)
    filters = [Review.user_id == user_id, Review.is_deleted.is_(False)]
    total = await db.scalar(select(func.count(Review.id)).where(*filters)) or 0
    offset, limit = paginate(page, limit)
    result = await db.execute(
        select(Review).where(*filters).order_by(Review.created_at.desc()).offset(offset).limit(limit)
    )
    return {
        "reviews": [_review_to_response(r, include_images=include_images) for r in result.scalars().all()],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit) if total else 0,
        },
    }


@router.get("/images/{review_id}/{image_id}")
async def get_review_image(review_id: str, image_id: str, db: AsyncSession = Depends(get_db)):
    review = await _get_review(db, review_id)
    for image in review.images or []:
        if image.get("id") == image_id:
            return RedirectResponse(image["url"], status_code=307)
    raise HTTPException(status_code=404, detail="Image not found")


@router.delete("/delete/{review_id}")
async def delete_review_permanently(
    review_id: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(require_king),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    try:
        await hard_delete_review(db, storage, review_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await _commit_and_invalidate(db, feed)
    return {"success": True, "message": "Review permanently deleted"}


@router.patch("/{review_id}")
async def edit_review(
    review_id: str,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    review = await _get_review(db, review_id)
    _ensure_author(session, review)
    service_type, rating, content = _validate_review(body)
    review.service_type = service_type
    review.rating = rating
    review.content = content
    # Edited reviews go back through moderation
    review.status = "register"
    review.updated_at = datetime.now(timezone.utc)
    await _commit_and_invalidate(db, feed)
    return {"success": True, "review": _review_to_response(review)}


@router.post("/{review_id}/images")
async def upload_review_images(
    review_id: str,
    images: list[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(get_session),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    review = await _get_review(db, review_id)
    _ensure_author(session, review)
    tasks = await read_uploads(images)
    existing = list(review.images or [])
    try:
        records = await upload_batch(storage, REVIEW_IMAGE_POLICY, review.id, tasks, existing_count=len(existing))
    except AttachmentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    review.images = existing + records
    review.updated_at = datetime.now(timezone.utc)
    await commit_or_discard(db, storage, records)
    feed.invalidate()
    return {"success": True, "images": [_image_meta(review.id, img) for img in review.images]}


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    review = await _get_review(db, review_id)
    _ensure_author(session, review)
    soft_delete_review(review)
    await _commit_and_invalidate(db, feed)
    return {"success": True, "message": "Review deleted"}


@router.patch("/{review_id}/delete")
async def withdraw_review(
    review_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    """Owner deletion that hands the review back to moderation."""
    review = await _get_review(db, review_id)
    _ensure_author(session, review)
    soft_delete_review(review, resubmit=True)
    await _commit_and_invalidate(db, feed)
    return {"success": True, "message": "Review deleted"}
