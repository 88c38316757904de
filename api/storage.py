from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import SessionUser, get_session, require_king
from schemas.storage import CacheInvalidateRequest, StorageDeleteRequest
from services.review_feed import ReviewFeedStore, get_review_feed
from services.storage import ObjectStorage, StorageError, get_storage

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/storage", tags=["storage"])
cache_router = APIRouter(prefix="/api", tags=["cache"])


@router.delete("/delete")
async def delete_object(
    body: StorageDeleteRequest,
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(get_session),
):
    """Remove one uploaded object, e.g. after the client aborted a form."""
    if not body.object_id:
        raise HTTPException(status_code=400, detail="Object id is required")
    try:
        removed = await storage.delete(body.object_id)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("User %s deleted object %s (existed=%s)", session.id, body.object_id, removed)
    return {"success": True, "message": "File deleted", "result": {"deleted": removed}}


@cache_router.post("/invalidate-cache")
async def invalidate_cache(
    body: CacheInvalidateRequest,
    session: SessionUser = Depends(require_king),
    feed: ReviewFeedStore = Depends(get_review_feed),
):
    if not body.path:
        raise HTTPException(status_code=400, detail="Path to invalidate is required")
    # Only the review feed is cached in-process; any path clears it
    feed.invalidate()
    return {"success": True, "message": f"Cache for {body.path} invalidated"}
