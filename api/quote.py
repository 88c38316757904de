from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SessionUser, require_king
from api.estimates import estimate_to_response, get_estimate_or_404
from config import settings
from database import get_db
from models import ANNOUNCEMENT_TYPES, QuoteAnnouncement
from schemas.estimate import AnnouncementUpdate

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/quote", tags=["quote"])


def default_announcement(kind: str) -> str:
    return {
        "consumer": settings.default_consumer_announcement,
        "business": settings.default_business_announcement,
        "delivery": settings.default_delivery_announcement,
    }[kind]


def _check_type(kind: str) -> None:
    if kind not in ANNOUNCEMENT_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown announcement type: {kind}")


async def _latest(db: AsyncSession, kind: str) -> Optional[QuoteAnnouncement]:
    result = await db.execute(
        select(QuoteAnnouncement)
        .where(QuoteAnnouncement.type == kind)
        .order_by(QuoteAnnouncement.updated_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@router.get("/announcements/{kind}")
async def get_announcement(
    kind: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    """Legal text printed on quotes; the configured default until someone saves one."""
    _check_type(kind)
    announcement = await _latest(db, kind)
    content = announcement.content if announcement else default_announcement(kind)
    return {"success": True, "type": kind, "announcement": content, "isDefault": announcement is None}


@router.post("/announcements/{kind}")
async def save_announcement(
    kind: str,
    body: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    _check_type(kind)
    if not isinstance(body.content, str) or not body.content.strip():
        raise HTTPException(status_code=400, detail="Announcement content must be a non-empty string")
    now = datetime.now(timezone.utc)
    announcement = await _latest(db, kind)
    if announcement is None:
        announcement = QuoteAnnouncement(id=f"ann-{uuid.uuid4().hex[:12]}", type=kind, created_at=now)
        db.add(announcement)
    announcement.content = body.content
    announcement.updated_at = now
    await db.flush()
    logger.info("Saved %s announcement", kind)
    return {"success": True, "type": kind, "announcement": announcement.content}


@router.get("/{estimate_id}")
async def get_quote(
    estimate_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    return {"estimate": estimate_to_response(await get_estimate_or_404(db, estimate_id))}
