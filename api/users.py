from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SessionUser, ensure_self, get_session
from database import get_db
from models import Application, User
from schemas.user import CheckNameRequest
from services.lifecycle import InvalidStateError, withdraw_user
from services.user_stats import user_summary

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/users", tags=["users"])

MSG_USER_NOT_FOUND = "User not found"


@router.post("/check-name")
async def check_name(body: CheckNameRequest, db: AsyncSession = Depends(get_db)):
    name = (body.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    stmt = select(User.id).where(User.name == name)
    if body.user_id:
        stmt = stmt.where(User.id != body.user_id)
    taken = (await db.execute(stmt)).first() is not None
    return {
        "isAvailable": not taken,
        "message": "This name is already in use" if taken else "This name is available",
    }


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail=MSG_USER_NOT_FOUND)
    result = await db.execute(
        select(Application.id, Application.type, Application.status, Application.created_at)
        .where(Application.user_id == user_id)
        .order_by(Application.created_at.desc())
    )
    applications = [
        {"id": a_id, "type": a_type, "status": status, "createdAt": created.isoformat() if created else None}
        for a_id, a_type, status, created in result.all()
    ]
    return {"user": user_summary(user), "applications": applications}


@router.patch("/{user_id}/delete")
async def withdraw(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    """Account withdrawal (soft delete); only the user themselves may do it."""
    ensure_self(session, user_id)
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail=MSG_USER_NOT_FOUND)
    try:
        withdraw_user(user)
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await db.flush()
    logger.info("User %s withdrew", user_id)
    return {"message": "Account withdrawn", "deletedAt": datetime.now(timezone.utc).isoformat()}
