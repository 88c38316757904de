from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SessionUser, require_king
from database import get_db
from models import APPLICATION_STATUSES, APPLICATION_TYPES, Application, Review, User
from schemas.application import ServiceStatusUpdate
from services.lifecycle import InvalidStateError, NotFoundError, hard_delete_application
from services.storage import ObjectStorage, get_storage
from utils.case import camelize

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/service", tags=["service"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

MSG_INVALID_STATUS = "Invalid status value"
UNKNOWN_USER = {"name": "Unknown", "email": "", "phoneNumber": ""}


def _service_row(app: Application, user: Optional[User]) -> dict[str, Any]:
    user_info = (
        {"name": user.name, "email": user.email, "phoneNumber": user.phone_number} if user else UNKNOWN_USER
    )
    return {
        "id": app.id,
        "type": app.type,
        "status": app.status,
        "createdAt": app.created_at.isoformat() if app.created_at else None,
        "updatedAt": app.updated_at.isoformat() if app.updated_at else None,
        "user": {"id": app.user_id, **user_info},
        "information": camelize(app.information) if app.information else {},
        "comment": app.comment,
        "files": list(app.files or []),
    }


@router.get("")
async def list_service_applications(
    status: str = "apply",
    search: str = "",
    type: str = "",
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    if status not in APPLICATION_STATUSES:
        raise HTTPException(status_code=400, detail=MSG_INVALID_STATUS)
    if type and type not in APPLICATION_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown application type: {type}")

    filters = [Application.status == status]
    if search.strip():
        word = search.strip().lower()
        user_ids = (
            await db.execute(
                select(User.id).where(
                    or_(
                        func.lower(User.name).contains(word, autoescape=True),
                        func.lower(User.email).contains(word, autoescape=True),
                        User.phone_number.contains(word, autoescape=True),
                    )
                )
            )
        ).scalars().all()
        if not user_ids:
            return {"success": True, "count": 0, "applications": []}
        filters.append(Application.user_id.in_(user_ids))
    if type:
        filters.append(Application.type == type)

    # Open work is handled oldest first, finished work is browsed newest first
    order = Application.created_at.asc() if status in ("apply", "in_progress") else Application.created_at.desc()
    result = await db.execute(
        select(Application, User).outerjoin(User, User.id == Application.user_id).where(*filters).order_by(order)
    )
    rows = [_service_row(app, user) for app, user in result.all()]
    return {"success": True, "count": len(rows), "applications": rows}


@router.patch("/status")
async def update_service_status(
    body: ServiceStatusUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    if not body.id or not body.status:
        raise HTTPException(status_code=400, detail="Application id and status are required")
    if body.status not in APPLICATION_STATUSES:
        raise HTTPException(status_code=400, detail=MSG_INVALID_STATUS)

    app = (await db.execute(select(Application).where(Application.id == body.id))).scalar_one_or_none()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    app.status = body.status
    if body.comment is not None:
        app.comment = body.comment
    app.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("Application %s moved to %s", app.id, app.status)
    return {"success": True, "application": {"id": app.id, "status": app.status, "comment": app.comment}}


@router.delete("/delete/{application_id}")
async def delete_service_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(require_king),
):
    try:
        await hard_delete_application(db, storage, application_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "message": "Application deleted"}


@dashboard_router.get("/counts")
async def dashboard_counts(
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    apply_count = await db.scalar(select(func.count(Application.id)).where(Application.status == "apply"))
    in_progress_count = await db.scalar(
        select(func.count(Application.id)).where(Application.status == "in_progress")
    )
    register_review_count = await db.scalar(
        select(func.count(Review.id)).where(Review.status == "register")
    )
    return {
        "applyCount": apply_count or 0,
        "inProgressCount": in_progress_count or 0,
        "registerReviewCount": register_review_count or 0,
    }
