from __future__ import annotations

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SessionUser, paginate, require_king
from database import get_db
from models import User
from services.lifecycle import NotFoundError, hard_delete_user
from services.storage import ObjectStorage, get_storage
from services.user_stats import activity_stats, totals, user_summary, withdrawn_user_detail

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/manage/users", tags=["manage-users"])


def _keyword_filter(keyword: Optional[str]):
    if not keyword:
        return None
    word = keyword.strip().lower()
    return or_(
        func.lower(User.name).contains(word, autoescape=True),
        func.lower(User.email).contains(word, autoescape=True),
        User.phone_number.contains(word, autoescape=True),
    )


async def _list_users(
    db: AsyncSession,
    withdrawn: bool,
    keyword: Optional[str],
    authority: Optional[str],
    page: int,
    limit: int,
) -> dict:
    filters = [User.is_deleted.is_(withdrawn)]
    kw = _keyword_filter(keyword)
    if kw is not None:
        filters.append(kw)
    if authority:
        filters.append(User.authority == authority)
    # Withdrawn users are ordered by withdrawal time, which is their last update
    order = User.updated_at.desc() if withdrawn else User.created_at.desc()
    users = (await db.execute(select(User).where(*filters).order_by(order))).scalars().all()

    stats = await activity_stats(db, [u.id for u in users])
    offset, limit = paginate(page, limit)
    rows = []
    for u in users[offset:offset + limit]:
        row = {**user_summary(u), **stats[u.id]}
        if withdrawn:
            row["deletedAt"] = row["updatedAt"]
        rows.append(row)
    return {
        "success": True,
        "users": rows,
        "stats": totals(users, stats),
        "pagination": {
            "total": len(users),
            "page": max(1, page),
            "limit": limit,
            "totalPages": math.ceil(len(users) / limit) if users else 0,
        },
    }


@router.get("")
async def list_users(
    keyword: Optional[str] = None,
    authority: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    return await _list_users(db, False, keyword, authority, page, limit)


@router.get("/deleted")
async def list_withdrawn_users(
    keyword: Optional[str] = None,
    authority: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    return await _list_users(db, True, keyword, authority, page, limit)


@router.get("/deleted/{user_id}")
async def get_withdrawn_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    user = (
        await db.execute(select(User).where(User.id == user_id, User.is_deleted.is_(True)))
    ).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="Withdrawn user not found")
    return {"success": True, **(await withdrawn_user_detail(db, user))}


@router.delete("/deleted/{user_id}/permanent")
async def delete_user_permanently(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(require_king),
):
    try:
        deleted = await hard_delete_user(db, storage, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "message": "User permanently deleted", "deletedData": deleted}
