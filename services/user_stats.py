"""
Per-user activity statistics for the admin user screens.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import APPLICATION_STATUSES, Application, Review, User
from utils.case import camelize


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_summary(user: User) -> dict[str, Any]:
    """Public user fields (never the password hash)."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phoneNumber": user.phone_number,
        "image": user.image,
        "authority": user.authority,
        "provider": user.provider or "credentials",
        "lastLoginAt": _iso(user.last_login_at),
        "isDeleted": bool(user.is_deleted),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


async def activity_stats(db: AsyncSession, user_ids: list[str]) -> dict[str, dict[str, Any]]:
    """serviceCount / lastServiceDate / reviewCount / lastReviewDate / averageRating per user id."""
    if not user_ids:
        return {}
    service_rows = await db.execute(
        select(Application.user_id, func.count(Application.id), func.max(Application.created_at))
        .where(Application.user_id.in_(user_ids))
        .group_by(Application.user_id)
    )
    review_rows = await db.execute(
        select(Review.user_id, func.count(Review.id), func.max(Review.created_at), func.avg(Review.rating))
        .where(Review.user_id.in_(user_ids), Review.is_deleted.is_(False))
        .group_by(Review.user_id)
    )

    stats = {
        uid: {"serviceCount": 0, "lastServiceDate": None, "reviewCount": 0, "lastReviewDate": None, "averageRating": 0}
        for uid in user_ids
    }
    for uid, count, last in service_rows.all():
        stats[uid]["serviceCount"] = count
        stats[uid]["lastServiceDate"] = _iso(last)
    for uid, count, last, avg in review_rows.all():
        stats[uid]["reviewCount"] = count
        stats[uid]["lastReviewDate"] = _iso(last)
        stats[uid]["averageRating"] = round(float(avg), 1) if avg else 0
    return stats


def totals(users: list[User], stats: dict[str, dict[str, Any]]) -> dict[str, int]:
    return {
        "totalUsers": len(users),
        "totalAdmins": sum(1 for u in users if u.authority == "king"),
        "totalRegularUsers": sum(1 for u in users if u.authority == "user"),
        "totalGuests": sum(1 for u in users if u.authority == "guest"),
        "usersWithServices": sum(1 for s in stats.values() if s["serviceCount"] > 0),
        "usersWithReviews": sum(1 for s in stats.values() if s["reviewCount"] > 0),
        "totalServices": sum(s["serviceCount"] for s in stats.values()),
        "totalReviews": sum(s["reviewCount"] for s in stats.values()),
    }


async def withdrawn_user_detail(db: AsyncSession, user: User) -> dict[str, Any]:
    apps = (
        await db.execute(
            select(Application).where(Application.user_id == user.id).order_by(Application.created_at.desc())
        )
    ).scalars().all()
    reviews = (
        await db.execute(
            select(Review)
            .where(Review.user_id == user.id, Review.is_deleted.is_(False))
            .order_by(Review.created_at.desc())
        )
    ).scalars().all()

    services = [
        {
            "id": a.id,
            "type": a.type,
            "status": a.status,
            "createdAt": _iso(a.created_at),
            "updatedAt": _iso(a.updated_at),
            "content": camelize(a.information) if a.information else (a.comment or ""),
            "files": [
                {k: f.get(k) for k in ("id", "originalName", "size", "mimeType", "url")} for f in (a.files or [])
            ],
        }
        for a in apps
    ]
    review_items = [
        {
            "id": r.id,
            "serviceType": r.service_type,
            "rating": r.rating,
            "content": r.content,
            "status": r.status,
            "createdAt": _iso(r.created_at),
            "updatedAt": _iso(r.updated_at),
            "imageCount": len(r.images or []),
            "images": [{k: i.get(k) for k in ("id", "originalName", "url")} for i in (r.images or [])],
        }
        for r in reviews
    ]
    stats = {
        "totalServices": len(apps),
        "totalReviews": len(reviews),
        "servicesByStatus": {s: sum(1 for a in apps if a.status == s) for s in APPLICATION_STATUSES},
        "reviewsByStatus": {s: sum(1 for r in reviews if r.status == s) for s in ("register", "active", "hidden")},
        "averageRating": round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0,
        "firstServiceDate": _iso(apps[-1].created_at) if apps else None,
        "lastServiceDate": _iso(apps[0].created_at) if apps else None,
        "firstReviewDate": _iso(reviews[-1].created_at) if reviews else None,
        "lastReviewDate": _iso(reviews[0].created_at) if reviews else None,
        "deletedAt": _iso(user.updated_at),
    }
    return {
        "user": {**user_summary(user), "deletedAt": _iso(user.updated_at)},
        "services": services,
        "reviews": review_items,
        "stats": stats,
    }
