"""
Estimate search. Column filters and keyword matching over the JSON customer
info and line items both run in SQL, so only the requested page is loaded.
"""
from __future__ import annotations

import math
from datetime import datetime, time, timezone
from typing import Any, Optional

from sqlalchemy import String, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import LEGACY_ESTIMATE_TYPE, Estimate

CUSTOMER_FIELDS = ("name", "phone", "pcNumber", "contractType", "content")
ESTIMATE_FIELDS = ("notes", "estimateDescription")
LINE_ITEM_FIELDS = ("productName", "productCode", "distributor", "reconfirm", "remarks")
SEARCH_TYPES = ("all",) + CUSTOMER_FIELDS + ESTIMATE_FIELDS + LINE_ITEM_FIELDS

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 15


def parse_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """YYYY-MM-DD or ISO datetime; date-only end bounds cover the whole day. Raises ValueError."""
    if not value:
        return None
    text = value.strip()
    if len(text) == 10:
        day = datetime.strptime(text, "%Y-%m-%d").date()
        return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def date_range_filters(start_date: Optional[str], end_date: Optional[str]) -> list:
    filters = []
    start = parse_date(start_date)
    end = parse_date(end_date, end_of_day=True)
    if start:
        filters.append(Estimate.created_at >= start)
    if end:
        filters.append(Estimate.created_at <= end)
    return filters


def build_filters(
    estimate_type: Optional[str] = None,
    contractor_status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> list:
    filters = []
    if estimate_type and estimate_type != "all":
        filters.append(Estimate.estimate_type == estimate_type)
    if contractor_status == "true":
        filters.append(Estimate.is_contractor.is_(True))
    elif contractor_status == "false":
        filters.append(Estimate.is_contractor.is_(False))
    filters.extend(date_range_filters(start_date, end_date))
    return filters


def split_keywords(keyword: Optional[str]) -> list[str]:
    return [w.lower() for w in (keyword or "").split() if w]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _contains(expr, word: str):
    """Case-insensitive substring test; % and _ in the word match literally."""
    return func.lower(expr, type_=String).contains(word, autoescape=True)


def _line_items_contain(fields: tuple[str, ...], word: str, dialect: str):
    """EXISTS over the table_data array: some line item has the word in one of the fields."""
    if dialect == "postgresql":
        items = func.json_array_elements(Estimate.table_data).table_valued("value")
        values = [items.c.value.op("->>")(f) for f in fields]
    else:
        items = func.json_each(Estimate.table_data).table_valued("value")
        values = [func.json_extract(items.c.value, f"$.{f}") for f in fields]
    return exists(select(1).select_from(items).where(or_(*[_contains(v, word) for v in values])))


def word_condition(word: str, search_type: str = "all", dialect: str = "sqlite"):
    """SQL condition for one keyword word under the given search type."""
    if search_type == "all":
        return or_(
            *[_contains(Estimate.customer_info[f].as_string(), word) for f in CUSTOMER_FIELDS],
            _contains(Estimate.notes, word),
            _contains(Estimate.estimate_description, word),
            _line_items_contain(LINE_ITEM_FIELDS, word, dialect),
        )
    if search_type in CUSTOMER_FIELDS:
        return _contains(Estimate.customer_info[search_type].as_string(), word)
    if search_type == "notes":
        return _contains(Estimate.notes, word)
    if search_type == "estimateDescription":
        return _contains(Estimate.estimate_description, word)
    if search_type in LINE_ITEM_FIELDS:
        return _line_items_contain((search_type,), word, dialect)
    raise ValueError(f"Unknown search type: {search_type}")


def keyword_filters(words: list[str], search_type: str = "all", dialect: str = "sqlite") -> list:
    """Every word must match (AND); within a word any searchable field may (OR)."""
    return [word_condition(w, search_type, dialect) for w in words]


def project(estimate: Estimate, search_type: str = "all", words: Optional[list[str]] = None) -> dict[str, Any]:
    customer = estimate.customer_info or {}
    out: dict[str, Any] = {
        "id": estimate.id,
        "customerInfo": {
            "name": customer.get("name"),
            "phone": customer.get("phone"),
            "pcNumber": customer.get("pcNumber"),
        },
        "estimateType": estimate.estimate_type,
        "isContractor": bool(estimate.is_contractor),
        "createdAt": estimate.created_at.isoformat() if estimate.created_at else None,
    }
    if search_type == "notes":
        out["notes"] = estimate.notes
    elif search_type == "estimateDescription":
        out["estimateDescription"] = estimate.estimate_description
    elif search_type in LINE_ITEM_FIELDS:
        rows = estimate.table_data or []
        if words:
            rows = [r for r in rows if any(w in _text(r.get(search_type)).lower() for w in words)]
        out["tableData"] = [{"productName": r.get("productName"), search_type: r.get(search_type)} for r in rows]
    return out


async def search_estimates(
    db: AsyncSession,
    keyword: Optional[str] = None,
    search_type: str = "all",
    estimate_type: Optional[str] = None,
    contractor_status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> dict[str, Any]:
    if search_type not in SEARCH_TYPES:
        raise ValueError(f"Unknown search type: {search_type}")
    page = max(1, page)
    limit = max(1, limit)

    words = split_keywords(keyword)
    filters = build_filters(estimate_type, contractor_status, start_date, end_date)
    filters += keyword_filters(words, search_type, db.get_bind().dialect.name)

    total = await db.scalar(select(func.count(Estimate.id)).where(*filters)) or 0
    result = await db.execute(
        select(Estimate)
        .where(*filters)
        .order_by(Estimate.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "estimates": [project(e, search_type, words) for e in result.scalars().all()],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit) if total else 0,
        },
    }


def non_contractor_filters(start_date: str, end_date: str, exclude_old_data: bool = False) -> list:
    filters = [Estimate.is_contractor.is_(False), *date_range_filters(start_date, end_date)]
    if exclude_old_data:
        filters.append(Estimate.estimate_type != LEGACY_ESTIMATE_TYPE)
    return filters
