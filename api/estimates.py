from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import SessionUser, require_king
from database import get_db
from models import ESTIMATE_TYPES, Estimate
from schemas.estimate import DeleteNonContractorsRequest, EstimateBody, PriceImportRequest
from services.estimate_search import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    non_contractor_filters,
    search_estimates,
)
from services.price_import import parse_price_list, to_table_rows

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/estimates", tags=["estimates"])

MSG_ESTIMATE_NOT_FOUND = "Estimate not found"
MSG_DATES_REQUIRED = "Both startDate and endDate are required"
SEARCH_CACHE_CONTROL = "public, max-age=10, s-maxage=10"


def estimate_to_response(estimate: Estimate) -> dict[str, Any]:
    return {
        "id": estimate.id,
        "estimateType": estimate.estimate_type,
        "customerInfo": estimate.customer_info or {},
        "tableData": estimate.table_data or [],
        "serviceData": estimate.service_data or [],
        "paymentInfo": estimate.payment_info or {},
        "calculatedValues": estimate.calculated_values or {},
        "notes": estimate.notes,
        "isContractor": bool(estimate.is_contractor),
        "estimateDescription": estimate.estimate_description,
        "createdAt": estimate.created_at.isoformat() if estimate.created_at else None,
        "updatedAt": estimate.updated_at.isoformat() if estimate.updated_at else None,
    }


def _check_body(body: EstimateBody) -> None:
    if not body.estimate_type or not body.customer_info:
        raise HTTPException(status_code=400, detail="estimateType and customerInfo are required")
    if body.estimate_type not in ESTIMATE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown estimate type: {body.estimate_type}")


def _apply_body(estimate: Estimate, body: EstimateBody) -> None:
    estimate.estimate_type = body.estimate_type
    estimate.customer_info = body.customer_info
    estimate.table_data = body.table_data
    estimate.service_data = body.service_data
    estimate.payment_info = body.payment_info
    estimate.calculated_values = (
        body.calculated_values.model_dump(by_alias=True) if body.calculated_values else {}
    )
    estimate.notes = body.notes
    estimate.is_contractor = body.is_contractor
    estimate.estimate_description = body.estimate_description


async def get_estimate_or_404(db: AsyncSession, estimate_id: str) -> Estimate:
    estimate = (await db.execute(select(Estimate).where(Estimate.id == estimate_id))).scalar_one_or_none()
    if not estimate:
        raise HTTPException(status_code=404, detail=MSG_ESTIMATE_NOT_FOUND)
    return estimate


def _date_filters_or_400(start_date: Optional[str], end_date: Optional[str], exclude_old_data: bool = False) -> list:
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail=MSG_DATES_REQUIRED)
    try:
        return non_contractor_filters(start_date, end_date, exclude_old_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date: {e}")


@router.post("")
async def create_estimate(
    body: EstimateBody,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    _check_body(body)
    now = datetime.now(timezone.utc)
    estimate = Estimate(id=f"est-{uuid.uuid4().hex[:12]}", created_at=now, updated_at=now)
    _apply_body(estimate, body)
    db.add(estimate)
    await db.flush()
    logger.info("Created estimate %s (%s)", estimate.id, estimate.estimate_type)
    return {"success": True, "message": "Estimate created", "estimate": estimate_to_response(estimate)}


@router.get("/search")
async def search(
    keyword: Optional[str] = None,
    search_type: str = Query("all", alias="searchType"),
    estimate_type: Optional[str] = Query(None, alias="estimateType"),
    contractor_status: Optional[str] = Query(None, alias="contractorStatus"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    try:
        result = await search_estimates(
            db,
            keyword=keyword,
            search_type=search_type,
            estimate_type=estimate_type,
            contractor_status=contractor_status,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return JSONResponse(content=result, headers={"Cache-Control": SEARCH_CACHE_CONTROL})


@router.get("/non-contractors")
async def list_non_contractors(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    filters = _date_filters_or_400(start_date, end_date)
    result = await db.execute(select(Estimate).where(*filters).order_by(Estimate.created_at.desc()))
    return {"estimates": [estimate_to_response(e) for e in result.scalars().all()]}


@router.delete("/delete-non-contractors")
async def delete_non_contractors(
    body: DeleteNonContractorsRequest,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    filters = _date_filters_or_400(body.start_date, body.end_date, exclude_old_data=body.exclude_old_data)
    result = await db.execute(delete(Estimate).where(*filters))
    deleted = result.rowcount or 0
    logger.info("Deleted %d non-contractor estimates (%s ~ %s)", deleted, body.start_date, body.end_date)
    return {"success": True, "deletedCount": deleted}


@router.post("/import")
async def import_price_list(
    body: PriceImportRequest,
    session: SessionUser = Depends(require_king),
):
    """Turn a saved price-comparison estimate page into estimate line items."""
    items = parse_price_list(body.html)
    return {"success": True, "count": len(items), "tableData": to_table_rows(items)}


@router.get("/{estimate_id}")
async def get_estimate(
    estimate_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    return {"estimate": estimate_to_response(await get_estimate_or_404(db, estimate_id))}


@router.put("/{estimate_id}")
async def update_estimate(
    estimate_id: str,
    body: EstimateBody,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    estimate = await get_estimate_or_404(db, estimate_id)
    _check_body(body)
    _apply_body(estimate, body)
    estimate.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return {"success": True, "message": "Estimate updated", "estimate": estimate_to_response(estimate)}


@router.delete("/{estimate_id}")
async def delete_estimate(
    estimate_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(require_king),
):
    estimate = await get_estimate_or_404(db, estimate_id)
    await db.delete(estimate)
    await db.flush()
    return {"success": True, "message": "Estimate deleted"}
