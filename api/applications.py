from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import MSG_FORBIDDEN, SessionUser, ensure_owner_or_king, get_session, read_uploads, require_king
from config import settings
from database import get_db
from models import APPLICATION_TYPES, Application, User
from schemas.application import INFORMATION_FIELDS, INFORMATION_SCHEMAS, REQUIRED_FIELDS
from services.attachments import (
    APPLICATION_FILE_POLICY,
    AttachmentError,
    commit_or_discard,
    delete_objects_best_effort,
    upload_batch,
)
from services.lifecycle import cancel_application
from services.storage import ObjectStorage, get_storage
from utils.case import camelize, snake_names

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/applications", tags=["applications"])

MSG_APPLICATION_NOT_FOUND = "Application not found"
MSG_FILE_NOT_FOUND = "File not found"


def _app_to_response(app: Application) -> dict[str, Any]:
    """Common fields plus only the information field of the application's type."""
    return {
        "id": app.id,
        "type": app.type,
        "userId": app.user_id,
        "status": app.status,
        "comment": app.comment,
        "files": list(app.files or []),
        INFORMATION_FIELDS[app.type]: camelize(app.information) if app.information else {},
        "createdAt": app.created_at.isoformat() if app.created_at else None,
        "updatedAt": app.updated_at.isoformat() if app.updated_at else None,
    }


async def _get_application(db: AsyncSession, application_id: str) -> Application:
    result = await db.execute(select(Application).where(Application.id == application_id))
    app = result.scalar_one_or_none()
    if not app:
        raise HTTPException(status_code=404, detail=MSG_APPLICATION_NOT_FOUND)
    return app


def _missing_fields(app_type: str, information: dict[str, Any]) -> list[str]:
    missing = []
    fields = REQUIRED_FIELDS[app_type]
    for field, key in zip(fields, snake_names(fields)):
        value = information.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


@router.post("/{app_type}", status_code=201)
async def create_application(
    app_type: str,
    body: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    if app_type not in APPLICATION_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown application type: {app_type}")
    try:
        info = INFORMATION_SCHEMAS[app_type].model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid application information: {e.errors()[0]['msg']}")

    user = (await db.execute(select(User).where(User.id == session.id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    information = info.model_dump(by_alias=False)
    if not (information.get("phone_number") or "").strip():
        information["phone_number"] = user.phone_number or ""
    missing = _missing_fields(app_type, information)
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")

    now = datetime.now(timezone.utc)
    app = Application(
        id=f"app-{uuid.uuid4().hex[:12]}",
        type=app_type,
        user_id=user.id,
        information=information,
        files=[],
        status="apply",
        comment=settings.default_application_comment,
        created_at=now,
        updated_at=now,
    )
    db.add(app)
    await db.flush()
    logger.info("Created %s application %s for %s", app_type, app.id, user.id)
    return {"message": "Application submitted", "application": _app_to_response(app)}


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    app = await _get_application(db, application_id)
    ensure_owner_or_king(session, app.user_id)
    return _app_to_response(app)


@router.post("/{application_id}/files")
async def upload_files(
    application_id: str,
    files: list[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(get_session),
):
    app = await _get_application(db, application_id)
    ensure_owner_or_king(session, app.user_id)
    tasks = await read_uploads(files)
    existing = list(app.files or [])
    try:
        records = await upload_batch(storage, APPLICATION_FILE_POLICY, app.id, tasks, existing_count=len(existing))
    except AttachmentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    # Reassign so the JSON column is flagged dirty
    app.files = existing + records
    app.updated_at = datetime.now(timezone.utc)
    await commit_or_discard(db, storage, records)
    return {"files": app.files}


@router.get("/{application_id}/files/{index}")
async def download_file(
    application_id: str,
    index: int,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    app = await _get_application(db, application_id)
    ensure_owner_or_king(session, app.user_id)
    files = app.files or []
    if index < 0 or index >= len(files):
        raise HTTPException(status_code=404, detail=MSG_FILE_NOT_FOUND)
    return RedirectResponse(files[index]["url"], status_code=307)


@router.delete("/{application_id}/files/{index}")
async def delete_file(
    application_id: str,
    index: int,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    session: SessionUser = Depends(require_king),
):
    app = await _get_application(db, application_id)
    files = list(app.files or [])
    if index < 0 or index >= len(files):
        raise HTTPException(status_code=404, detail=MSG_FILE_NOT_FOUND)
    removed = files.pop(index)
    app.files = files
    app.updated_at = datetime.now(timezone.utc)
    await db.flush()
    if removed.get("objectKey"):
        await delete_objects_best_effort(storage, [removed["objectKey"]])
    return {"files": app.files}


@router.patch("/{application_id}/cancel")
async def cancel(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    session: SessionUser = Depends(get_session),
):
    app = await _get_application(db, application_id)
    if app.user_id != session.id:
        raise HTTPException(status_code=403, detail=MSG_FORBIDDEN)
    cancel_application(app)
    await db.flush()
    logger.info("Application %s cancelled by owner", app.id)
    return _app_to_response(app)
