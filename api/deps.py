"""
Request dependencies shared by the routers: the authenticated session and
helpers for reading multipart uploads.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, UploadFile

from services.attachments import UploadTask

MSG_UNAUTHENTICATED = "Authentication required"
MSG_FORBIDDEN = "Permission denied"


@dataclass
class SessionUser:
    id: str
    authority: str = "user"

    @property
    def is_king(self) -> bool:
        return self.authority == "king"


def get_optional_session(request: Request) -> Optional[SessionUser]:
    """Session placed on request.state by the auth layer in front of the handlers."""
    return getattr(request.state, "session", None)


def get_session(session: Optional[SessionUser] = Depends(get_optional_session)) -> SessionUser:
    if session is None or not session.id:
        raise HTTPException(status_code=401, detail=MSG_UNAUTHENTICATED)
    return session


def require_king(session: SessionUser = Depends(get_session)) -> SessionUser:
    if not session.is_king:
        raise HTTPException(status_code=403, detail=MSG_FORBIDDEN)
    return session


def ensure_owner_or_king(session: SessionUser, owner_id: str) -> None:
    if session.id != owner_id and not session.is_king:
        raise HTTPException(status_code=403, detail=MSG_FORBIDDEN)


def ensure_self(session: SessionUser, user_id: str) -> None:
    if session.id != user_id:
        raise HTTPException(status_code=403, detail=MSG_FORBIDDEN)


async def read_uploads(files: list[UploadFile]) -> list[UploadTask]:
    tasks = []
    for f in files:
        data = await f.read()
        tasks.append(UploadTask(original_name=f.filename or "file", content_type=f.content_type, data=data))
    return tasks


def paginate(page: int, limit: int) -> tuple[int, int]:
    """Clamp page/limit and return (offset, limit)."""
    page = max(1, page)
    limit = max(1, min(limit, 100))
    return (page - 1) * limit, limit
