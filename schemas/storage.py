from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class StorageDeleteRequest(BaseModel):
    # cloudinaryId is the name older clients still send
    object_id: Optional[str] = Field(None, validation_alias=AliasChoices("objectId", "cloudinaryId", "object_id"))


class CacheInvalidateRequest(BaseModel):
    path: Optional[str] = None
