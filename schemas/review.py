from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    service_type: Optional[str] = Field(None, alias="serviceType")
    rating: Optional[int] = None
    content: Optional[str] = None

    model_config = {"populate_by_name": True}


class ReviewStatusUpdate(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None
