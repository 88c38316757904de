from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    # Presence is checked by the handler so missing fields answer 400, not 422
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    password: Optional[str] = None

    model_config = {"populate_by_name": True}


class CheckNameRequest(BaseModel):
    name: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")

    model_config = {"populate_by_name": True}
