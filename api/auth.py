from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone

import bcrypt
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import User
from schemas.user import RegisterRequest
from utils.formatting import is_valid_phone_number

logger = logging.getLogger("service_desk.api")

router = APIRouter(prefix="/api/auth", tags=["auth"])

BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def normalize_phone(phone: str) -> str:
    return re.sub(r"[^\d]", "", phone)


async def save_new_user(db: AsyncSession, user: User) -> None:
    """Insert and commit; a unique-constraint race with another registration becomes 409."""
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Registration raced on email or phone %s", user.email)
        raise HTTPException(status_code=409, detail="Email or phone number is already registered")


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    name = (body.name or "").strip()
    email = (body.email or "").strip().lower()
    phone = normalize_phone(body.phone_number or "")
    password = body.password or ""

    if not name or not email or not phone or not password:
        raise HTTPException(status_code=400, detail="Name, email, phone number and password are required")
    if not EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail="Invalid email format")
    if not is_valid_phone_number(phone):
        raise HTTPException(status_code=400, detail="Invalid phone number")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if (await db.execute(select(User.id).where(User.email == email))).first():
        raise HTTPException(status_code=409, detail="Email is already registered")
    if (await db.execute(select(User.id).where(User.phone_number == phone))).first():
        raise HTTPException(status_code=409, detail="Phone number is already registered")

    now = datetime.now(timezone.utc)
    user = User(
        id=f"usr-{uuid.uuid4().hex[:12]}",
        name=name,
        email=email,
        phone_number=phone,
        password=hash_password(password),
        authority="user",
        provider="credentials",
        is_deleted=False,
        created_at=now,
        updated_at=now,
    )
    await save_new_user(db, user)
    logger.info("Registered user %s", user.id)
    return {"message": "Registration complete", "userId": user.id}
