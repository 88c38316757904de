"""
Create (or promote) an administrator account with authority "king".
Run: python -m scripts.create_admin (from the project root).

Reads ADMIN_NAME, ADMIN_EMAIL, ADMIN_PHONE and ADMIN_PASSWORD from the
environment or .env.
"""
import asyncio
import os
import sys
import uuid
from datetime import datetime, timezone

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select

from api.auth import hash_password, normalize_phone
from database import init_db, session_scope
from models import User

load_dotenv()


async def create_admin(name: str, email: str, phone: str, password: str) -> User:
    await init_db()
    async with session_scope() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        now = datetime.now(timezone.utc)
        if user:
            user.authority = "king"
            user.updated_at = now
            print(f"User {email} already exists, promoted to king")
        else:
            user = User(
                id=f"usr-{uuid.uuid4().hex[:12]}",
                name=name,
                email=email,
                phone_number=phone,
                password=hash_password(password),
                authority="king",
                provider="credentials",
                is_deleted=False,
                created_at=now,
                updated_at=now,
            )
            session.add(user)
            print(f"Created admin {email}")
        return user


def main() -> int:
    email = (os.environ.get("ADMIN_EMAIL") or "").strip().lower()
    password = os.environ.get("ADMIN_PASSWORD") or ""
    if not email or not password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set (environment or .env)")
        return 1
    name = os.environ.get("ADMIN_NAME") or "admin"
    phone = normalize_phone(os.environ.get("ADMIN_PHONE") or "") or None
    asyncio.run(create_admin(name, email, phone, password))
    return 0


if __name__ == "__main__":
    sys.exit(main())
