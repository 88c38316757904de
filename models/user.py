from sqlalchemy import Boolean, Column, DateTime, String, func

from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(128), nullable=True)
    email = Column(String(256), unique=True, nullable=True, index=True)
    phone_number = Column(String(32), unique=True, nullable=True, index=True)
    # bcrypt hash; null for OAuth-only accounts
    password = Column(String(128), nullable=True)
    image = Column(String(512), nullable=True)
    authority = Column(String(16), nullable=False, default="user", index=True)
    provider = Column(String(32), nullable=False, default="credentials")
    provider_id = Column(String(128), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
