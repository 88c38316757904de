from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from database import Base

REVIEW_SERVICE_TYPES = ("computer", "printer", "notebook", "as", "other")
REVIEW_STATUSES = ("register", "active", "hidden", "deleted")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(64), primary_key=True, index=True)
    service_type = Column(String(16), nullable=False)
    rating = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="register", index=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    # Same record shape as Application.files
    images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
