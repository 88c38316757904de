from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text, func

from config import DEFAULT_APPLICATION_COMMENT
from database import Base

APPLICATION_TYPES = ("computer", "printer", "notebook", "as", "inquiry")
APPLICATION_STATUSES = ("apply", "in_progress", "completed", "cancelled")


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(64), primary_key=True, index=True)
    type = Column(String(16), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Shape depends on type (see schemas.application.INFORMATION_SCHEMAS)
    information = Column(JSON, nullable=False)
    # [{id, url, filename, originalName, mimeType, size, objectKey, uploadedAt}]
    files = Column(JSON, nullable=False, default=list)
    status = Column(String(32), nullable=False, default="apply", index=True)
    comment = Column(Text, nullable=True, default=DEFAULT_APPLICATION_COMMENT)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
