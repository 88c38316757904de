from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text, func

from database import Base

ESTIMATE_TYPES = ("예전데이터", "컴퓨터견적", "프린터견적", "노트북견적", "AS관련", "없음")
LEGACY_ESTIMATE_TYPE = "예전데이터"
ANNOUNCEMENT_TYPES = ("consumer", "business", "delivery")


class Estimate(Base):
    __tablename__ = "estimates"

    id = Column(String(64), primary_key=True, index=True)
    estimate_type = Column(String(32), nullable=False, default="없음", index=True)
    # {name, phone, pcNumber, contractType, saleType, purchaseType, purchaseTypeName, content, ...}
    customer_info = Column(JSON, nullable=False)
    # Line items: [{category, productName, quantity, price, productCode, distributor, reconfirm, remarks}]
    table_data = Column(JSON, nullable=False, default=list)
    service_data = Column(JSON, nullable=False, default=list)
    payment_info = Column(JSON, nullable=False, default=dict)
    # Client-computed totals, stored as sent
    calculated_values = Column(JSON, nullable=False, default=dict)
    notes = Column(Text, nullable=True)
    is_contractor = Column(Boolean, nullable=False, default=False, index=True)
    estimate_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class QuoteAnnouncement(Base):
    __tablename__ = "quote_announcements"

    id = Column(String(64), primary_key=True, index=True)
    type = Column(String(16), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
