"""Payment model for freelancer payouts and their document trail."""

import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    RECEIPT_UPLOADED = "RECEIPT_UPLOADED"
    DOCUMENT_SIGNED = "DOCUMENT_SIGNED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    requires_signed_document = Column(Boolean, nullable=False, default=False)
    receipt_url = Column(String(1024), nullable=True)
    signed_document_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    project = relationship("Project", back_populates="payments")
    sender = relationship("User", back_populates="sent_payments", foreign_keys=[sender_id])
    receiver = relationship("User", back_populates="received_payments", foreign_keys=[receiver_id])
    time_entries = relationship("TimeEntry", back_populates="payment", order_by="TimeEntry.start_time")
