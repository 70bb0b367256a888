import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.models.project import project_members


class UserRole(str, enum.Enum):
    FREELANCER = "FREELANCER"
    PAYER = "PAYER"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    hashed_password = Column(String, nullable=True)
    role = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owned_projects = relationship("Project", back_populates="owner", foreign_keys="Project.owner_id")
    projects = relationship("Project", secondary=project_members, back_populates="members")
    time_entries = relationship("TimeEntry", back_populates="user", cascade="all, delete-orphan")
    sent_payments = relationship("Payment", back_populates="sender", foreign_keys="Payment.sender_id")
    received_payments = relationship("Payment", back_populates="receiver", foreign_keys="Payment.receiver_id")
