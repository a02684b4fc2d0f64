from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.types import JSON
from database import Base


class AuditLog(Base):
    """Administrative action log (payment status changes, review moderation)."""
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_action_created", "action", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    actor = Column(String(100), nullable=False, default="admin")
    action = Column(String(50), nullable=False)
    target_type = Column(String(30), nullable=True)  # payment | review
    target_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
