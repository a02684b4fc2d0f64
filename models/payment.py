from enum import Enum
from sqlalchemy import Column, Integer, String, Float, DateTime, Index
from database import Base
from datetime import datetime


class PaymentMethod(str, Enum):
    BKASH = "bkash"
    NAGAD = "nagad"
    BANK = "bank"
    CARD = "card"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_status_date", "status", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=True)  # client-side account id, informational only
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False)
    course_id = Column(String(100), nullable=False)
    course_name = Column(String, nullable=True)
    payment_method = Column(String(10), nullable=False)  # bkash | nagad | bank | card
    txn_id = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(String(10), nullable=False, default=PaymentStatus.PENDING.value)
    date = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
