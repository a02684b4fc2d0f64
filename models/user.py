from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from datetime import datetime

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=False, index=True)
    # Null for identities created by a payment approval before the payer registered
    password = Column(String, nullable=True)
    otp = Column(String, nullable=True)
    otp_expiry = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    course_grants = relationship(
        "UserCourse",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserCourse.granted_at",
    )

    @property
    def courses(self) -> list[str]:
        return [g.course_id for g in self.course_grants]

    @property
    def is_registered(self) -> bool:
        return self.password is not None


class UserCourse(Base):
    """Granted course access. One row per (user, course) so a grant is a set-add."""
    __tablename__ = "user_courses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    # Course key as submitted with the payment; not required to exist in the catalog
    course_id = Column(String(100), nullable=False)
    payment_id = Column(Integer, ForeignKey('payments.id', ondelete='SET NULL'), nullable=True)
    granted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="course_grants")

    __table_args__ = (
        UniqueConstraint('user_id', 'course_id', name='uq_user_course'),
    )
