from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, UniqueConstraint, CheckConstraint
from database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(String(100), nullable=False, index=True)
    reviewer_name = Column(String, nullable=False)
    reviewer_email = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)
    review_text = Column(Text, nullable=False)
    date = Column(DateTime, default=datetime.utcnow, nullable=False)
    # New reviews stay hidden until a moderator approves them
    is_approved = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint('course_id', 'reviewer_email', name='uq_review_course_reviewer'),
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
    )
