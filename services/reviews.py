"""Review submission and moderation.

Uniqueness of (course_id, reviewer_email) is enforced by the uq_review_course_reviewer
constraint; the pre-check only exists to give the common case a clear message.
New reviews are hidden until a moderator approves them.
"""
from __future__ import annotations
import math
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from audit_service import log_action_to_db
from errors import ConflictError, NotFoundError, ValidationError
from models.review import Review
from schemas.review import ReviewCreate
from endpoints.logs import log_action

DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this course"


def submit_review(db: Session, data: ReviewCreate) -> Review:
    if not 1 <= int(data.rating) <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    exists = db.query(Review.id).filter(
        Review.course_id == data.course_id,
        Review.reviewer_email == data.reviewer_email,
    ).first()
    if exists:
        raise ConflictError(DUPLICATE_REVIEW_MESSAGE)
    review = Review(
        course_id=data.course_id,
        reviewer_name=data.reviewer_name,
        reviewer_email=data.reviewer_email,
        rating=int(data.rating),
        review_text=data.review_text,
        date=datetime.utcnow(),
        is_approved=False,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent submission for the same pair won the insert
        db.rollback()
        raise ConflictError(DUPLICATE_REVIEW_MESSAGE)
    db.refresh(review)
    log_action("review_submitted", review.reviewer_email, context={"review_id": review.id, "course_id": review.course_id})
    return review


def set_review_approval(db: Session, review_id: int, approved: bool, actor: str = "admin") -> Review:
    review = db.get(Review, review_id)
    if not review:
        raise NotFoundError("Review not found")
    review.is_approved = approved
    log_action_to_db(
        db, "REVIEW_APPROVED" if approved else "REVIEW_REJECTED", actor=actor,
        target_type="review", target_id=review.id,
        description=f"Review {review.id} for course {review.course_id} {'approved' if approved else 'hidden'}",
        details={"course_id": review.course_id, "reviewer_email": review.reviewer_email},
    )
    db.commit()
    db.refresh(review)
    log_action("review_moderated", review.reviewer_email, context={"review_id": review.id, "approved": approved})
    return review


def list_visible_reviews(db: Session, course_id: str) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.course_id == course_id, Review.is_approved.is_(True))
        .order_by(Review.date.desc(), Review.id.desc())
        .all()
    )


def list_reviews_for_admin(db: Session, status: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
    q = db.query(Review)
    if status == "pending":
        q = q.filter(Review.is_approved.is_(False))
    elif status == "approved":
        q = q.filter(Review.is_approved.is_(True))
    total = q.count()
    rows = q.order_by(Review.date.desc(), Review.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "reviews": rows,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "current_page": page,
    }
