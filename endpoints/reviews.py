from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Literal, Optional
from database import get_db
from admin_security import require_admin
from schemas.review import ReviewCreate, ReviewApproval, ReviewSubmitted, ReviewList, ReviewModerated, ReviewPage
from services.reviews import submit_review, set_review_approval, list_visible_reviews, list_reviews_for_admin

router = APIRouter(prefix="/reviews")
admin_router = APIRouter(prefix="/admin/reviews", dependencies=[Depends(require_admin)])

@router.post("", response_model=ReviewSubmitted, status_code=status.HTTP_201_CREATED)
def create_review(review: ReviewCreate, db: Session = Depends(get_db)):
    created = submit_review(db, review)
    return {
        "success": True,
        "message": "Review submitted successfully. It will be published after approval.",
        "review": created,
    }

@router.get("/{course_id}", response_model=ReviewList)
def course_reviews(course_id: str, db: Session = Depends(get_db)):
    return {"success": True, "reviews": list_visible_reviews(db, course_id)}

@admin_router.get("", response_model=ReviewPage)
def admin_list_reviews(
    status: Optional[Literal["pending", "approved"]] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return {"success": True, **list_reviews_for_admin(db, status=status, page=page, limit=limit)}

@admin_router.put("/{review_id}", response_model=ReviewModerated)
def admin_moderate_review(
    review_id: int,
    approval: ReviewApproval,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
):
    review = set_review_approval(db, review_id, approval.is_approved, actor=actor)
    return {
        "success": True,
        "message": f"Review {'approved' if review.is_approved else 'rejected'}",
        "review": review,
    }
