from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from schemas.base import CamelModel


class ReviewCreate(CamelModel):
    course_id: str = Field(min_length=1, max_length=100)
    reviewer_name: str = Field(min_length=1)
    reviewer_email: EmailStr
    rating: int = Field(ge=1, le=5)
    review_text: str = Field(min_length=1)


class ReviewOut(CamelModel):
    id: int
    course_id: str
    reviewer_name: str
    rating: int
    review_text: str
    date: datetime


class ReviewAdminOut(ReviewOut):
    reviewer_email: str
    is_approved: bool


class ReviewApproval(CamelModel):
    is_approved: bool


class ReviewSubmitted(BaseModel):
    success: bool = True
    message: str
    review: ReviewOut


class ReviewList(BaseModel):
    success: bool = True
    reviews: list[ReviewOut]


class ReviewModerated(BaseModel):
    success: bool = True
    message: str
    review: ReviewAdminOut


class ReviewPage(CamelModel):
    success: bool = True
    reviews: list[ReviewAdminOut]
    total: int
    total_pages: int
    current_page: int
