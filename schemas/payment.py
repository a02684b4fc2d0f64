from datetime import datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, Field
from schemas.base import CamelModel

PaymentMethodLiteral = Literal["bkash", "nagad", "bank", "card"]
PaymentStatusLiteral = Literal["pending", "approved", "rejected"]


class PaymentCreate(CamelModel):
    user_id: str | None = None
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    course_id: str = Field(min_length=1, max_length=100)
    course_name: str | None = None
    payment_method: PaymentMethodLiteral
    txn_id: str = Field(min_length=1)
    amount: float = Field(gt=0)


class PaymentOut(CamelModel):
    id: int
    user_id: str | None
    name: str
    email: str
    phone: str
    course_id: str
    course_name: str | None
    payment_method: str
    txn_id: str
    amount: float
    status: str
    date: datetime
    updated_at: datetime | None


class PaymentStatusUpdate(BaseModel):
    # Plain str so unknown values reach the workflow and come back as a readable 400
    status: str


class PaymentStatusResult(BaseModel):
    success: bool = True
    message: str
    payment: PaymentOut


class PaymentPage(CamelModel):
    payments: list[PaymentOut]
    total: int
    total_pages: int
    current_page: int
