from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from schemas.base import CamelModel

class UserBase(BaseModel):
    email: EmailStr

class UserCreate(UserBase):
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)

class UserLogin(UserBase):
    password: str = Field(min_length=1)

class UserSummary(BaseModel):
    id: int
    name: str | None
    email: str
    courses: list[str]
    class Config:
        from_attributes = True

class Profile(UserSummary):
    created_at: datetime | None

class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserSummary

class UserCourses(BaseModel):
    courses: list[str]

class OTPCreate(UserBase):
    pass

class OTPVerify(UserBase):
    otp: str = Field(min_length=1)

class ForgotPassword(UserBase):
    pass

class ResetPassword(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1)
    # Policy (>= 6 chars) is enforced in auth_service so it surfaces as a readable message
    new_password: str = Field(min_length=1)
