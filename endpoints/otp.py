from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from database import get_db
from schemas.user import OTPCreate, OTPVerify, ForgotPassword, ResetPassword
from services.otp import OTPManager, PURPOSE_PASSWORD_RESET, PURPOSE_VERIFICATION
from auth_service import get_user_by_email, reset_user_password, check_password_policy
from mailer import Mailer, get_mailer
from errors import NotFoundError

router = APIRouter()

def get_otp_manager(request: Request, mailer: Mailer = Depends(get_mailer)) -> OTPManager:
    return OTPManager(request.app.state.otp_store, mailer)

@router.post("/send-otp")
async def send_otp(otp_data: OTPCreate, db: Session = Depends(get_db), otp: OTPManager = Depends(get_otp_manager)):
    await otp.issue(db, otp_data.email, PURPOSE_VERIFICATION)
    return {"success": True, "message": "OTP sent successfully"}

@router.post("/verify-otp")
async def verify_otp(otp_data: OTPVerify, db: Session = Depends(get_db), otp: OTPManager = Depends(get_otp_manager)):
    otp.verify(db, otp_data.email, otp_data.otp)
    return {"success": True}

@router.post("/forgot-password")
async def forgot_password(forgot_data: ForgotPassword, db: Session = Depends(get_db), otp: OTPManager = Depends(get_otp_manager)):
    """Send OTP for password reset"""
    user = get_user_by_email(db, forgot_data.email)
    if not user:
        raise NotFoundError("This email is not registered")
    await otp.issue(db, user.email, PURPOSE_PASSWORD_RESET)
    return {"success": True, "message": "Password reset OTP sent to your email"}

@router.post("/verify-reset-otp")
async def verify_reset_otp(otp_data: OTPVerify, db: Session = Depends(get_db), otp: OTPManager = Depends(get_otp_manager)):
    """Check a reset OTP without consuming it; reset-password consumes it."""
    user = get_user_by_email(db, otp_data.email)
    if not user:
        raise NotFoundError("User not found")
    otp.check(user, otp_data.otp)
    return {"success": True, "message": "OTP verified"}

@router.post("/reset-password")
async def reset_password(reset_data: ResetPassword, db: Session = Depends(get_db), otp: OTPManager = Depends(get_otp_manager)):
    """Reset password using OTP verification"""
    check_password_policy(reset_data.new_password)
    user = get_user_by_email(db, reset_data.email)
    if not user:
        raise NotFoundError("User not found")
    otp.consume(db, user, reset_data.otp, commit=False)
    reset_user_password(db, user, reset_data.new_password)
    return {"success": True, "message": "Password reset successfully"}
