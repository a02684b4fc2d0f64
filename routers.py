from fastapi import APIRouter
from endpoints.auth import router as auth_router
from endpoints.otp import router as otp_router
from endpoints.payments import router as payments_router, admin_router as admin_payments_router
from endpoints.reviews import router as reviews_router, admin_router as admin_reviews_router
from endpoints.courses import router as courses_router
from endpoints.users import router as users_router
from endpoints.audit import router as audit_router

api_router = APIRouter()
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(otp_router, tags=["otp"])
api_router.include_router(payments_router, tags=["payments"])
api_router.include_router(admin_payments_router, tags=["admin"])
api_router.include_router(courses_router, tags=["courses"])
api_router.include_router(reviews_router, tags=["reviews"])
api_router.include_router(admin_reviews_router, tags=["admin"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(audit_router)
