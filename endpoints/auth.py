from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from database import get_db
from schemas.user import UserCreate, UserLogin, AuthResponse, Profile
from security import get_current_user
from auth_service import register_user, authenticate_user, issue_token, user_summary
from models.user import User

router = APIRouter()

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: Session = Depends(get_db)):
    new_user = register_user(db, user)
    return issue_token(new_user)

@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    user = authenticate_user(db, credentials.email, credentials.password)
    return issue_token(user)

@router.get("/profile", response_model=Profile)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user's profile information"""
    return {**user_summary(current_user), "created_at": current_user.created_at}
