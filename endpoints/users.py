from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database import get_db
from schemas.user import UserCourses
from auth_service import list_user_courses

router = APIRouter(prefix="/users")

@router.get("/{email}/courses", response_model=UserCourses)
def user_courses(email: str, db: Session = Depends(get_db)):
    return {"courses": list_user_courses(db, email)}
