from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from models.user import User, UserCourse
from schemas.user import UserCreate
from security import get_password_hash, verify_password, create_access_token
from errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from endpoints.logs import log_action
from datetime import datetime
import re

MIN_PASSWORD_LENGTH = 6

def extract_name_from_email(email: str) -> str:
    """Extract name from email address (part before @)"""
    name_part = email.split('@')[0]
    name_part = re.sub(r'[._-]', ' ', name_part)
    return ' '.join(word.capitalize() for word in name_part.split())

def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()

def user_summary(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email, "courses": user.courses}

def issue_token(user: User) -> dict:
    token = create_access_token(data={"sub": user.email})
    return {"token": token, "token_type": "bearer", "user": user_summary(user)}

def check_password_policy(password: str):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

def register_user(db: Session, data: UserCreate) -> User:
    """Create an account.

    An identity created earlier by a payment approval (no password yet) is claimed
    by the registration and keeps the courses already granted to it.
    """
    check_password_policy(data.password)
    user = get_user_by_email(db, data.email)
    if user and user.is_registered:
        raise ConflictError("User already exists")
    if user is None:
        user = User(email=data.email, created_at=datetime.utcnow())
        db.add(user)
    user.name = data.name
    user.password = get_password_hash(data.password)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise ConflictError("User already exists")
    db.refresh(user)
    log_action("user_registered", user.email, context={"user_id": user.id, "courses": user.courses})
    return user

def authenticate_user(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        log_action("login_failed", email, level="WARNING")
        raise AuthenticationError("Invalid credentials")
    return user

def reset_user_password(db: Session, user: User, new_password: str):
    """Hash and store a new password; the caller has already consumed the OTP in the same session."""
    check_password_policy(new_password)
    user.password = get_password_hash(new_password)
    db.commit()
    db.refresh(user)
    log_action("password_reset", user.email)
    return user

def find_or_create_identity(db: Session, email: str, name: str | None = None) -> User:
    """Return the identity for ``email``, creating a password-less one if none exists.

    A payment may be approved before the payer registers; the identity created here
    is claimed later by ``register_user``. Flushes but does not commit.
    """
    user = get_user_by_email(db, email)
    if user:
        return user
    try:
        with db.begin_nested():
            user = User(email=email, name=name or extract_name_from_email(email), password=None, created_at=datetime.utcnow())
            db.add(user)
    except IntegrityError:
        user = get_user_by_email(db, email)
        if user is None:
            raise
    return user

def grant_course(db: Session, email: str, course_id: str, name: str | None = None, payment_id: int | None = None) -> User:
    """Idempotently add ``course_id`` to the identity's granted courses. Does not commit."""
    user = find_or_create_identity(db, email, name)
    if course_id in user.courses:
        return user
    try:
        with db.begin_nested():
            grant = UserCourse(user_id=user.id, course_id=course_id, payment_id=payment_id, granted_at=datetime.utcnow())
            user.course_grants.append(grant)
    except IntegrityError:
        # Granted concurrently by another approval; the set already holds it
        db.expire(user, ["course_grants"])
    return user

def list_user_courses(db: Session, email: str) -> list[str]:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    return user.courses
