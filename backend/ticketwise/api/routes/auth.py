import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from datetime import timedelta

from ticketwise.api.deps import get_db, get_current_user
from ticketwise.config import settings
from ticketwise.core.security import verify_password, create_access_token
from ticketwise.models.user import User
from ticketwise.schemas.user import LoginRequest, Token, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=Token)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    User authentication

    Flow:
    1. Looks the active user up by email
    2. Checks the password
    3. Issues a JWT carrying user_id and role
    """
    user = db.query(User).filter_by(email=credentials.email, active=True).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"[AUTH] Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    access_token = create_access_token(
        user, expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    logger.info(f"[AUTH] {user.email} logged in")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(user)
    }


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Profile of the authenticated user"""
    return current_user
