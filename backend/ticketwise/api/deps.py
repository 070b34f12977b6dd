from fastapi import Depends, Request, HTTPException
from sqlalchemy.orm import Session
from ticketwise.database import get_db
from ticketwise.models.user import User, UserRole

__all__ = ["get_db", "get_current_user_id", "get_current_user", "require_admin"]


def get_current_user_id(request: Request) -> int:
    """
    user_id from the request context (set by the middleware)
    """
    if not hasattr(request.state, 'user_id'):
        raise HTTPException(status_code=401, detail="User not identified")
    return request.state.user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """
    Full User object of the caller
    Checks the account still exists and is active
    """
    user = db.query(User).filter_by(id=user_id, active=True).first()

    if not user:
        raise HTTPException(
            status_code=401,
            detail="User not found or inactive"
        )

    return user


def require_admin(
    user: User = Depends(get_current_user)
) -> User:
    """
    Dependency requiring an ADMIN user
    """
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=403,
            detail="Access denied: administrators only"
        )
    return user
