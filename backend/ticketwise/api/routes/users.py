"""
User management routes

- ADMIN: lists, creates and deletes accounts, may change roles
- USER: may read and edit their own profile only
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import Optional, List
from pydantic import BaseModel

from ticketwise.api.deps import get_db, get_current_user, require_admin
from ticketwise.api.utils import get_by_id, validate_unique, paginate_query, apply_search_filter
from ticketwise.core.security import hash_password
from ticketwise.models.user import User, UserRole
from ticketwise.schemas.user import UserCreate, UserUpdate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ============ SCHEMAS ============

class UserListResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


def _get_allowed_user(db: Session, user_id: int, current_user: User) -> User:
    """The target user, when the caller is that user or an admin"""
    if current_user.role != UserRole.ADMIN and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only access your own profile")
    return get_by_id(db, User, user_id, error_message="User not found")


# ============ ENDPOINTS ============

@router.get("", response_model=UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = None,
    active: Optional[bool] = None,
    search: Optional[str] = None
):
    """
    Lists users (requires ADMIN)
    """
    query = db.query(User)

    if role:
        query = query.filter(User.role == role)
    if active is not None:
        query = query.filter(User.active == active)
    query = apply_search_filter(query, search, User.first_name, User.last_name, User.email)

    items, total = paginate_query(query, page=page, page_size=page_size, order_by=desc(User.created_at))

    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in items],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=(total + page_size - 1) // page_size
    )


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """
    Creates an account (requires ADMIN)
    """
    validate_unique(db, User, "email", data.email, display_name="Email")
    if data.username:
        validate_unique(db, User, "username", data.username, display_name="Username")

    user = User(
        **data.model_dump(exclude={"password"}),
        password_hash=hash_password(data.password),
        active=True
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"[USERS] User {user.email} ({user.role.value}) created by user {current_user.id}")
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    User details (self or ADMIN)
    """
    return UserResponse.model_validate(_get_allowed_user(db, user_id, current_user))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Updates a user (self or ADMIN). Only an ADMIN may change role or status.
    """
    user = _get_allowed_user(db, user_id, current_user)
    changes = data.model_dump(exclude_unset=True)

    if current_user.role != UserRole.ADMIN and ("role" in changes or "active" in changes):
        raise HTTPException(status_code=403, detail="Only administrators can change roles")

    if changes.get("email") and changes["email"] != user.email:
        validate_unique(db, User, "email", changes["email"], exclude_id=user.id, display_name="Email")
    if changes.get("username") and changes["username"] != user.username:
        validate_unique(db, User, "username", changes["username"], exclude_id=user.id, display_name="Username")

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)

    for field, value in changes.items():
        if value is None and field in ("first_name", "email", "role", "active"):
            continue
        setattr(user, field, value)

    db.commit()
    db.refresh(user)

    logger.info(f"[USERS] User {user.id} updated by user {current_user.id}")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """
    Deletes a user (requires ADMIN). An admin cannot delete their own account.
    """
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = get_by_id(db, User, user_id, error_message="User not found")
    db.delete(user)
    db.commit()

    logger.info(f"[USERS] User {user_id} deleted by user {current_user.id}")
    return None
