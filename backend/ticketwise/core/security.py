from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import bcrypt
from ticketwise.config import settings
from ticketwise.models.user import User, UserRole

REQUIRED_CLAIMS = ("user_id", "role")


def hash_password(password: str) -> str:
    """
    bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Checks the password against its hash
    """
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issues the session JWT of a back-office user

    The claims are fixed: user_id and role drive the auth middleware and
    the admin-only routes, email is informative.
    """
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {
        "user_id": user.id,
        "role": user.role.value,
        "email": user.email,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decodes and validates a JWT issued by create_access_token

    Raises:
        JWTError: if the token is invalid, expired or lacks a required claim
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise JWTError(f"Invalid token: {str(e)}")

    missing = [claim for claim in REQUIRED_CLAIMS if not payload.get(claim)]
    if missing:
        raise JWTError(f"Invalid token: missing claim(s) {', '.join(missing)}")
    if payload["role"] not in {role.value for role in UserRole}:
        raise JWTError(f"Invalid token: unknown role {payload['role']}")

    return payload
