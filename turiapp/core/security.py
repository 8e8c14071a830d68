from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt

from .config import (
    JWT_SECRET,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE,
    PASSWORD_RESET_EXPIRES_MINUTES,
    BCRYPT_ROUNDS,
)

PASSWORD_RESET_TOKEN_TYPE = "password_reset"


def hash_password(password: str) -> str:
    """Hash a plain password with bcrypt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Hash lưu trong DB không đúng định dạng bcrypt
        return False


def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed access token for a user.

    Args:
        user: User row
        expires_delta: overrides the configured JWT_EXPIRES_IN

    Returns:
        str: encoded JWT carrying sub, userId, username, email, role, isVerified
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "isVerified": bool(user.is_verified),
        "iat": now,
        "exp": now + (expires_delta or ACCESS_TOKEN_EXPIRE),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_password_reset_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "type": PASSWORD_RESET_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=PASSWORD_RESET_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token. Raises jose.ExpiredSignatureError / JWTError."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
