from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session
import logging

from .database import get_db
from .exceptions import ForbiddenError, UnauthorizedError
from .security import decode_token, PASSWORD_RESET_TOKEN_TYPE
from ..user.models import User

# auto_error=False để tự trả về lỗi theo envelope thay vì lỗi mặc định của FastAPI
bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)

TOKEN_REQUIRED = "Token de acceso requerido"
TOKEN_INVALID = "Token inválido"
TOKEN_EXPIRED = "Token expirado"


def resolve_user_from_token(token: str, db: Session) -> User:
    """
    Decode a bearer token and load the active user it refers to.

    Args:
        token: raw JWT
        db: Database session

    Returns:
        User: the authenticated user

    Raises:
        UnauthorizedError: token expired, malformed, badly signed, or the
            user no longer exists or is inactive
    """
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise UnauthorizedError(TOKEN_EXPIRED)
    except JWTError:
        raise UnauthorizedError(TOKEN_INVALID)

    # Token đặt lại mật khẩu không được dùng làm phiên đăng nhập
    if payload.get("type") == PASSWORD_RESET_TOKEN_TYPE:
        logger.warning("Password reset token presented as bearer token")
        raise UnauthorizedError(TOKEN_INVALID)

    user_id = payload.get("userId") or payload.get("sub")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise UnauthorizedError(TOKEN_INVALID)

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning(f"Token rejected for missing or inactive user {user_id}")
        raise UnauthorizedError(TOKEN_INVALID)
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError(TOKEN_REQUIRED)
    return resolve_user_from_token(credentials.credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Same as get_current_user but yields None instead of failing."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return resolve_user_from_token(credentials.credentials, db)
    except UnauthorizedError:
        return None


def require_roles(*roles: str):
    """
    Dependency factory: only users whose role is in ``roles`` pass.

    Usage: ``current_user: User = Depends(require_roles("admin"))``
    """
    async def _require_roles(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"User {current_user.id} ({current_user.username}) with role {current_user.role} "
                f"denied, requires one of {roles}"
            )
            raise ForbiddenError("Acceso denegado")
        return current_user

    return _require_roles


async def require_verified(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_verified:
        raise ForbiddenError("Usuario no verificado")
    return current_user


def is_admin(user: User) -> bool:
    return user is not None and user.role == "admin"


def ensure_owner_or_admin(user: User, owner_id: Optional[int], error: str = "Acceso denegado") -> None:
    """Ownership gate: admins always pass, everyone else must own the resource."""
    if is_admin(user):
        return
    if owner_id is None or owner_id != user.id:
        raise ForbiddenError(error)
