from typing import Dict, Any
import logging

from jose import JWTError
from sqlalchemy.orm import Session

from ..core.auth import resolve_user_from_token
from ..core.config import JWT_EXPIRES_IN
from ..core.exceptions import UnauthorizedError, ConflictError, NotFoundError, ValidationError
from ..core.repository import integrity_as_conflict
from ..core.responses import serialize
from ..core.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_password_reset_token,
    decode_token,
    PASSWORD_RESET_TOKEN_TYPE,
)
from ..user import crud as user_crud
from ..user.models import User
from ..user.schemas import UserResponse

logger = logging.getLogger(__name__)

AUTH_FAILED = "Error de autenticación"
INVALID_CREDENTIALS = "Credenciales inválidas"
INACTIVE_USER = "Usuario inactivo"
EMAIL_TAKEN = "El email ya está registrado"
USERNAME_TAKEN = "El nombre de usuario ya está en uso"
RESET_TOKEN_INVALID = "Token inválido o expirado"
RESET_REQUESTED = "Si el email existe, se enviará un enlace de restablecimiento"


def _token_payload(user: User) -> Dict[str, Any]:
    return {
        "token": create_access_token(user),
        "user": serialize(UserResponse, user),
        "expiresIn": JWT_EXPIRES_IN,
    }


def login(db: Session, identifier: str, password: str) -> Dict[str, Any]:
    """
    Tên Function: login

    1. Mô tả ngắn gọn:
    Đăng nhập bằng email hoặc username.

    2. Mô tả công dụng:
    Kiểm tra người dùng tồn tại, đang hoạt động và mật khẩu đúng. Chỉ khi
    đăng nhập thành công mới cập nhật last_login và phát hành token.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - identifier (str): Email hoặc username
    - password (str): Mật khẩu dạng thô

    4. Giá trị trả về:
    - Dict: {token, user, expiresIn}
    """
    user = user_crud.get_user_by_identifier(db, identifier.strip())
    if user is None:
        logger.warning(f"Login failed for unknown identifier {identifier!r}")
        raise UnauthorizedError(INVALID_CREDENTIALS, AUTH_FAILED)
    if not user.is_active:
        logger.warning(f"Login rejected for inactive user {user.id}")
        raise UnauthorizedError(INACTIVE_USER, AUTH_FAILED)
    if not verify_password(password, user.password_hash):
        logger.warning(f"Login failed for user {user.id}: wrong password")
        raise UnauthorizedError(INVALID_CREDENTIALS, AUTH_FAILED)

    user = user_crud.update_last_login(db, user)
    logger.info(f"User {user.id} ({user.username}) logged in")
    return _token_payload(user)


def register(db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    data["email"] = data["email"].lower()
    if user_crud.get_user_by_email(db, data["email"]) is not None:
        raise ConflictError(EMAIL_TAKEN, "Error de registro")
    if user_crud.get_user_by_username(db, data["username"]) is not None:
        raise ConflictError(USERNAME_TAKEN, "Error de registro")

    data["password_hash"] = hash_password(data.pop("password"))
    data["role"] = "user"
    with integrity_as_conflict(db, EMAIL_TAKEN):
        user = user_crud.create_user(db, data)
    logger.info(f"User registered: {user.id} ({user.username})")
    return _token_payload(user)


def verify_token(db: Session, token: str) -> User:
    return resolve_user_from_token(token, db)


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    user = user_crud.get_user(db, user_id)
    if user is None:
        raise NotFoundError("Usuario no encontrado")
    if not verify_password(current_password, user.password_hash):
        logger.warning(f"Password change rejected for user {user_id}: wrong current password")
        raise ValidationError("Contraseña actual incorrecta")
    user_crud.update_user(db, user, {"password_hash": hash_password(new_password)})
    logger.info(f"Password changed for user {user_id}")


def request_password_reset(db: Session, email: str) -> str:
    """
    Issue a reset token when the email belongs to an active user.

    The caller always gets the same message so the endpoint cannot be used
    to probe which emails are registered. No mail is sent; the token is
    only logged.
    """
    user = user_crud.get_user_by_email(db, email)
    if user is not None and user.is_active:
        reset_token = create_password_reset_token(user.id)
        logger.info(f"Password reset token issued for user {user.id}: {reset_token}")
    else:
        logger.info(f"Password reset requested for unknown email {email!r}")
    return RESET_REQUESTED


def reset_password(db: Session, token: str, new_password: str) -> None:
    try:
        payload = decode_token(token)
    except JWTError:
        raise ValidationError(RESET_TOKEN_INVALID)
    if payload.get("type") != PASSWORD_RESET_TOKEN_TYPE or not isinstance(payload.get("userId"), int):
        raise ValidationError(RESET_TOKEN_INVALID)

    user = user_crud.get_user(db, payload["userId"])
    if user is None or not user.is_active:
        raise ValidationError(RESET_TOKEN_INVALID)
    user_crud.update_user(db, user, {"password_hash": hash_password(new_password)})
    logger.info(f"Password reset for user {user.id}")
