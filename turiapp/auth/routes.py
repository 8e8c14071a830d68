from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database import get_db
from ..core.auth import bearer_scheme, get_current_user, TOKEN_REQUIRED
from ..core.exceptions import UnauthorizedError
from ..core.responses import success_response, serialize
from ..user.models import User
from ..user.schemas import UserResponse
from . import authentication
from .schemas import (
    LoginRequest, RegisterRequest, ChangePasswordRequest,
    ForgotPasswordRequest, ResetPasswordRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login")
async def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    result = authentication.login(db, login_data.identifier, login_data.password)
    return success_response(result, "Login exitoso")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user_in: RegisterRequest, db: Session = Depends(get_db)):
    result = authentication.register(db, user_in.model_dump())
    return success_response(result, "Usuario registrado exitosamente", status.HTTP_201_CREATED)


@router.post("/forgot-password")
async def forgot_password(request_in: ForgotPasswordRequest, db: Session = Depends(get_db)):
    message = authentication.request_password_reset(db, request_in.email)
    return success_response(None, message)


@router.post("/reset-password")
async def reset_password(reset_in: ResetPasswordRequest, db: Session = Depends(get_db)):
    authentication.reset_password(db, reset_in.token, reset_in.new_password)
    return success_response(None, "Contraseña restablecida correctamente")


@router.get("/verify")
async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(TOKEN_REQUIRED)
    user = authentication.verify_token(db, credentials.credentials)
    return success_response({"valid": True, "user": serialize(UserResponse, user)}, "Token válido")


@router.post("/change-password")
async def change_password(
    password_in: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    authentication.change_password(db, current_user.id, password_in.current_password, password_in.new_password)
    return success_response(None, "Contraseña actualizada correctamente")


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return success_response(serialize(UserResponse, current_user), "Perfil obtenido exitosamente")
