# Schemas cho module auth, phần thông tin người dùng dùng lại từ user.schemas

from pydantic import AliasChoices, BaseModel, EmailStr, Field

from ..user.schemas import UserBase, UserResponse


class LoginRequest(BaseModel):
    # Cho phép gửi email hoặc username trong cùng một trường
    identifier: str = Field(
        ...,
        min_length=3,
        validation_alias=AliasChoices("identifier", "email", "username", "username_or_email"),
    )
    password: str = Field(..., min_length=6)


class RegisterRequest(UserBase):
    # Vai trò luôn là "user", chỉ admin mới đổi được qua /api/users
    password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    token: str
    user: UserResponse
    expiresIn: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., validation_alias=AliasChoices("currentPassword", "current_password"))
    new_password: str = Field(..., min_length=6, validation_alias=AliasChoices("newPassword", "new_password"))


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., validation_alias=AliasChoices("token", "reset_token"))
    new_password: str = Field(..., min_length=6, validation_alias=AliasChoices("newPassword", "new_password"))
