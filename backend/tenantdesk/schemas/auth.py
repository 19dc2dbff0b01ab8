from pydantic import Field, model_validator
from .base import ApiModel
from .user import NormalizedEmail, User, UserCreate


class LoginRequest(ApiModel):
    email: NormalizedEmail
    password: str


class RegisterRequest(UserCreate):
    pass


class AuthResponse(ApiModel):
    user: User
    token: str


class ExtendTokenRequest(ApiModel):
    token: str


class TokenResponse(ApiModel):
    token: str


class ForgotPasswordRequest(ApiModel):
    email: NormalizedEmail


class ResetPasswordRequest(ApiModel):
    reset_token: str = Field(min_length=1)
    password: str = Field(min_length=1)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LogoutResponse(ApiModel):
    token: str
    success: bool = True


class MessageResponse(ApiModel):
    message: str
