"""Pydantic schemas for authentication and account endpoints."""

from typing import Optional

from pydantic import EmailStr, Field

from formly.schemas.form import CamelModel

MIN_PASSWORD_LENGTH = 6


class SignInRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignUpRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class ProfileUpdate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class UserOut(CamelModel):
    id: str
    name: Optional[str] = None
    email: str


class SignInResponse(UserOut):
    redirect: str = "/dashboard"


class SuccessResponse(CamelModel):
    success: bool = True
