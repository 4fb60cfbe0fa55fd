from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from medibot.core.constants import ROLE_PATTERN


class SignUpRequest(BaseModel):
    """Email/password registration request"""
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: str = Field("patient", pattern=ROLE_PATTERN)
    name: Optional[str] = Field(None, max_length=200)

    @field_validator('password')
    def password_strength(cls, v):
        """Password must contain a letter and a digit"""
        import re
        if not re.search(r'[A-Za-z]', v):
            raise ValueError('Password must contain a letter')
        if not re.search(r'[0-9]', v):
            raise ValueError('Password must contain digit')
        return v


class SignInRequest(BaseModel):
    """Email/password login request"""
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8)


class SessionUser(BaseModel):
    id: int
    email: EmailStr
    role: Optional[str] = None
    name: Optional[str] = None


class TokenResponse(BaseModel):
    """JWT token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: SessionUser
