"""
Authentication-related Pydantic schemas.
"""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class UserRegister(BaseModel):
    """Schema for user registration."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)


class UserUpdate(BaseModel):
    """Schema for profile updates. Omitted fields are left unchanged."""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, max_length=100)


class UserResponse(BaseModel):
    """Schema for user response."""
    username: str
    email: str

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for an issued access token."""
    token: str
    username: str
    email: str


class RecoverRequest(BaseModel):
    email: EmailStr


class VerifyTokenResponse(BaseModel):
    token: str


class PasswordResetRequest(BaseModel):
    """Schema for completing a password reset with a verified recovery token."""
    token: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)


class MessageResponse(BaseModel):
    message: str
