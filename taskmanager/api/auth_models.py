"""Request/response models for authentication endpoints."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from taskmanager.models.constants import MIN_PASSWORD_LENGTH
from taskmanager.models.user import normalize_email


class RegisterRequest(BaseModel):
    """Request model for email/password sign-up."""
    email: str = Field(..., description="Account email address")
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, description="Account password")
    name: Optional[str] = Field(None, description="Display name")

    @field_validator("email")
    @classmethod
    def _email_has_at(cls, value: str) -> str:
        value = normalize_email(value)
        if "@" not in value:
            raise ValueError("Please enter a valid email")
        return value


class LoginRequest(BaseModel):
    """Request model for email/password sign-in."""
    email: str = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")

    @field_validator("email")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_email(value)


class GoogleSignInRequest(BaseModel):
    """Request model for Google sign-in."""
    id_token: str = Field(..., description="Google ID token from the client sign-in flow")


class AuthResponse(BaseModel):
    """Response model for authentication."""
    access_token: str
    token_type: str = "bearer"
    user: dict


class CalendarAuthUrlResponse(BaseModel):
    """Google consent URL for connecting Calendar."""
    url: str


class CalendarConnectionResponse(BaseModel):
    """Result of the Calendar connect callback."""
    connected: bool
