"""User data model for taskmanager."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    """User model for taskmanager."""

    id: str = Field(..., description="Unique user identifier (UUID, or Google user ID for Google sign-ins)")
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, description="User display name")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def normalize_email(email: str) -> str:
    """Canonical form of an email address: emails identify accounts case-insensitively."""
    return email.strip().lower()
