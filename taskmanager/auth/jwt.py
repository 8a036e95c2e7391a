"""JWT token generation and validation for taskmanager."""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from dotenv import load_dotenv

load_dotenv()

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

# OAuth state tokens only need to survive one consent round-trip
STATE_EXPIRATION_MINUTES = 10
CALENDAR_CONNECT_PURPOSE = "calendar_connect"


def create_access_token(user_id: str) -> str:
    """Create a JWT access token for a user.

    Args:
        user_id: User ID to encode in token

    Returns:
        Encoded JWT token string
    """
    payload = {
        "sub": user_id,  # Subject (user ID)
        "exp": datetime.utcnow() + timedelta(hours=JWT_EXPIRATION_HOURS),
        "iat": datetime.utcnow(),  # Issued at
    }
    token = jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
    return token


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload (dict with 'sub' key for user_id), or None if invalid
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    """Extract user ID from a JWT access token.

    State tokens are rejected here even though they share the signing key.
    """
    payload = decode_access_token(token)
    if payload and "purpose" not in payload:
        return payload.get("sub")
    return None


def create_state_token(user_id: str, purpose: str = CALENDAR_CONNECT_PURPOSE) -> str:
    """Create a short-lived signed OAuth `state` value bound to a user."""
    payload = {
        "sub": user_id,
        "purpose": purpose,
        "exp": datetime.utcnow() + timedelta(minutes=STATE_EXPIRATION_MINUTES),
        "iat": datetime.utcnow(),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def get_user_id_from_state(state: str, purpose: str = CALENDAR_CONNECT_PURPOSE) -> Optional[str]:
    """Validate an OAuth `state` value and return the user it was issued to."""
    payload = decode_access_token(state)
    if payload and payload.get("purpose") == purpose:
        return payload.get("sub")
    return None
