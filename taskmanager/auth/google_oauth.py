"""Google OAuth2 helpers: sign-in token verification and Calendar consent."""

import os
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from urllib.parse import urlencode

import requests
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests
from dotenv import load_dotenv

load_dotenv()

# Google OAuth configuration
GOOGLE_OAUTH_CLIENT_ID = os.getenv("GOOGLE_OAUTH_CLIENT_ID")
GOOGLE_OAUTH_CLIENT_SECRET = os.getenv("GOOGLE_OAUTH_CLIENT_SECRET")
GOOGLE_OAUTH_REDIRECT_URI = os.getenv(
    "GOOGLE_OAUTH_REDIRECT_URI",
    "http://localhost:8000/auth/google/calendar/callback",
)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]


class OAuthExchangeError(Exception):
    """Raised when the Google token endpoint rejects a code exchange."""

    pass


def verify_google_token(id_token_str: str) -> Optional[Dict]:
    """Verify a Google ID token and extract user information.

    Args:
        id_token_str: Google ID token string from the client sign-in flow

    Returns:
        Dictionary with user info (id, email, name), or None if invalid
    """
    try:
        idinfo = id_token.verify_oauth2_token(
            id_token_str,
            google_requests.Request(),
            GOOGLE_OAUTH_CLIENT_ID
        )

        if idinfo['iss'] not in ['accounts.google.com', 'https://accounts.google.com']:
            return None

        return {
            'id': idinfo['sub'],  # Google user ID
            'email': idinfo.get('email'),
            'name': idinfo.get('name'),
        }
    except ValueError:
        # Invalid token
        return None


def build_calendar_auth_url(state: str) -> str:
    """Build the Google consent URL for offline Calendar access."""
    params = {
        "client_id": GOOGLE_OAUTH_CLIENT_ID or "",
        "redirect_uri": GOOGLE_OAUTH_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(CALENDAR_SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "include_granted_scopes": "true",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def exchange_code_for_tokens(code: str) -> Dict[str, Any]:
    """Exchange an authorization code for tokens.

    Returns:
        Token response with an added `expiry` (naive UTC) when `expires_in` is present

    Raises:
        OAuthExchangeError: If the token endpoint does not return 2xx
    """
    resp = requests.post(
        GOOGLE_TOKEN_URL,
        data={
            "code": code,
            "client_id": GOOGLE_OAUTH_CLIENT_ID,
            "client_secret": GOOGLE_OAUTH_CLIENT_SECRET,
            "redirect_uri": GOOGLE_OAUTH_REDIRECT_URI,
            "grant_type": "authorization_code",
        },
        timeout=30,
    )
    if not resp.ok:
        raise OAuthExchangeError(f"Token exchange failed with status {resp.status_code}")

    data = resp.json()
    if data.get("expires_in"):
        data["expiry"] = datetime.utcnow() + timedelta(seconds=int(data["expires_in"]))
    return data
