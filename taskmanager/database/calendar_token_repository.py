"""Encrypted storage of each user's Google Calendar tokens.

Tokens are Fernet-encrypted at rest with TOKEN_ENCRYPTION_KEY and are never
logged.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.orm import Session

from taskmanager.database.models import GoogleOAuthTokenDB

logger = logging.getLogger(__name__)

PROVIDER_GOOGLE = "google"
PRODUCT_CALENDAR = "calendar"


@dataclass
class CalendarTokens:
    """Decrypted Calendar tokens of one user."""

    refresh_token: str
    access_token: Optional[str] = None
    expiry: Optional[datetime] = None  # naive UTC, as google-auth expects


def _fernet() -> Fernet:
    key = os.getenv("TOKEN_ENCRYPTION_KEY", "").strip()
    if not key:
        raise RuntimeError("TOKEN_ENCRYPTION_KEY is not set; Calendar tokens cannot be stored or read.")
    return Fernet(key)


def encrypt_secret(raw: str) -> str:
    return _fernet().encrypt(raw.encode("utf-8")).decode("utf-8")


def decrypt_secret(enc: str) -> str:
    """Decrypt a stored token.

    Raises:
        RuntimeError: If the key is missing or does not match the stored value
    """
    try:
        return _fernet().decrypt(enc.encode("utf-8")).decode("utf-8")
    except InvalidToken as e:
        raise RuntimeError("Stored Calendar token could not be decrypted; TOKEN_ENCRYPTION_KEY may have changed.") from e


class CalendarTokenRepository:
    """One row per user holding the Calendar grant."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self, user_id: str):
        return self.db.query(GoogleOAuthTokenDB).filter(
            GoogleOAuthTokenDB.user_id == user_id,
            GoogleOAuthTokenDB.provider == PROVIDER_GOOGLE,
            GoogleOAuthTokenDB.product == PRODUCT_CALENDAR,
        )

    def get_tokens(self, user_id: str) -> Optional[CalendarTokens]:
        """Return the user's decrypted tokens, or None if Calendar is not connected."""
        row = self._query(user_id).first()
        if row is None:
            return None
        return CalendarTokens(
            refresh_token=decrypt_secret(row.refresh_token_encrypted),
            access_token=decrypt_secret(row.access_token_encrypted) if row.access_token_encrypted else None,
            expiry=row.expiry,
        )

    def get_refresh_token(self, user_id: str) -> Optional[str]:
        tokens = self.get_tokens(user_id)
        return tokens.refresh_token if tokens else None

    def save(
        self,
        user_id: str,
        refresh_token: str,
        scopes: Sequence[str],
        access_token: Optional[str] = None,
        expiry: Optional[datetime] = None,
    ) -> None:
        """Store the user's Calendar grant, replacing any earlier one."""
        now = datetime.utcnow()
        row = self._query(user_id).first()
        if row is None:
            row = GoogleOAuthTokenDB(
                user_id=user_id,
                provider=PROVIDER_GOOGLE,
                product=PRODUCT_CALENDAR,
                created_at=now,
            )
            self.db.add(row)
        row.scopes = list(scopes)
        row.refresh_token_encrypted = encrypt_secret(refresh_token)
        row.access_token_encrypted = encrypt_secret(access_token) if access_token else None
        row.expiry = expiry
        row.updated_at = now

        try:
            self.db.commit()
            logger.debug(f"Saved Calendar grant for user {user_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save Calendar grant for user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str) -> bool:
        """Forget the user's Calendar grant. Returns whether one existed."""
        deleted = self._query(user_id).delete(synchronize_session=False)
        self.db.commit()
        return bool(deleted)
