"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic beyond shape conversion).
Stores and the service do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class User:
    """A registered identity.

    email is the login key and is unique across all users. It is stored and
    compared exactly as given -- no case folding.

    password_hash is a bcrypt hash and must never leave the process. API
    response models copy only id and email.

    id, created_at and updated_at are None until the store assigns them.
    """

    email: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Typed view of a session token payload.

    Wire form is {"sub": int, "email": str, "iat": int, "exp": int} with
    integer epoch seconds.
    """

    subject: int
    email: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict:
        return {
            "sub": self.subject,
            "email": self.email,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }

    @classmethod
    def from_payload(cls, payload: dict, subject: int) -> TokenClaims:
        """Build claims from a verified payload. subject is passed pre-validated."""
        return cls(
            subject=subject,
            email=str(payload.get("email", "")),
            issued_at=datetime.fromtimestamp(int(payload.get("iat", 0)), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
