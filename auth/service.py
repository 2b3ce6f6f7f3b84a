"""
auth/service.py -- The auth core: register, login, token verification, identity lookup.

AuthService is constructed with a credential store and an immutable AuthConfig.
It keeps no mutable state of its own, so one instance is shared by every
request thread.

Failure reporting uses the taxonomy in auth/errors.py:
  EmailExistsError        register() for an email that is already taken
  InvalidCredentialError  unknown email, wrong password, any bad token
  NotFoundError           get_user_by_id() / me() for an id with no user
  StorageFailureError     anything else the store raises, propagated unchanged

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from auth.errors import DuplicateEmailError, EmailExistsError, InvalidCredentialError, NotFoundError
from auth.models import TokenClaims, User
from auth.store import CredentialStore
from auth.tokens import ALGORITHM, DUMMY_HASH, decode_token, encode_token, hash_password, verify_password
from core.config import TOKEN_TTL, Settings

logger = logging.getLogger("gatekeeper.auth")

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class AuthConfig:
    """Signing configuration, fixed at startup."""

    secret_key: str
    token_ttl: timedelta = TOKEN_TTL
    algorithm: str = ALGORITHM

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthConfig:
        return cls(secret_key=settings.jwt_secret)


class AuthService:
    """Registration, login and token verification over a CredentialStore.

    Usage:
        service = AuthService(UserStore(), AuthConfig.from_settings(get_settings()))
        user = service.register("a@example.com", "secret1")
        token = service.login("a@example.com", "secret1")
        assert service.parse_token(token) == user.id
    """

    def __init__(self, store: CredentialStore, config: AuthConfig) -> None:
        self.store = store
        self.config = config

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, email: str, password: str) -> User:
        """Hash the password and persist a new user. Returns the stored User.

        The existence check and the insert are not atomic. Two concurrent
        registrations for the same email can both pass the check; the loser
        then hits the store's unique constraint, which is mapped to
        EmailExistsError as well.
        """
        if self.store.get_by_email(email) is not None:
            raise EmailExistsError()

        user = User(email=email, password_hash=hash_password(password))
        try:
            created = self.store.create(user)
        except DuplicateEmailError as exc:
            raise EmailExistsError() from exc

        logger.info("Registered user id=%s", created.id)
        return created

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> str:
        """Verify credentials and return a signed session token.

        Unknown email and wrong password both raise InvalidCredentialError,
        and both run one bcrypt check so their timing matches.
        """
        user = self.store.get_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt
            verify_password(password, DUMMY_HASH)
            raise InvalidCredentialError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialError()

        logger.info("Login succeeded for user id=%s", user.id)
        return self.issue_token(user)

    def issue_token(self, user: User, now: datetime | None = None) -> str:
        """Sign a token for user, valid from now for config.token_ttl."""
        if user.id is None:
            raise ValueError("cannot issue a token for a user without an id")
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        claims = TokenClaims(
            subject=user.id,
            email=user.email,
            issued_at=issued_at,
            expires_at=issued_at + self.config.token_ttl,
        )
        return encode_token(claims, self.config.secret_key, self.config.algorithm)

    # ------------------------------------------------------------------
    # Token verification and identity
    # ------------------------------------------------------------------

    def parse_token(self, token: str) -> int:
        """Return the user id a token was issued for. Makes no store call."""
        return self.parse_claims(token).subject

    def parse_claims(self, token: str) -> TokenClaims:
        return decode_token(token, self.config.secret_key, self.config.algorithm)

    def get_user_by_id(self, user_id: int) -> User:
        user = self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user

    def me(self, token: str) -> User:
        """Resolve a bearer token to the full User record.

        A valid token for a since-deleted user raises NotFoundError, not
        InvalidCredentialError.
        """
        return self.get_user_by_id(self.parse_token(token))
