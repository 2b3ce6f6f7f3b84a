"""
auth/tokens.py -- Password hashing and session token encode/decode.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub (numeric user id), email,
       iat and exp. The signing key is always passed in by the caller -- this
       module holds no configuration of its own. Decoding pins the accepted
       algorithm list to exactly the issuing algorithm, so a token whose
       header claims "none", RS256, or any other alg is rejected before the
       signature is even considered (algorithm-confusion defence).

  Passwords: bcrypt directly, default cost factor (bcrypt.gensalt() -> 12).
       Every hash carries its own random salt, so two hashes of the same
       password differ while both verify. checkpw() compares in constant time.
       The DUMMY_HASH constant lets the login path run bcrypt even for an
       unknown email so response time does not reveal whether it exists.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

import bcrypt
from jose import JWTError, jwt

from auth.errors import InvalidCredentialError, PasswordTooLongError
from auth.models import TokenClaims

logger = logging.getLogger("gatekeeper.auth")

ALGORITHM = "HS256"

# bcrypt reads at most this many bytes of input. bcrypt 5 raises on longer
# input; bcrypt 4 silently truncates. Either way, longer passwords are refused.
MAX_PASSWORD_BYTES = 72

# Largest id a signed 64-bit INTEGER column can hold.
MAX_SUBJECT = 2**63 - 1

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises PasswordTooLongError when the UTF-8 encoding exceeds
    MAX_PASSWORD_BYTES. The limit is in bytes, not characters: forty accented
    letters are 40 characters but 80 bytes.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordTooLongError()
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash, or a password too long to have been hashed,
    counts as a mismatch.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
DUMMY_HASH: str = hash_password("gatekeeper_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def encode_token(claims: TokenClaims, secret_key: str, algorithm: str = ALGORITHM) -> str:
    """Sign claims into a compact header.payload.signature token."""
    return jwt.encode(claims.to_payload(), secret_key, algorithm=algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = ALGORITHM) -> TokenClaims:
    """Verify a token and return its claims.

    Raises InvalidCredentialError for every failure: bad signature, wrong
    algorithm, malformed structure, expired, missing exp, or a subject that
    is not a non-negative 64-bit integer, or timestamps outside the range
    datetime can represent. The cause is logged at DEBUG only.
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[algorithm],
            # sub is a JSON number here; jose's built-in check insists on a string.
            options={"verify_sub": False, "require_exp": True},
        )
    except JWTError as exc:
        logger.debug("Token rejected: %s", exc)
        raise InvalidCredentialError() from exc

    subject = _coerce_subject(payload.get("sub"))
    if subject is None:
        logger.debug("Token rejected: invalid subject claim")
        raise InvalidCredentialError()
    try:
        return TokenClaims.from_payload(payload, subject)
    except (ValueError, OverflowError, OSError) as exc:
        logger.debug("Token rejected: unrepresentable timestamp: %s", exc)
        raise InvalidCredentialError() from exc


def _coerce_subject(value) -> int | None:
    """Return the subject as a user id, or None if it is not one.

    Accepts an int or a string of ASCII digits (RFC 7519 allows string
    subjects; some issuers emit them) in 0..MAX_SUBJECT. bool is rejected even
    though it subclasses int.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()) or len(value) > len(str(MAX_SUBJECT)):
            return None
        value = int(value)
    if isinstance(value, int) and 0 <= value <= MAX_SUBJECT:
        return value
    return None
