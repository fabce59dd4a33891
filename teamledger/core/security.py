"""Password hashing and JWT session token issuance/validation."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from starlette.responses import Response

from teamledger.core.config import settings
from teamledger.core.cookies import clear_tokens
from teamledger.core.exceptions import InvalidToken
from teamledger.models.user import Role
from teamledger.schemas.auth import Principal, TokenPair

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _encode(principal: Principal, token_type: str, now: datetime, lifetime: timedelta) -> str:
    payload: dict[str, Any] = {
        "sub": str(principal.id),
        "email": principal.email,
        "role": principal.role.value,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def issue_tokens(principal: Principal, now: datetime | None = None) -> TokenPair:
    """Create a short-lived access token and a longer-lived refresh token for principal."""
    now = now or datetime.now(UTC)
    return TokenPair(
        access_token=_encode(
            principal,
            ACCESS_TOKEN_TYPE,
            now,
            timedelta(seconds=settings.access_token_max_age),
        ),
        refresh_token=_encode(
            principal,
            REFRESH_TOKEN_TYPE,
            now,
            timedelta(seconds=settings.refresh_token_max_age),
        ),
        access_expires_in=settings.access_token_max_age,
        refresh_expires_in=settings.refresh_token_max_age,
    )


def _require_str(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError("claim must be a non-empty string")
    return value


def _parse_user_id(sub: Any) -> int:
    """sub is always str(user_id): ASCII digits, no sign, padding or leading zeros."""
    sub = _require_str(sub)
    if not (sub.isascii() and sub.isdigit()) or (len(sub) > 1 and sub.startswith("0")):
        raise ValueError("sub must be a canonical user id")
    return int(sub)


def validate_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Principal:
    """
    Decode and verify a session token and return the principal it asserts.
    Raises InvalidToken on bad signature, expiry, malformed payload or wrong token type.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidToken("Token has expired") from e
    except jwt.PyJWTError as e:
        raise InvalidToken("Invalid token") from e

    try:
        sub, email, token_type = payload["sub"], payload["email"], payload["type"]
        principal = Principal(
            id=_parse_user_id(sub),
            email=_require_str(email),
            role=Role(payload["role"]),
        )
        _require_str(token_type)
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken("Malformed token payload") from e

    if token_type != expected_type:
        raise InvalidToken("Unexpected token type")
    return principal


def revoke_all(response: Response) -> None:
    """
    Drop the caller's session. Tokens are stateless, so this only clears the
    cookies; a copied token stays valid until it expires.
    """
    clear_tokens(response)
