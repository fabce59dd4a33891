"""Resolve the calling principal from the token the request carried."""

from teamledger.core.exceptions import NotAuthenticated
from teamledger.core.security import ACCESS_TOKEN_TYPE, validate_token
from teamledger.schemas.auth import Principal


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an 'Authorization: Bearer <token>' header value, if any."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def current_principal(
    access_token: str | None,
    authorization: str | None = None,
) -> Principal:
    """
    Validate the access token (cookie first, then Bearer header) and return its principal.

    Raises NotAuthenticated when no token was supplied and InvalidToken when the
    token does not validate.
    """
    token = access_token or extract_bearer_token(authorization)
    if not token:
        raise NotAuthenticated()
    return validate_token(token, expected_type=ACCESS_TOKEN_TYPE)
