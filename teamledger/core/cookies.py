"""Carry session tokens in httpOnly response cookies."""

from starlette.responses import Response

from teamledger.core.config import settings
from teamledger.schemas.auth import TokenPair

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"  # noqa: S105
COOKIE_PATH = "/"


def _set(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        path=COOKIE_PATH,
        httponly=True,
        secure=bool(settings.COOKIE_SECURE),
        samesite=settings.COOKIE_SAMESITE,
    )


def attach_tokens(response: Response, tokens: TokenPair) -> None:
    """Set both token cookies with their token-specific max-age."""
    _set(response, ACCESS_TOKEN_COOKIE, tokens.access_token, tokens.access_expires_in)
    _set(response, REFRESH_TOKEN_COOKIE, tokens.refresh_token, tokens.refresh_expires_in)


def clear_tokens(response: Response) -> None:
    """Overwrite both token cookies with an already-expired empty value. Idempotent."""
    _set(response, ACCESS_TOKEN_COOKIE, "", 0)
    _set(response, REFRESH_TOKEN_COOKIE, "", 0)
