"""Register, login, token refresh and logout; auth dependency (get_current_principal)."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Header, Response, status
from sqlalchemy.orm import Session

from teamledger.core.cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from teamledger.core.database import get_db
from teamledger.core.exceptions import LoginFailed, UserNotFound
from teamledger.schemas.auth import (
    Principal,
    SignInRequest,
    SignUpRequest,
    TokenPair,
    TokenResponse,
    UserResponse,
)
from teamledger.services import user_service
from teamledger.services.auth_context import current_principal

router = APIRouter()


def get_current_principal(
    access_token: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """Dependency: require a valid access token (cookie or Bearer header). Raises 401 otherwise."""
    return current_principal(access_token, authorization)


def _token_response(tokens: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.access_expires_in,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: SignUpRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Create a MEMBER account. 409 if the email is already registered."""
    user = user_service.register(db, body)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: SignInRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email and password. Tokens are set as httpOnly cookies
    (accessToken, refreshToken) and also returned in the body.
    """
    try:
        tokens = user_service.sign_in(db, body, response)
    except (UserNotFound, LoginFailed) as e:
        # Same answer for unknown email and wrong password.
        raise LoginFailed() from e
    return _token_response(tokens)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> TokenResponse:
    """Exchange the refreshToken cookie for a new token pair."""
    tokens = user_service.refresh(db, refresh_token, response)
    return _token_response(tokens)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout() -> Response:
    """Clear the token cookies. Safe to call without a session."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    user_service.logout(response)
    return response
