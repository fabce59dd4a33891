"""Request/response schemas for auth and user endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from teamledger.models.user import Role

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class Principal(BaseModel):
    """Authenticated identity of the caller, derived from a validated access token."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: Role


class TokenPair(BaseModel):
    """Signed access and refresh tokens with their lifetimes in seconds."""

    access_token: str
    refresh_token: str
    access_expires_in: int
    refresh_expires_in: int


class SignUpRequest(BaseModel):
    """Registration payload."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Display name"
    )
    email: EmailStr = Field(..., description="Sign-in email, unique across users")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class SignInRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class UpdateProfileRequest(BaseModel):
    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class TokenResponse(BaseModel):
    """
    Tokens returned after login or refresh. The same values are also set as
    httpOnly cookies; the body is for non-browser clients.
    """

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class UserResponse(BaseModel):
    """Public view of a user (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    signed_up_at: datetime
    last_login_at: datetime | None = None


class UserInfoResponse(BaseModel):
    """Profile summary of the signed-in user."""

    user_id: int
    username: str
    email: str
    role: str
    joined_date: datetime
