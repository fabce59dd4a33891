"""Pydantic request/response schemas."""

from teamledger.schemas.auth import (
    ChangePasswordRequest,
    Principal,
    SignInRequest,
    SignUpRequest,
    TokenPair,
    TokenResponse,
    UpdateProfileRequest,
    UserInfoResponse,
    UserResponse,
)
from teamledger.schemas.health import HealthResponse

__all__ = [
    "ChangePasswordRequest",
    "HealthResponse",
    "Principal",
    "SignInRequest",
    "SignUpRequest",
    "TokenPair",
    "TokenResponse",
    "UpdateProfileRequest",
    "UserInfoResponse",
    "UserResponse",
]
