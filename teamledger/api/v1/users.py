"""User profile endpoints. Mutations are allowed on the caller's own account only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from teamledger.api.v1.auth import get_current_principal
from teamledger.core.database import get_db
from teamledger.schemas.auth import (
    ChangePasswordRequest,
    Principal,
    UpdateProfileRequest,
    UserInfoResponse,
    UserResponse,
)
from teamledger.services import user_service

router = APIRouter()


@router.get("/me", response_model=UserInfoResponse)
def get_me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> UserInfoResponse:
    return user_service.get_current_user_info(db, principal)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    user = user_service.get_user(db, user_id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_profile(
    user_id: int,
    body: UpdateProfileRequest,
    response: Response,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Change username and email and rotate token cookies. 403 when user_id is not the caller's id."""
    user = user_service.update_profile(db, principal, user_id, body, response)
    return UserResponse.model_validate(user)


@router.put("/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    user_id: int,
    body: ChangePasswordRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    user_service.change_password(db, principal, user_id, body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete the caller's account and group memberships, and clear token cookies."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    user_service.delete_user(db, principal, user_id, response)
    return response
