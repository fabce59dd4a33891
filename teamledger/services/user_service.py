"""
Account lifecycle: register, sign in, refresh, sign out, profile and password
changes, deletion.

Every mutating operation runs in its own transaction scope. Authorization is
self-only: the caller's principal id must equal the target user id, and no
role (ADMIN included) bypasses that check.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.responses import Response

from teamledger.core.cookies import attach_tokens
from teamledger.core.database import transaction
from teamledger.core.exceptions import (
    InvalidArgument,
    LoginFailed,
    NotAuthenticated,
    Unauthorized,
    UserAlreadyExists,
    UserNotFound,
)
from teamledger.core.security import (
    REFRESH_TOKEN_TYPE,
    hash_password,
    issue_tokens,
    revoke_all,
    validate_token,
    verify_password,
)
from teamledger.models import Role, User
from teamledger.repositories import users
from teamledger.schemas.auth import (
    ChangePasswordRequest,
    Principal,
    SignInRequest,
    SignUpRequest,
    TokenPair,
    UpdateProfileRequest,
    UserInfoResponse,
)

logger = logging.getLogger(__name__)


def _principal_for(user: User) -> Principal:
    return Principal(id=user.id, email=user.email, role=user.role)


def _find_by_id_or_raise(db: Session, user_id: int) -> User:
    user = users.find_by_id(db, user_id)
    if user is None:
        logger.warning("User lookup by id failed: user_id=%s", user_id)
        raise UserNotFound()
    return user


def _find_by_email_or_raise(db: Session, email: str) -> User:
    user = users.find_by_email(db, email)
    if user is None:
        logger.warning("User lookup by email failed: email=%s", email)
        raise UserNotFound()
    return user


def check_authorization(logged_in_user_id: int, target_user_id: int) -> None:
    """Raise Unauthorized unless the caller targets their own account."""
    if logged_in_user_id != target_user_id:
        logger.warning(
            "Rejected cross-account action: caller=%s target=%s",
            logged_in_user_id,
            target_user_id,
        )
        raise Unauthorized()


def register(db: Session, body: SignUpRequest) -> User:
    """Create a MEMBER account. The unique index on email is the final guard against races."""
    if users.email_exists(db, body.email):
        raise UserAlreadyExists()

    user = User(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=Role.MEMBER,
    )
    try:
        with transaction(db):
            users.save(db, user)
    except IntegrityError as e:
        logger.info("Concurrent registration for email=%s lost the race", body.email)
        raise UserAlreadyExists() from e
    logger.info("User registered: userId=%s", user.id)
    return user


def sign_in(db: Session, body: SignInRequest, response: Response) -> TokenPair:
    """
    Check credentials, record the login time and set fresh token cookies.

    Raises UserNotFound or LoginFailed; callers must not reveal to clients
    which of the two happened.
    """
    user = _find_by_email_or_raise(db, body.email)
    if not verify_password(body.password, user.password_hash):
        logger.info("Login failed (wrong password): userId=%s", user.id)
        raise LoginFailed()

    with transaction(db):
        user.mark_logged_in()
        users.save(db, user)

    tokens = issue_tokens(_principal_for(user))
    attach_tokens(response, tokens)
    return tokens


def refresh(db: Session, refresh_token: str | None, response: Response) -> TokenPair:
    """Mint a new token pair from a valid refresh token, reflecting the user's current email/role."""
    if not refresh_token:
        raise NotAuthenticated()
    principal = validate_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    user = _find_by_id_or_raise(db, principal.id)
    tokens = issue_tokens(_principal_for(user))
    attach_tokens(response, tokens)
    return tokens


def logout(response: Response) -> None:
    revoke_all(response)


def get_user(db: Session, user_id: int) -> User:
    return _find_by_id_or_raise(db, user_id)


def update_profile(
    db: Session,
    principal: Principal,
    target_user_id: int,
    body: UpdateProfileRequest,
    response: Response | None = None,
) -> User:
    """
    Change the caller's username and email. When a response is given, fresh
    token cookies are set so the session carries the new email right away.
    """
    check_authorization(principal.id, target_user_id)

    try:
        with transaction(db):
            user = _find_by_id_or_raise(db, target_user_id)
            if body.email != user.email and users.email_exists(db, body.email):
                raise UserAlreadyExists()
            user.update_profile(body.username, body.email)
            users.save(db, user)
    except IntegrityError as e:
        raise UserAlreadyExists() from e
    logger.info("User profile updated: userId=%s", target_user_id)

    if response is not None:
        attach_tokens(response, issue_tokens(_principal_for(user)))
    return user


def change_password(
    db: Session,
    principal: Principal,
    target_user_id: int,
    body: ChangePasswordRequest,
) -> None:
    check_authorization(principal.id, target_user_id)

    with transaction(db):
        user = _find_by_id_or_raise(db, target_user_id)
        if not verify_password(body.current_password, user.password_hash):
            raise InvalidArgument("Current password does not match.")
        user.change_password(hash_password(body.new_password))
        users.save(db, user)
    logger.info("User password changed: userId=%s", target_user_id)


def delete_user(
    db: Session,
    principal: Principal,
    target_user_id: int,
    response: Response,
) -> None:
    """Delete the caller's account and memberships, then drop their session cookies."""
    check_authorization(principal.id, target_user_id)

    with transaction(db):
        user = _find_by_id_or_raise(db, target_user_id)
        removed = users.delete_memberships_by_user_id(db, target_user_id)
        users.delete_user(db, user)
    logger.info("User deleted: userId=%s memberships_removed=%s", target_user_id, removed)

    revoke_all(response)


def get_current_user(db: Session, principal: Principal | None) -> User:
    if principal is None:
        raise NotAuthenticated()
    return _find_by_email_or_raise(db, principal.email)


def get_current_user_info(db: Session, principal: Principal | None) -> UserInfoResponse:
    user = get_current_user(db, principal)
    return UserInfoResponse(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role.value,
        joined_date=user.signed_up_at,
    )
