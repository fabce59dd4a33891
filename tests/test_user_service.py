"""Tests for teamledger.services.user_service against an in-memory SQLite database."""

import unittest
from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from starlette.responses import Response

from teamledger.core.exceptions import (
    InvalidArgument,
    InvalidToken,
    LoginFailed,
    NotAuthenticated,
    Unauthorized,
    UserAlreadyExists,
    UserNotFound,
)
from teamledger.core.security import validate_token, verify_password
from teamledger.models import Group, GroupMembership, Role, User
from teamledger.schemas.auth import (
    ChangePasswordRequest,
    Principal,
    SignInRequest,
    SignUpRequest,
    UpdateProfileRequest,
)
from teamledger.services import user_service
from tests.db import make_sessionmaker

PASSWORD = "s3cret-passw0rd"


def _sign_up(email: str = "alice@example.com", username: str = "alice", password: str = PASSWORD) -> SignUpRequest:
    return SignUpRequest(username=username, email=email, password=password)


def _principal_of(user: User) -> Principal:
    return Principal(id=user.id, email=user.email, role=user.role)


class UserServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_sessionmaker()()
        self.addCleanup(self.db.close)

    def _count_users(self) -> int:
        return self.db.execute(select(func.count()).select_from(User)).scalar_one()

    def _register(self, email: str = "alice@example.com", username: str = "alice") -> User:
        return user_service.register(self.db, _sign_up(email=email, username=username))


class TestRegister(UserServiceTestCase):
    def test_creates_member_with_hashed_password(self) -> None:
        user = self._register()
        self.assertIsNotNone(user.id)
        self.assertEqual(user.role, Role.MEMBER)
        self.assertNotEqual(user.password_hash, PASSWORD)
        self.assertTrue(verify_password(PASSWORD, user.password_hash))
        self.assertIsNotNone(user.signed_up_at)
        self.assertIsNone(user.last_login_at)

    def test_duplicate_email_fails_and_creates_nothing(self) -> None:
        self._register()
        with self.assertRaises(UserAlreadyExists):
            self._register(username="someone-else")
        self.assertEqual(self._count_users(), 1)

    def test_unique_violation_is_reported_as_already_exists(self) -> None:
        # Simulate losing a race: the existence check passes but the insert collides.
        self._register()
        with patch("teamledger.services.user_service.users.email_exists", return_value=False):
            with self.assertRaises(UserAlreadyExists) as ctx:
                self._register(username="racer")
        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)
        self.assertEqual(self._count_users(), 1)


class TestSignIn(UserServiceTestCase):
    def test_tokens_validate_to_stored_user(self) -> None:
        user = self._register()
        response = Response()
        tokens = user_service.sign_in(
            self.db, SignInRequest(email="alice@example.com", password=PASSWORD), response
        )
        principal = validate_token(tokens.access_token)
        self.assertEqual(principal.id, user.id)
        self.assertEqual(principal.email, "alice@example.com")
        self.assertEqual(principal.role, Role.MEMBER)
        self.assertIsNotNone(user.last_login_at)
        self.assertEqual(len(response.headers.getlist("set-cookie")), 2)

    def test_wrong_password_issues_nothing(self) -> None:
        user = self._register()
        response = Response()
        with self.assertRaises(LoginFailed):
            user_service.sign_in(
                self.db, SignInRequest(email="alice@example.com", password="not-it"), response
            )
        self.db.refresh(user)
        self.assertIsNone(user.last_login_at)
        self.assertEqual(response.headers.getlist("set-cookie"), [])

    def test_unknown_email(self) -> None:
        with self.assertRaises(UserNotFound):
            user_service.sign_in(
                self.db, SignInRequest(email="nobody@example.com", password=PASSWORD), Response()
            )


class TestRefreshAndLogout(UserServiceTestCase):
    def test_refresh_issues_new_pair(self) -> None:
        user = self._register()
        tokens = user_service.sign_in(
            self.db, SignInRequest(email="alice@example.com", password=PASSWORD), Response()
        )
        response = Response()
        renewed = user_service.refresh(self.db, tokens.refresh_token, response)
        self.assertEqual(validate_token(renewed.access_token).id, user.id)
        self.assertEqual(len(response.headers.getlist("set-cookie")), 2)

    def test_refresh_reflects_current_email(self) -> None:
        user = self._register()
        tokens = user_service.sign_in(
            self.db, SignInRequest(email="alice@example.com", password=PASSWORD), Response()
        )
        user_service.update_profile(
            self.db,
            _principal_of(user),
            user.id,
            UpdateProfileRequest(username="alice", email="alice@new.example.com"),
        )
        renewed = user_service.refresh(self.db, tokens.refresh_token, Response())
        self.assertEqual(validate_token(renewed.access_token).email, "alice@new.example.com")

    def test_refresh_rejects_access_token(self) -> None:
        self._register()
        tokens = user_service.sign_in(
            self.db, SignInRequest(email="alice@example.com", password=PASSWORD), Response()
        )
        with self.assertRaises(InvalidToken):
            user_service.refresh(self.db, tokens.access_token, Response())

    def test_refresh_without_cookie(self) -> None:
        with self.assertRaises(NotAuthenticated):
            user_service.refresh(self.db, None, Response())

    def test_logout_clears_cookies(self) -> None:
        response = Response()
        user_service.logout(response)
        cookies = response.headers.getlist("set-cookie")
        self.assertEqual(len(cookies), 2)
        self.assertTrue(all("Max-Age=0" in c for c in cookies))


class TestUpdateProfile(UserServiceTestCase):
    def test_updates_own_profile(self) -> None:
        user = self._register()
        updated = user_service.update_profile(
            self.db,
            _principal_of(user),
            user.id,
            UpdateProfileRequest(username="alice2", email="alice2@example.com"),
        )
        self.assertEqual(updated.username, "alice2")
        self.assertEqual(updated.email, "alice2@example.com")

    def test_email_change_rotates_token_cookies(self) -> None:
        user = self._register()
        response = Response()
        user_service.update_profile(
            self.db,
            _principal_of(user),
            user.id,
            UpdateProfileRequest(username="alice", email="alice@new.example.com"),
            response,
        )
        cookies = response.headers.getlist("set-cookie")
        access = next(c for c in cookies if c.startswith("accessToken="))
        token = access.split(";", 1)[0].split("=", 1)[1]
        principal = validate_token(token)
        self.assertEqual(principal.email, "alice@new.example.com")
        self.assertEqual(user_service.get_current_user(self.db, principal).id, user.id)
        self.assertTrue(any(c.startswith("refreshToken=") for c in cookies))

    def test_rejected_update_sets_no_cookies(self) -> None:
        alice = self._register()
        bob = self._register(email="bob@example.com", username="bob")
        response = Response()
        with self.assertRaises(Unauthorized):
            user_service.update_profile(
                self.db,
                _principal_of(bob),
                alice.id,
                UpdateProfileRequest(username="x", email="x@example.com"),
                response,
            )
        self.assertEqual(response.headers.getlist("set-cookie"), [])

    def test_other_user_is_rejected_and_target_unchanged(self) -> None:
        alice = self._register()
        bob = self._register(email="bob@example.com", username="bob")
        with self.assertRaises(Unauthorized):
            user_service.update_profile(
                self.db,
                _principal_of(bob),
                alice.id,
                UpdateProfileRequest(username="hacked", email="hacked@example.com"),
            )
        self.db.refresh(alice)
        self.assertEqual(alice.username, "alice")
        self.assertEqual(alice.email, "alice@example.com")

    def test_admin_gets_no_bypass(self) -> None:
        alice = self._register()
        admin = Principal(id=alice.id + 100, email="root@example.com", role=Role.ADMIN)
        with self.assertRaises(Unauthorized):
            user_service.update_profile(
                self.db,
                admin,
                alice.id,
                UpdateProfileRequest(username="x", email="x@example.com"),
            )

    def test_missing_target(self) -> None:
        ghost = Principal(id=999, email="ghost@example.com", role=Role.MEMBER)
        with self.assertRaises(UserNotFound):
            user_service.update_profile(
                self.db, ghost, 999, UpdateProfileRequest(username="g", email="g@example.com")
            )

    def test_email_taken_by_other_user(self) -> None:
        alice = self._register()
        self._register(email="bob@example.com", username="bob")
        with self.assertRaises(UserAlreadyExists):
            user_service.update_profile(
                self.db,
                _principal_of(alice),
                alice.id,
                UpdateProfileRequest(username="alice", email="bob@example.com"),
            )
        self.db.refresh(alice)
        self.assertEqual(alice.email, "alice@example.com")


class TestChangePassword(UserServiceTestCase):
    def test_wrong_current_password_keeps_hash(self) -> None:
        user = self._register()
        before = user.password_hash
        with self.assertRaises(InvalidArgument):
            user_service.change_password(
                self.db,
                _principal_of(user),
                user.id,
                ChangePasswordRequest(current_password="not-it", new_password="brand-new-pass"),
            )
        self.db.refresh(user)
        self.assertEqual(user.password_hash, before)

    def test_new_password_works_old_one_fails(self) -> None:
        user = self._register()
        user_service.change_password(
            self.db,
            _principal_of(user),
            user.id,
            ChangePasswordRequest(current_password=PASSWORD, new_password="brand-new-pass"),
        )
        tokens = user_service.sign_in(
            self.db, SignInRequest(email="alice@example.com", password="brand-new-pass"), Response()
        )
        self.assertEqual(validate_token(tokens.access_token).id, user.id)
        with self.assertRaises(LoginFailed):
            user_service.sign_in(
                self.db, SignInRequest(email="alice@example.com", password=PASSWORD), Response()
            )

    def test_other_user_is_rejected(self) -> None:
        alice = self._register()
        bob = self._register(email="bob@example.com", username="bob")
        with self.assertRaises(Unauthorized):
            user_service.change_password(
                self.db,
                _principal_of(bob),
                alice.id,
                ChangePasswordRequest(current_password=PASSWORD, new_password="brand-new-pass"),
            )


class TestDeleteUser(UserServiceTestCase):
    def _join(self, user: User, group: Group) -> None:
        self.db.add(GroupMembership(group_id=group.id, user_id=user.id))
        self.db.commit()

    def test_removes_user_and_memberships(self) -> None:
        alice = self._register()
        bob = self._register(email="bob@example.com", username="bob")
        trip = Group(name="Trip")
        rent = Group(name="Rent")
        self.db.add_all([trip, rent])
        self.db.commit()
        self._join(alice, trip)
        self._join(alice, rent)
        self._join(bob, trip)
        alice_id = alice.id

        response = Response()
        user_service.delete_user(self.db, _principal_of(alice), alice_id, response)

        with self.assertRaises(UserNotFound):
            user_service.get_user(self.db, alice_id)
        remaining = self.db.execute(select(GroupMembership.user_id)).scalars().all()
        self.assertEqual(remaining, [bob.id])
        cookies = response.headers.getlist("set-cookie")
        self.assertEqual(len(cookies), 2)
        self.assertTrue(all("Max-Age=0" in c for c in cookies))

    def test_other_user_is_rejected(self) -> None:
        alice = self._register()
        bob = self._register(email="bob@example.com", username="bob")
        response = Response()
        with self.assertRaises(Unauthorized):
            user_service.delete_user(self.db, _principal_of(bob), alice.id, response)
        self.assertEqual(user_service.get_user(self.db, alice.id).id, alice.id)
        self.assertEqual(response.headers.getlist("set-cookie"), [])

    def test_missing_target(self) -> None:
        ghost = Principal(id=42, email="ghost@example.com", role=Role.MEMBER)
        with self.assertRaises(UserNotFound):
            user_service.delete_user(self.db, ghost, 42, Response())


class TestCurrentUser(UserServiceTestCase):
    def test_resolves_by_principal_email(self) -> None:
        user = self._register()
        self.assertEqual(user_service.get_current_user(self.db, _principal_of(user)).id, user.id)

    def test_info(self) -> None:
        user = self._register()
        info = user_service.get_current_user_info(self.db, _principal_of(user))
        self.assertEqual(info.user_id, user.id)
        self.assertEqual(info.username, "alice")
        self.assertEqual(info.email, "alice@example.com")
        self.assertEqual(info.role, "MEMBER")
        self.assertIsNotNone(info.joined_date)

    def test_no_principal(self) -> None:
        with self.assertRaises(NotAuthenticated):
            user_service.get_current_user(self.db, None)

    def test_deleted_user(self) -> None:
        stale = Principal(id=5, email="gone@example.com", role=Role.MEMBER)
        with self.assertRaises(UserNotFound):
            user_service.get_current_user(self.db, stale)


class TestCheckAuthorization(unittest.TestCase):
    def test_same_id_passes(self) -> None:
        user_service.check_authorization(3, 3)

    def test_different_id_fails(self) -> None:
        with self.assertRaises(Unauthorized):
            user_service.check_authorization(3, 4)


if __name__ == "__main__":
    unittest.main()
