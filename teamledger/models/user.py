"""ORM model for application users (registration, sign-in, profile)."""

import enum
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from teamledger.models.base import Base


class Role(str, enum.Enum):
    """Account role embedded in session tokens."""

    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """
    User account. Email is the sign-in identifier and is unique across users
    (enforced by a unique index, not only by the service's existence check).
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, native_enum=False, length=32),
        nullable=False,
        default=Role.MEMBER,
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    signed_up_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    memberships = relationship(
        "GroupMembership",
        back_populates="user",
        passive_deletes=True,
    )

    def update_profile(self, username: str, email: str) -> None:
        self.username = username
        self.email = email

    def change_password(self, password_hash: str) -> None:
        self.password_hash = password_hash

    def mark_logged_in(self, now: datetime | None = None) -> None:
        self.last_login_at = now or _utcnow()
