"""Persistence boundary for users and their group memberships."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from teamledger.models import GroupMembership, User


def find_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def find_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def email_exists(db: Session, email: str) -> bool:
    return find_by_email(db, email) is not None


def save(db: Session, user: User) -> User:
    """Stage user for insert/update and flush so constraint violations surface here."""
    db.add(user)
    db.flush()
    return user


def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.flush()


def delete_memberships_by_user_id(db: Session, user_id: int) -> int:
    """Delete every group membership of user_id; return the number of rows removed."""
    result = db.execute(
        delete(GroupMembership)
        .where(GroupMembership.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
