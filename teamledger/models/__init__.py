"""SQLAlchemy ORM models."""

from teamledger.models.base import Base
from teamledger.models.group import Group, GroupMembership
from teamledger.models.user import Role, User

__all__ = ["Base", "Group", "GroupMembership", "Role", "User"]
