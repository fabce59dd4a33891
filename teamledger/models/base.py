"""Declarative base shared by all TeamLedger ORM models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base.metadata is the target for Alembic autogenerate."""
