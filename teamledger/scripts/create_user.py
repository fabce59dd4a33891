"""
Create a user without going through the API (e.g. the first ADMIN). Run from project root:
  python -m teamledger.scripts.create_user EMAIL USERNAME PASSWORD [role]
Example:
  python -m teamledger.scripts.create_user admin@example.com admin your-secure-password ADMIN
"""
import argparse
import logging
import sys

from sqlalchemy.exc import IntegrityError

from teamledger.core.database import SessionLocal, transaction
from teamledger.core.log_config import configure_logging
from teamledger.core.security import hash_password
from teamledger.models import Role, User
from teamledger.repositories import users
from teamledger.schemas.auth import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
)

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a TeamLedger user.")
    parser.add_argument("email", help="Sign-in email (unique)")
    parser.add_argument("username", help=f"Display name (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.MEMBER.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)
    configure_logging()

    email = args.email.strip()
    username = args.username.strip()
    if "@" not in email:
        logger.error("Invalid email: %s", email)
        return 1
    if not username or len(username) > USERNAME_MAX_LEN:
        logger.error("Invalid username length.")
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        logger.error("Password must be %s-%s characters.", PASSWORD_MIN_LEN, PASSWORD_MAX_LEN)
        return 1

    db = SessionLocal()
    try:
        if users.email_exists(db, email):
            logger.error("User '%s' already exists.", email)
            return 1
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(args.password),
            role=Role(args.role),
        )
        with transaction(db):
            users.save(db, user)
        logger.info("Created user '%s' with role '%s'.", email, args.role)
        return 0
    except IntegrityError:
        logger.error("User '%s' already exists.", email)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
