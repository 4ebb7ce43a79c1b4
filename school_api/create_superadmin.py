"""Create the first superadmin account.

User creation over HTTP is limited to superadmins, so the initial account is
created from the command line.

Usage:
    python -m school_api.create_superadmin --username root --email root@example.com
"""
import argparse
import getpass
import logging
import os
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.database import SessionLocal, init_db
from school_api.models.user import SUPERADMIN_ROLE, User

logger = logging.getLogger(__name__)


def create_superadmin(db: Session, username: str, email: str, password: str) -> User:
    normalized_email = email.strip().lower()
    if db.query(User).filter(User.email == normalized_email).first() is not None:
        raise ValueError(f"A user with email {normalized_email} already exists.")

    user = User(username=username, email=normalized_email, role=SUPERADMIN_ROLE)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create a superadmin user.")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", default=os.getenv("SUPERADMIN_PASSWORD"))
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("A password is required.", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        user = create_superadmin(db, args.username, args.email, password)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        print(f"Could not create superadmin: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    logger.info("Created superadmin %s (id=%s)", user.email, user.id)


if __name__ == "__main__":
    main()
