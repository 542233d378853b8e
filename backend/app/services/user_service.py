"""
Account management service functions.
"""

import hashlib
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from devconnector.errors import ValidationError
from devconnector.logging import get_logger
from devconnector.repositories import UserRepository

from ..auth.passwords import hash_password, verify_password
from ..models import User

logger = get_logger("users")

GRAVATAR_BASE = "https://www.gravatar.com/avatar"


def gravatar_url(email: str) -> str:
    """Gravatar image for an email: 200px, PG rated, mystery-man fallback."""
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"{GRAVATAR_BASE}/{digest}?{urlencode({'s': '200', 'r': 'pg', 'd': 'mm'})}"


def register_user(db: Session, name: str, email: str, password: str) -> User:
    """
    Create an inactive account.

    Raises:
        ValidationError: An account with this email already exists.
    """
    repo = UserRepository(db)
    if repo.get_by_email(email):
        raise ValidationError.for_field("email", "User already exists")

    try:
        user = repo.create(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            avatar=gravatar_url(email),
        )
        db.commit()
    except IntegrityError:
        # A concurrent registration took the email after the lookup above
        db.rollback()
        logger.info("user_register_conflict")
        raise ValidationError.for_field("email", "User already exists") from None
    return user


def activate_user(db: Session, email: str) -> User:
    """
    Activate the account registered under ``email``.

    Raises:
        ValidationError: No account uses this email.
    """
    repo = UserRepository(db)
    user = repo.get_by_email(email)
    if not user:
        raise ValidationError.for_field("email", "No user account found")

    repo.activate(user)
    db.commit()
    logger.info("user_activated", user_id=user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Check login credentials.

    Raises:
        ValidationError: Unknown email, wrong password or inactive account.
    """
    user = UserRepository(db).get_by_email(email)
    if not user or not verify_password(password, user.password):
        logger.info("login_failed")
        raise ValidationError.for_field("email", "Invalid credentials")
    if not user.is_active:
        raise ValidationError.for_field("email", "User account is not activated")
    return user
