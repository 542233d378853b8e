"""
Authentication dependencies for FastAPI routes.

A token is accepted from the ``Authorization: Bearer`` header or, for browser
clients, the ``access_token`` cookie. Every failure is a 401 raised before any
profile data is read.
"""

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from devconnector.repositories import TokenBlacklistRepository, UserRepository

from ..database import get_db
from ..models import User
from .jwt import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_from_request(
    token_header: str | None = Depends(oauth2_scheme),
    access_token_cookie: str | None = Cookie(None, alias="access_token"),
) -> str:
    """Raw JWT from the Authorization header, else from the access_token cookie."""
    token = token_header or access_token_cookie
    if not token:
        raise _unauthorized("No token, authorization denied")
    return token


def get_current_user(
    token: str = Depends(get_token_from_request),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user.

    Rejects tokens that fail signature or expiry checks, tokens revoked by
    logout (their ``jti`` is blacklisted), and tokens whose ``sub`` is not the
    id of an existing account.
    """
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise _unauthorized("Token is not valid") from None

    jti = payload.get("jti")
    if jti and TokenBlacklistRepository(db).is_blacklisted(jti):
        raise _unauthorized("Token has been revoked")

    subject = str(payload.get("sub") or "")
    if not subject.isdigit():
        raise _unauthorized("Token is not valid")

    user = UserRepository(db).get_by_id(int(subject))
    if user is None:
        raise _unauthorized("User not found")
    return user
