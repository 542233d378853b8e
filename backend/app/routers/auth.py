"""
Authentication router: password login, current user and logout.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from devconnector.logging import get_logger
from devconnector.repositories import TokenBlacklistRepository

from ..auth.dependencies import get_current_user, get_token_from_request
from ..auth.jwt import create_access_token, decode_access_token, get_token_expiry
from ..database import get_db
from ..models import User
from ..schemas import LoginRequest, MessageResponse, TokenResponse, UserResponse
from ..services import user_service

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email and password and get a bearer token."""
    user = user_service.authenticate_user(db, payload.email, payload.password)
    token = create_access_token({"sub": str(user.id)})
    logger.info("user_logged_in", user_id=user.id)
    return TokenResponse(access_token=token)


@router.get("", response_model=UserResponse)
def current_user(user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    token: str = Depends(get_token_from_request),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Revoke the token used for this request."""
    payload = decode_access_token(token)
    jti = payload.get("jti")

    if jti:
        repo = TokenBlacklistRepository(db)
        repo.blacklist_token(jti, get_token_expiry(payload) or datetime.now(timezone.utc))
        repo.cleanup_expired()
        db.commit()

    logger.info("user_logged_out", user_id=user.id)
    return MessageResponse(msg="Logged out")
