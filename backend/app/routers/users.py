"""
Account registration endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import ActivateRequest, MessageResponse, RegisterRequest, UserResponse
from ..services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new account.

    The account starts inactive and must be activated before login.
    """
    user = user_service.register_user(db, payload.name, payload.email, payload.password)
    return UserResponse.model_validate(user)


@router.post("/activate", response_model=MessageResponse)
def activate(payload: ActivateRequest, db: Session = Depends(get_db)):
    """Activate the account registered under an email."""
    user_service.activate_user(db, payload.email)
    return MessageResponse(msg="User account successfully activated")
