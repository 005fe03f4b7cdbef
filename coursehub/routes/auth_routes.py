from fastapi import APIRouter, Depends, HTTPException, status, Body
from sqlalchemy.orm import Session
import logging

from coursehub.core.database import get_db
from coursehub.core.dependencies import get_current_user
from coursehub.core.security import verify_firebase_id_token
from coursehub.crud.user_crud import create_user, get_user_by_firebase_uid, get_user_by_email
from coursehub.models.enums import UserRole
from coursehub.models.user_model import User
from coursehub.schemas.user_schema import (
    UserRegisterRequest,
    UserDisplay,
    AuthResponse,
    UserCreateInternal,
    TokenData,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user_after_firebase(
    payload: UserRegisterRequest = Body(...),
    db: Session = Depends(get_db)
):
    """
    Provision a local student account after the client has signed up with
    Firebase. The Firebase ID token is sent in the request body.
    """
    token_data: TokenData = verify_firebase_id_token(payload.firebase_id_token)
    firebase_uid = token_data.firebase_uid
    email = token_data.email

    if get_user_by_firebase_uid(db, firebase_uid=firebase_uid):
        logger.warning(f"Registration failed: User with Firebase UID {firebase_uid} already exists.")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this Firebase UID already exists.",
        )
    if get_user_by_email(db, email=email):
        logger.warning(f"Registration failed: User with email {email} already exists.")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists.",
        )

    user_in = UserCreateInternal(
        firebase_uid=firebase_uid,
        email=email,
        full_name=payload.full_name,
        role=UserRole.STUDENT,
    )
    db_user = create_user(db, user_in)
    if db_user is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this Firebase UID or email already exists.",
        )

    logger.info(f"User {db_user.email} registered (ID: {db_user.id}).")
    return AuthResponse(message="User registered successfully.", user=UserDisplay.model_validate(db_user))


@router.get("/me", response_model=UserDisplay)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Profile of the authenticated caller."""
    return current_user
