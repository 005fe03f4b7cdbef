from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
import logging
from typing import List

from coursehub.models.user_model import User
from coursehub.models.enrollment_model import Enrollment
from coursehub.models.enums import UserRole
from coursehub.schemas.user_schema import UserCreateInternal

logger = logging.getLogger(__name__)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Fetches a user by their internal database ID."""
    logger.debug(f"Fetching user by ID: {user_id}")
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> User | None:
    """Fetches a user by their email address."""
    logger.debug(f"Fetching user by email: {email}")
    return db.query(User).filter(User.email == email).first()

def get_user_by_firebase_uid(db: Session, firebase_uid: str) -> User | None:
    """Fetches a user by their Firebase UID."""
    logger.debug(f"Fetching user by Firebase UID: {firebase_uid}")
    return db.query(User).filter(User.firebase_uid == firebase_uid).first()

def create_user(db: Session, user_data: UserCreateInternal) -> User | None:
    """
    Creates a new user in the database.
    Assumes firebase_uid and email come from a verified Firebase ID token.
    Returns None if the UID or email is already taken.
    """
    logger.info(f"Attempting to create user for email: {user_data.email}, Firebase UID: {user_data.firebase_uid}")

    if get_user_by_firebase_uid(db, user_data.firebase_uid) or get_user_by_email(db, user_data.email):
        logger.warning(f"User creation failed: Firebase UID or email already registered ({user_data.email}).")
        return None

    db_user = User(
        firebase_uid=user_data.firebase_uid,
        email=user_data.email,
        full_name=user_data.full_name,
        role=user_data.role or UserRole.STUDENT,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error while creating user {user_data.email}: {e}")
        return None
    db.refresh(db_user)
    logger.info(f"User {db_user.email} created with ID {db_user.id} and role {db_user.role}.")
    return db_user

def get_students(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    """Students with their enrollments (and enrolled courses) loaded."""
    return (
        db.query(User)
        .options(selectinload(User.enrollments).joinedload(Enrollment.course))
        .filter(User.role == UserRole.STUDENT)
        .order_by(User.id)
        .offset(skip)
        .limit(limit)
        .all()
    )

def delete_user(db: Session, user_id: int) -> bool:
    db_user = get_user_by_id(db, user_id)
    if not db_user:
        logger.warning(f"User with ID {user_id} not found for deletion.")
        return False
    db.delete(db_user)
    db.commit()
    logger.info(f"User ID: {user_id} ({db_user.email}) deleted with their enrollments, progress and results.")
    return True
