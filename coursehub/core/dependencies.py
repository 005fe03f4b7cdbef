from fastapi import Depends, HTTPException, status, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session
import logging

from coursehub.core.database import get_db
from coursehub.core.security import verify_firebase_id_token
from coursehub.crud.user_crud import get_user_by_firebase_uid, get_user_by_id
from coursehub.crud.course_crud import get_course, get_discipline, get_lesson_in_discipline
from coursehub.models.enums import UserRole
from coursehub.models.user_model import User
from coursehub.models.course_model import Course, Discipline, Lesson
from coursehub.schemas.user_schema import TokenData
from coursehub.services.activity_tracker import ActivityTracker, utc_now
from coursehub.services.content_store import ContentStore
from coursehub.services.media_streamer import MediaStreamer
from coursehub.services.progress_aggregator import ProgressAggregator, SqlLessonCourseResolver
from coursehub.services.quiz_scoring import AppendOnlyPolicy, BestAttemptPolicy, QuizScoringService

logger = logging.getLogger(__name__)

# Dependency to get the current user from a Firebase ID token
def get_current_user(
    request: Request, db: Session = Depends(get_db)
) -> User:
    """
    Verifies the Firebase ID token from the Authorization header,
    then fetches the matching local user.
    """
    authorization: str = request.headers.get("Authorization")
    scheme, param = get_authorization_scheme_param(authorization)

    if not authorization or scheme.lower() != "bearer":
        logger.warning("Missing or invalid Bearer token in Authorization header.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Bearer token required.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data: TokenData = verify_firebase_id_token(param)

    user = get_user_by_firebase_uid(db, firebase_uid=token_data.firebase_uid)
    if user is None:
        # Valid token, but /auth/register was never completed
        logger.warning(f"User not found in DB for Firebase UID: {token_data.firebase_uid} from token.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account not found or not fully registered in the system.",
        )

    logger.debug(f"Authenticated user retrieved: {user.email} (ID: {user.id})")
    return user


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        logger.warning(f"Admin access denied for user: {current_user.email} (Role: {current_user.role})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not permitted: Requires admin privileges.",
        )
    return current_user


# --- Service Dependencies ---
def get_progress_aggregator(db: Session = Depends(get_db)) -> ProgressAggregator:
    return ProgressAggregator(db, SqlLessonCourseResolver(db))


def get_activity_tracker(
    request: Request,
    db: Session = Depends(get_db),
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
) -> ActivityTracker:
    # Tests may pin the clock through app.state.clock
    clock = getattr(request.app.state, "clock", None) or utc_now
    return ActivityTracker(db, aggregator, clock=clock)


def get_best_attempt_quiz_service(db: Session = Depends(get_db)) -> QuizScoringService:
    return QuizScoringService(db, BestAttemptPolicy())


def get_append_only_quiz_service(db: Session = Depends(get_db)) -> QuizScoringService:
    return QuizScoringService(db, AppendOnlyPolicy())


def get_media_streamer(request: Request) -> MediaStreamer:
    settings = request.app.state.settings
    return MediaStreamer(settings.UPLOADS_DIR, chunk_size=settings.MEDIA_CHUNK_SIZE)


def get_content_store(request: Request) -> ContentStore:
    return ContentStore(request.app.state.settings.UPLOADS_DIR)


# --- Resource Fetching Dependencies ---

def get_course_or_404(course_id: int, db: Session = Depends(get_db)) -> Course:
    course = get_course(db, course_id)
    if not course:
        logger.warning(f"Course with ID {course_id} not found.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Course with ID {course_id} not found.")
    return course

def get_discipline_or_404(discipline_id: int, db: Session = Depends(get_db)) -> Discipline:
    discipline = get_discipline(db, discipline_id)
    if not discipline:
        logger.warning(f"Discipline with ID {discipline_id} not found.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Discipline with ID {discipline_id} not found.")
    return discipline

def get_lesson_or_404(discipline_id: int, lesson_id: int, db: Session = Depends(get_db)) -> Lesson:
    lesson = get_lesson_in_discipline(db, discipline_id, lesson_id)
    if not lesson:
        logger.warning(f"Lesson with ID {lesson_id} not found in discipline {discipline_id}.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Lesson with ID {lesson_id} not found.")
    return lesson

def get_user_or_404(user_id: int, db: Session = Depends(get_db)) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with ID {user_id} not found.")
    return user
