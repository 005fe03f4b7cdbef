from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
import logging

from coursehub.core.exceptions import ConflictError, NotFoundError
from coursehub.models.enrollment_model import Enrollment
from coursehub.models.course_model import Course, Discipline

logger = logging.getLogger(__name__)

def get_enrollment(db: Session, user_id: int, course_id: int) -> Optional[Enrollment]:
    return db.query(Enrollment).filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id).first()

def create_enrollment(db: Session, user_id: int, course_id: int) -> Enrollment:
    if not db.query(Course.id).filter(Course.id == course_id).first():
        logger.warning(f"Enrollment failed: course ID {course_id} not found.")
        raise NotFoundError(f"Course with ID {course_id} not found.")
    if get_enrollment(db, user_id, course_id):
        logger.warning(f"Enrollment failed: user {user_id} already enrolled in course {course_id}.")
        raise ConflictError("Already enrolled in this course.")

    enrollment = Enrollment(user_id=user_id, course_id=course_id, completed_time=0)
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent enrollment detected for user {user_id}, course {course_id}.")
        raise ConflictError("Already enrolled in this course.")
    db.refresh(enrollment)
    logger.info(f"User {user_id} enrolled in course {course_id} (Enrollment ID: {enrollment.id}).")
    return enrollment

def delete_enrollment(db: Session, user_id: int, course_id: int) -> bool:
    enrollment = get_enrollment(db, user_id, course_id)
    if not enrollment:
        return False
    db.delete(enrollment)
    db.commit()
    logger.info(f"User {user_id} unenrolled from course {course_id}.")
    return True

def increment_completed_time(db: Session, user_id: int, course_id: int, seconds: int) -> bool:
    """
    Atomically adds `seconds` to the enrollment's completed_time.
    Returns False if the user is not enrolled. Does not commit.
    """
    updated = (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
        .update({Enrollment.completed_time: Enrollment.completed_time + seconds}, synchronize_session=False)
    )
    return updated == 1

def get_enrollments_with_course_tree(db: Session, user_id: int) -> List[Enrollment]:
    """Enrollments with course -> disciplines -> lessons and quizzes eagerly loaded."""
    return (
        db.query(Enrollment)
        .options(
            joinedload(Enrollment.course).selectinload(Course.disciplines).selectinload(Discipline.lessons),
            joinedload(Enrollment.course).selectinload(Course.quizzes),
        )
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.created_at, Enrollment.id)
        .all()
    )
