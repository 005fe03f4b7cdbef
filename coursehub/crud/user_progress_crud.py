from sqlalchemy.orm import Session, joinedload
from sqlalchemy.sql import func
from sqlalchemy.dialects import postgresql, sqlite
from typing import List, Optional
import logging

from coursehub.core.exceptions import StorageError
from coursehub.models.user_progress_model import Progress
from coursehub.models.course_model import Lesson, Discipline

logger = logging.getLogger(__name__)

# Progress rows are written with INSERT ... ON CONFLICT so that concurrent
# activity closes on the same (user, lesson) never lose an increment.
_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

def _progress_insert(db: Session):
    dialect_name = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect_name)
    if insert is None:
        logger.error(f"Atomic progress upsert is not supported on dialect '{dialect_name}'.")
        raise StorageError()
    return insert(Progress)

def increment_watch_time(db: Session, user_id: int, lesson_id: int, seconds: int, completed: bool) -> None:
    """
    Adds `seconds` to the user's watch time on a lesson, creating the row if needed,
    and overwrites `completed` with the latest signal. Does not commit.
    """
    logger.debug(f"Incrementing watch_time by {seconds}s for user_id {user_id}, lesson_id {lesson_id} (completed={completed})")
    stmt = _progress_insert(db).values(
        user_id=user_id,
        lesson_id=lesson_id,
        watch_time=seconds,
        completed=completed,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Progress.user_id, Progress.lesson_id],
        set_={
            "watch_time": Progress.watch_time + stmt.excluded.watch_time,
            "completed": stmt.excluded.completed,
            "updated_at": func.now(),
        },
    )
    db.execute(stmt)

def set_completed(db: Session, user_id: int, lesson_id: int, completed: bool) -> None:
    """Upserts only the completion flag; watch_time is left untouched. Does not commit."""
    logger.debug(f"Setting completed={completed} for user_id {user_id}, lesson_id {lesson_id}")
    stmt = _progress_insert(db).values(
        user_id=user_id,
        lesson_id=lesson_id,
        watch_time=0,
        completed=completed,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Progress.user_id, Progress.lesson_id],
        set_={"completed": stmt.excluded.completed, "updated_at": func.now()},
    )
    db.execute(stmt)

def get_progress(db: Session, user_id: int, lesson_id: int) -> Optional[Progress]:
    """Fetches the progress row, bypassing any stale copy held by the session."""
    return (
        db.query(Progress)
        .populate_existing()
        .filter(Progress.user_id == user_id, Progress.lesson_id == lesson_id)
        .first()
    )

def get_progress_for_user(db: Session, user_id: int) -> List[Progress]:
    """All progress rows of a user, with the lesson -> discipline -> course chain loaded."""
    logger.debug(f"Fetching all progress for user_id {user_id}")
    return (
        db.query(Progress)
        .options(joinedload(Progress.lesson).joinedload(Lesson.discipline).joinedload(Discipline.course))
        .filter(Progress.user_id == user_id)
        .order_by(Progress.updated_at.desc(), Progress.id.desc())
        .all()
    )

def get_progress_by_lesson_ids(db: Session, user_id: int, lesson_ids: List[int]) -> dict:
    """Maps lesson_id -> Progress for the given lessons of one user."""
    if not lesson_ids:
        return {}
    rows = db.query(Progress).filter(Progress.user_id == user_id, Progress.lesson_id.in_(lesson_ids)).all()
    return {row.lesson_id: row for row in rows}
