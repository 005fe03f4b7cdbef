"""
Progress aggregation.

Turns closed LESSON activities into durable Progress and Enrollment state, handles
the explicit "mark complete" signal, and assembles the student dashboard.

Lesson -> Discipline -> Course lookups go through a `LessonCourseResolver` so the
aggregator can be exercised with a stub resolver in tests.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.core.exceptions import NotFoundError, StorageError
from coursehub.crud import (
    enrollment_crud,
    quiz_result_crud,
    user_progress_crud,
)
from coursehub.models.course_model import Discipline, Lesson
from coursehub.models.enums import CompletionStatus
from coursehub.models.user_progress_model import Progress
from coursehub.schemas import dashboard_schema as dash
from coursehub.schemas.quiz_submission_schema import QuizResultDisplay
from coursehub.schemas.user_progress_schema import ProgressDisplay, ProgressWithLesson

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LessonPlacement:
    lesson_id: int
    discipline_id: Optional[int]
    course_id: Optional[int]  # None when the discipline or course is gone


class LessonCourseResolver(Protocol):
    def resolve(self, lesson_id: int) -> Optional[LessonPlacement]:
        """Returns where a lesson sits, or None if the lesson does not exist."""
        ...


class SqlLessonCourseResolver:
    """Resolves the owning course with a single Lesson/Discipline outer join."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, lesson_id: int) -> Optional[LessonPlacement]:
        row = (
            self.db.query(Lesson.id, Lesson.discipline_id, Discipline.course_id)
            .outerjoin(Discipline, Discipline.id == Lesson.discipline_id)
            .filter(Lesson.id == lesson_id)
            .first()
        )
        if row is None:
            return None
        return LessonPlacement(lesson_id=row[0], discipline_id=row[1], course_id=row[2])


def completion_percentage(completed: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(completed / total * 100, 2)


class ProgressAggregator:
    def __init__(self, db: Session, resolver: LessonCourseResolver):
        self.db = db
        self.resolver = resolver

    # --- Write paths ---

    def record_lesson_time(
        self,
        user_id: int,
        lesson_id: int,
        time_spent: int,
        completion_status: Optional[str] = None,
    ) -> Optional[Progress]:
        """
        Folds one closed lesson session into Progress and Enrollment.

        Runs inside the caller's transaction and does not commit. Orphaned data
        (unknown lesson, lesson without course, user not enrolled) only skips
        the affected write.
        """
        placement = self.resolver.resolve(lesson_id)
        if placement is None:
            logger.warning(f"Lesson {lesson_id} not found; skipping {time_spent}s of tracked time for user {user_id}.")
            return None

        completed = completion_status == CompletionStatus.COMPLETED.value
        user_progress_crud.increment_watch_time(self.db, user_id, lesson_id, time_spent, completed)
        logger.info(f"Progress for user {user_id} on lesson {lesson_id}: +{time_spent}s, completed={completed}.")

        if placement.course_id is None:
            logger.warning(f"Lesson {lesson_id} has no owning course; course time not updated for user {user_id}.")
        elif not enrollment_crud.increment_completed_time(self.db, user_id, placement.course_id, time_spent):
            logger.warning(f"User {user_id} is not enrolled in course {placement.course_id}; course time not updated.")
        else:
            logger.info(f"Enrollment of user {user_id} in course {placement.course_id}: +{time_spent}s.")

        return user_progress_crud.get_progress(self.db, user_id, lesson_id)

    def mark_lesson_completion(self, user_id: int, lesson_id: int, completed: bool) -> Progress:
        """Explicit completion signal. Never touches watch time or course time."""
        if self.resolver.resolve(lesson_id) is None:
            logger.warning(f"User {user_id} tried to update progress of unknown lesson {lesson_id}.")
            raise NotFoundError(f"Lesson with ID {lesson_id} not found.")

        try:
            user_progress_crud.set_completed(self.db, user_id, lesson_id, completed)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving completion for user {user_id}, lesson {lesson_id}: {e}", exc_info=True)
            raise StorageError() from e

        logger.info(f"User {user_id} marked lesson {lesson_id} completed={completed}.")
        return user_progress_crud.get_progress(self.db, user_id, lesson_id)

    # --- Read paths ---

    def list_progress(self, user_id: int) -> List[ProgressWithLesson]:
        entries = []
        for progress in user_progress_crud.get_progress_for_user(self.db, user_id):
            lesson = progress.lesson
            discipline = lesson.discipline if lesson else None
            course = discipline.course if discipline else None
            entries.append(ProgressWithLesson(
                **ProgressDisplay.model_validate(progress).model_dump(),
                lesson_title=lesson.title if lesson else None,
                discipline_title=discipline.title if discipline else None,
                course_title=course.title if course else None,
            ))
        return entries

    def build_dashboard(self, user_id: int) -> dash.Dashboard:
        enrollments = enrollment_crud.get_enrollments_with_course_tree(self.db, user_id)

        lesson_ids = [
            lesson.id
            for enrollment in enrollments
            for discipline in enrollment.course.disciplines
            for lesson in discipline.lessons
        ]
        progress_by_lesson = user_progress_crud.get_progress_by_lesson_ids(self.db, user_id, lesson_ids)

        results = quiz_result_crud.get_quiz_results_for_user(self.db, user_id)
        results_by_quiz: Dict[int, list] = {}
        for result in results:
            results_by_quiz.setdefault(result.quiz_id, []).append(result)

        courses = []
        for enrollment in enrollments:
            course = enrollment.course
            course_total = course_done = 0
            disciplines = []
            for discipline in course.disciplines:
                lessons = []
                done = 0
                for lesson in discipline.lessons:
                    progress = progress_by_lesson.get(lesson.id)
                    if progress is not None and progress.completed:
                        done += 1
                    lessons.append(dash.DashboardLesson(
                        id=lesson.id,
                        title=lesson.title,
                        progress=ProgressDisplay.model_validate(progress) if progress else None,
                    ))
                course_total += len(lessons)
                course_done += done
                disciplines.append(dash.DashboardDiscipline(
                    id=discipline.id,
                    title=discipline.title,
                    description=discipline.description,
                    completion_percentage=completion_percentage(done, len(lessons)),
                    lessons=lessons,
                ))

            quizzes = []
            for quiz in course.quizzes:
                attempts = results_by_quiz.get(quiz.id, [])
                quizzes.append(dash.DashboardQuiz(
                    id=quiz.id,
                    code=quiz.code,
                    title=quiz.title,
                    best_score=max((r.score for r in attempts), default=None),
                    attempts=len(attempts),
                    results=[QuizResultDisplay.model_validate(r) for r in attempts],
                ))

            courses.append(dash.DashboardCourse(
                id=course.id,
                code=course.code,
                title=course.title,
                description=course.description,
                completed_time=enrollment.completed_time or 0,
                completion_percentage=completion_percentage(course_done, course_total),
                disciplines=disciplines,
                quizzes=quizzes,
            ))

        quiz_results = [
            dash.DashboardQuizResult(
                id=result.id,
                score=result.score,
                time_spent=result.time_spent or 0,
                quiz_id=result.quiz_id,
                quiz_title=result.quiz.title,
                course_title=result.quiz.course.title if result.quiz.course else None,
            )
            for result in results
        ]

        logger.info(f"Dashboard for user {user_id}: {len(courses)} courses, {len(quiz_results)} quiz results.")
        return dash.Dashboard(courses=courses, quiz_results=quiz_results)
