from fastapi import APIRouter, Depends, status, Body
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from coursehub.core.database import get_db
from coursehub.core.dependencies import (
    get_current_user,
    get_activity_tracker,
    get_progress_aggregator,
    get_append_only_quiz_service,
)
from coursehub.models.user_model import User
from coursehub.schemas import (
    activity_schema,
    dashboard_schema,
    enrollment_schema,
    user_progress_schema as up_schemas,
    quiz_submission_schema as quiz_sub_schemas,
)
from coursehub.crud import enrollment_crud, quiz_result_crud
from coursehub.services.activity_tracker import ActivityTracker
from coursehub.services.progress_aggregator import ProgressAggregator
from coursehub.services.quiz_scoring import QuizScoringService
from coursehub.routes.quiz_routes import submission_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/student", tags=["Student Learning & Progress"])

# --- Enrollment ---

@router.post("/enroll/{course_id}", response_model=enrollment_schema.EnrollmentDisplay, status_code=status.HTTP_201_CREATED)
def enroll_in_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    logger.info(f"User {current_user.email} enrolling in course ID {course_id}")
    return enrollment_crud.create_enrollment(db, current_user.id, course_id)

# --- Activity Sessions ---

@router.post("/activity/start", response_model=activity_schema.ActivityDisplay, status_code=status.HTTP_201_CREATED)
def start_activity(
    activity_in: activity_schema.ActivityStart,
    tracker: ActivityTracker = Depends(get_activity_tracker),
    current_user: User = Depends(get_current_user)
):
    """
    Open a timed session on a lesson or quiz.
    """
    return tracker.start_activity(current_user.id, activity_in.type, activity_in.resource_id)

@router.post("/activity/{activity_id}/end", response_model=activity_schema.ActivityDisplay)
def end_activity(
    activity_id: int,
    activity_end: Optional[activity_schema.ActivityEnd] = Body(None),
    tracker: ActivityTracker = Depends(get_activity_tracker),
    current_user: User = Depends(get_current_user)
):
    """
    Close one of the caller's open sessions. Lesson time is added to the
    lesson progress and to the course enrollment. Closing twice is a 409.
    """
    completion_status = activity_end.completion_status if activity_end else None
    return tracker.end_activity(activity_id, current_user.id, completion_status)

@router.get("/activity/time", response_model=activity_schema.ActivityTimeTotal)
def read_total_activity_time(
    tracker: ActivityTracker = Depends(get_activity_tracker),
    current_user: User = Depends(get_current_user)
):
    return activity_schema.ActivityTimeTotal(total_time=tracker.total_tracked_time(current_user.id))

# --- Progress ---

@router.put("/progress/{lesson_id}", response_model=up_schemas.ProgressDisplay)
def update_lesson_progress(
    lesson_id: int,
    progress_in: up_schemas.ProgressUpdate,
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
    current_user: User = Depends(get_current_user)
):
    """
    Mark a lesson as completed (or not). Watch time is left untouched.
    """
    return aggregator.mark_lesson_completion(current_user.id, lesson_id, progress_in.completed)

@router.get("/progress", response_model=List[up_schemas.ProgressWithLesson])
def read_my_progress(
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
    current_user: User = Depends(get_current_user)
):
    return aggregator.list_progress(current_user.id)

@router.get("/dashboard", response_model=dashboard_schema.Dashboard)
def read_my_dashboard(
    aggregator: ProgressAggregator = Depends(get_progress_aggregator),
    current_user: User = Depends(get_current_user)
):
    """
    Enrolled courses with per-lesson progress, completion percentages and quiz scores.
    """
    return aggregator.build_dashboard(current_user.id)

# --- Quizzes ---

@router.post("/quiz/{quiz_id}/submit", response_model=quiz_sub_schemas.QuizSubmissionResult)
def submit_quiz(
    quiz_id: int,
    submission: quiz_sub_schemas.QuizSubmissionCreate,
    scoring: QuizScoringService = Depends(get_append_only_quiz_service),
    current_user: User = Depends(get_current_user)
):
    """
    Grade a submission and store it as a new attempt, whatever the score.
    """
    outcome = scoring.submit(quiz_id, current_user.id, submission.answers, time_spent=submission.time_spent)
    return submission_response(outcome)

@router.get("/quiz-results", response_model=List[quiz_sub_schemas.QuizResultDisplay])
def read_my_quiz_results(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Newest first."""
    return quiz_result_crud.get_quiz_results_for_user(db, current_user.id)
