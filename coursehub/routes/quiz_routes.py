from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from coursehub.core.database import get_db
from coursehub.core.dependencies import (
    get_current_user,
    get_current_admin_user,
    get_course_or_404,
    get_best_attempt_quiz_service,
)
from coursehub.models.user_model import User
from coursehub.models.course_model import Course
from coursehub.schemas import course_schema as schemas
from coursehub.schemas import quiz_submission_schema as quiz_sub_schemas
from coursehub.crud import course_crud as crud
from coursehub.crud import quiz_result_crud
from coursehub.services.quiz_scoring import QuizScoringService, QuizSubmissionOutcome

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quizzes", tags=["Quizzes"])


def submission_response(outcome: QuizSubmissionOutcome) -> quiz_sub_schemas.QuizSubmissionResult:
    return quiz_sub_schemas.QuizSubmissionResult(
        **quiz_sub_schemas.QuizResultDisplay.model_validate(outcome.result).model_dump(),
        is_new_high_score=outcome.is_new_high_score,
        correct_answers_count=outcome.grade.correct_count,
        total_questions=outcome.grade.total_questions,
    )


@router.get("/{course_id}", response_model=List[schemas.QuizPublic])
def read_quizzes_for_course(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Quizzes of a course as students see them: questions and options, no answer keys.
    """
    return crud.get_quizzes_for_course(db, course.id)

@router.get("/{course_id}/with-answers", response_model=List[schemas.QuizDisplay])
def read_quizzes_with_answers(
    course: Course = Depends(get_course_or_404),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Quizzes of a course including the answer keys. (Admin only)
    """
    return crud.get_quizzes_for_course(db, course.id)

@router.post("/{course_id}", response_model=schemas.QuizDisplay, status_code=status.HTTP_201_CREATED)
def create_new_quiz(
    course_id: int,
    quiz_in: schemas.QuizCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    logger.info(f"Admin {current_user.email} creating quiz '{quiz_in.code}' for course ID {course_id}")
    return crud.create_quiz(db, course_id, quiz_in)

@router.put("/{course_id}/{quiz_id}", response_model=schemas.QuizDisplay)
def update_existing_quiz(
    course_id: int,
    quiz_id: int,
    quiz_in: schemas.QuizUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Update a quiz. The submitted questions replace the existing ones. (Admin only)
    """
    quiz = crud.update_quiz(db, course_id, quiz_id, quiz_in)
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found.")
    return quiz

@router.delete("/{course_id}/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_quiz(
    course_id: int,
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    if not crud.delete_quiz(db, course_id, quiz_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found.")

@router.get("/{course_id}/{quiz_id}/results", response_model=List[quiz_sub_schemas.QuizResultWithUser])
def read_quiz_results(
    course_id: int,
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    All stored results of a quiz with the student's name and email. (Admin only)
    """
    if not crud.get_quiz_in_course(db, course_id, quiz_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found.")

    return [
        quiz_sub_schemas.QuizResultWithUser(
            **quiz_sub_schemas.QuizResultDisplay.model_validate(result).model_dump(),
            user_email=result.user.email if result.user else None,
            user_full_name=result.user.full_name if result.user else None,
        )
        for result in quiz_result_crud.get_quiz_results_for_quiz(db, quiz_id)
    ]

@router.post("/{course_id}/{quiz_id}/submit", response_model=quiz_sub_schemas.QuizSubmissionResult)
def submit_quiz_best_attempt(
    course_id: int,
    quiz_id: int,
    submission: quiz_sub_schemas.QuizSubmissionCreate,
    scoring: QuizScoringService = Depends(get_best_attempt_quiz_service),
    current_user: User = Depends(get_current_user)
):
    """
    Grade a submission and keep it only if it beats the caller's best score.
    When it does not, the existing best result is returned with
    `is_new_high_score = false`.
    """
    outcome = scoring.submit(
        quiz_id,
        current_user.id,
        submission.answers,
        time_spent=submission.time_spent,
        course_id=course_id,
    )
    return submission_response(outcome)
