from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
import logging

from coursehub.models.quiz_result_model import QuizResult
from coursehub.models.course_model import Quiz

logger = logging.getLogger(__name__)

def create_quiz_result(db: Session, user_id: int, quiz_id: int, score: float, answers: list, time_spent: int = 0) -> QuizResult:
    """Adds a result and flushes to assign its id. Does not commit."""
    result = QuizResult(
        user_id=user_id,
        quiz_id=quiz_id,
        score=score,
        answers=list(answers),
        time_spent=time_spent,
    )
    db.add(result)
    db.flush()
    return result

def get_best_quiz_result(db: Session, user_id: int, quiz_id: int) -> Optional[QuizResult]:
    """Highest-scoring result; the earliest one wins a tie."""
    return (
        db.query(QuizResult)
        .filter(QuizResult.user_id == user_id, QuizResult.quiz_id == quiz_id)
        .order_by(QuizResult.score.desc(), QuizResult.id.asc())
        .first()
    )

def get_quiz_results_for_user(db: Session, user_id: int) -> List[QuizResult]:
    """Newest first, with quiz and course loaded for display."""
    return (
        db.query(QuizResult)
        .options(joinedload(QuizResult.quiz).joinedload(Quiz.course))
        .filter(QuizResult.user_id == user_id)
        .order_by(QuizResult.created_at.desc(), QuizResult.id.desc())
        .all()
    )

def get_quiz_results_for_quiz(db: Session, quiz_id: int) -> List[QuizResult]:
    return (
        db.query(QuizResult)
        .options(joinedload(QuizResult.user))
        .filter(QuizResult.quiz_id == quiz_id)
        .order_by(QuizResult.score.desc(), QuizResult.created_at.asc())
        .all()
    )
