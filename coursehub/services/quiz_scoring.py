"""
Quiz grading and attempt persistence.

Grading compares the submitted option index at each position with the
question's answer key. How the graded attempt is stored is a policy chosen by
the caller:

* `BestAttemptPolicy` keeps a new result only when it beats the best prior score.
* `AppendOnlyPolicy` stores every attempt.

Both are in use by different routes and are intentionally not unified.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.core.exceptions import NotFoundError, StorageError
from coursehub.crud import course_crud, quiz_result_crud
from coursehub.models.course_model import Question
from coursehub.models.quiz_result_model import QuizResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeOutcome:
    correct_count: int
    total_questions: int
    score: float


@dataclass(frozen=True)
class QuizSubmissionOutcome:
    result: QuizResult
    grade: GradeOutcome
    is_new_high_score: Optional[bool]


def grade_answers(questions: Sequence[Question], answers: Sequence[Optional[int]]) -> GradeOutcome:
    """
    Position-wise exact match. Missing or null answers count as wrong and
    answers beyond the last question are ignored. A quiz without questions
    scores 0.
    """
    total = len(questions)
    correct = sum(
        1
        for position, question in enumerate(questions)
        if position < len(answers) and answers[position] is not None and answers[position] == question.answer
    )
    score = correct / total * 100 if total > 0 else 0.0
    return GradeOutcome(correct_count=correct, total_questions=total, score=score)


class AttemptPolicy:
    name = "base"

    def record(self, db: Session, user_id: int, quiz_id: int, grade: GradeOutcome,
               answers: List[Optional[int]], time_spent: int) -> QuizSubmissionOutcome:
        raise NotImplementedError


class BestAttemptPolicy(AttemptPolicy):
    name = "best_attempt"

    def record(self, db, user_id, quiz_id, grade, answers, time_spent):
        best = quiz_result_crud.get_best_quiz_result(db, user_id, quiz_id)
        if best is not None and grade.score <= best.score:
            logger.info(f"Quiz {quiz_id}, user {user_id}: score {grade.score} does not beat best {best.score}; not stored.")
            return QuizSubmissionOutcome(result=best, grade=grade, is_new_high_score=False)

        result = quiz_result_crud.create_quiz_result(db, user_id, quiz_id, grade.score, answers, time_spent)
        logger.info(f"Quiz {quiz_id}, user {user_id}: new high score {grade.score} stored (result {result.id}).")
        return QuizSubmissionOutcome(result=result, grade=grade, is_new_high_score=True)


class AppendOnlyPolicy(AttemptPolicy):
    name = "append_only"

    def record(self, db, user_id, quiz_id, grade, answers, time_spent):
        result = quiz_result_crud.create_quiz_result(db, user_id, quiz_id, grade.score, answers, time_spent)
        logger.info(f"Quiz {quiz_id}, user {user_id}: attempt with score {grade.score} stored (result {result.id}).")
        return QuizSubmissionOutcome(result=result, grade=grade, is_new_high_score=None)


ATTEMPT_POLICIES = {
    BestAttemptPolicy.name: BestAttemptPolicy,
    AppendOnlyPolicy.name: AppendOnlyPolicy,
}


def get_attempt_policy(name: str) -> AttemptPolicy:
    try:
        return ATTEMPT_POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown quiz attempt policy: {name}") from None


class QuizScoringService:
    def __init__(self, db: Session, policy: AttemptPolicy):
        self.db = db
        self.policy = policy

    def submit(
        self,
        quiz_id: int,
        user_id: int,
        answers: List[Optional[int]],
        time_spent: int = 0,
        course_id: Optional[int] = None,
    ) -> QuizSubmissionOutcome:
        if course_id is None:
            quiz = course_crud.get_quiz(self.db, quiz_id)
        else:
            quiz = course_crud.get_quiz_in_course(self.db, course_id, quiz_id)
        if quiz is None:
            logger.warning(f"User {user_id} submitted answers for unknown quiz {quiz_id} (course {course_id}).")
            raise NotFoundError("Quiz not found.")

        if len(answers) != len(quiz.questions):
            logger.info(f"Quiz {quiz_id}: {len(answers)} answers for {len(quiz.questions)} questions; missing ones count as wrong.")

        grade = grade_answers(quiz.questions, answers)
        logger.info(f"Quiz {quiz_id} submitted by user {user_id}. Score: {grade.correct_count}/{grade.total_questions} ({grade.score}%)")

        try:
            outcome = self.policy.record(self.db, user_id, quiz_id, grade, list(answers), time_spent)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error storing quiz result for quiz {quiz_id}, user {user_id}: {e}", exc_info=True)
            raise StorageError() from e

        self.db.refresh(outcome.result)
        return outcome
