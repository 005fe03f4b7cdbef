from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class QuizSubmissionCreate(BaseModel):
    # One selected option index per question, in question order.
    # Missing or null entries are graded as wrong.
    answers: List[Optional[int]] = Field(..., description="Selected option index per question")
    time_spent: int = Field(0, ge=0, description="Seconds the student spent on the quiz")

class QuizResultDisplay(BaseModel):
    id: int
    user_id: int
    quiz_id: int
    score: float = Field(..., ge=0, le=100)
    answers: List[Optional[int]] = []
    time_spent: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class QuizSubmissionResult(QuizResultDisplay):
    # None for the append-only submit path, which does not compare attempts
    is_new_high_score: Optional[bool] = None
    correct_answers_count: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)

class QuizResultWithUser(QuizResultDisplay):
    user_email: Optional[str] = None
    user_full_name: Optional[str] = None
