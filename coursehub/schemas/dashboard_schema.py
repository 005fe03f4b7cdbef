from pydantic import BaseModel, Field
from typing import List, Optional

from coursehub.schemas.quiz_submission_schema import QuizResultDisplay
from coursehub.schemas.user_progress_schema import ProgressDisplay

class DashboardLesson(BaseModel):
    id: int
    title: str
    progress: Optional[ProgressDisplay] = None

class DashboardDiscipline(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    completion_percentage: float = 0.0
    lessons: List[DashboardLesson] = []

class DashboardQuiz(BaseModel):
    id: int
    code: str
    title: str
    best_score: Optional[float] = Field(None, description="Highest score among the user's results")
    attempts: int = 0
    results: List[QuizResultDisplay] = Field([], description="The user's own attempts, newest first")

class DashboardCourse(BaseModel):
    id: int
    code: str
    title: str
    description: Optional[str] = None
    completed_time: int = 0
    completion_percentage: float = 0.0
    disciplines: List[DashboardDiscipline] = []
    quizzes: List[DashboardQuiz] = []

class DashboardQuizResult(BaseModel):
    id: int
    score: float
    time_spent: int = 0
    quiz_id: int
    quiz_title: str
    course_title: Optional[str] = None

class Dashboard(BaseModel):
    courses: List[DashboardCourse] = []
    quiz_results: List[DashboardQuizResult] = []
