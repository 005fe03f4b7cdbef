# This file makes the 'models' directory a Python package.

from coursehub.core.database import Base # Base must be imported before models that use it

from .enums import UserRole, ContentType, ActivityType, CompletionStatus

from .user_model import User
from .course_model import (
    Course,
    Discipline,
    Lesson,
    Content,
    Quiz,
    Question
)
from .user_progress_model import Progress
from .activity_model import Activity
from .enrollment_model import Enrollment
from .quiz_result_model import QuizResult


__all__ = [
    "Base",
    # Models
    "User",
    "Course",
    "Discipline",
    "Lesson",
    "Content",
    "Quiz",
    "Question",
    "Progress",
    "Activity",
    "Enrollment",
    "QuizResult",
    # Enums
    "UserRole",
    "ContentType",
    "ActivityType",
    "CompletionStatus",
]
