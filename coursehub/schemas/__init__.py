# This file makes the 'schemas' directory a Python package.

from .user_schema import (
    UserBase, UserCreateInternal, UserDisplay, TokenData,
    UserRegisterRequest, AuthResponse, EnrolledCourseRef, StudentAdminDisplay
)

from .course_schema import (
    ContentDisplay, LessonDisplay,
    DisciplineBase, DisciplineCreate, DisciplineUpdate, DisciplineDisplay,
    QuestionBase, QuestionCreate, QuestionPublic, QuestionDisplay,
    QuizBase, QuizCreate, QuizUpdate, QuizPublic, QuizDisplay,
    CourseBase, CourseCreate, CourseUpdate, CoursePublic, CourseDisplay
)

from .user_progress_schema import ProgressUpdate, ProgressDisplay, ProgressWithLesson

from .activity_schema import ActivityStart, ActivityEnd, ActivityDisplay, ActivityTimeTotal

from .quiz_submission_schema import (
    QuizSubmissionCreate, QuizResultDisplay, QuizSubmissionResult, QuizResultWithUser
)

from .dashboard_schema import (
    Dashboard, DashboardCourse, DashboardDiscipline, DashboardLesson, DashboardQuiz, DashboardQuizResult
)

from .enrollment_schema import EnrollmentDisplay


__all__ = [
    # User Schemas
    "UserBase", "UserCreateInternal", "UserDisplay", "TokenData",
    "UserRegisterRequest", "AuthResponse", "EnrolledCourseRef", "StudentAdminDisplay",

    # Course Schemas
    "ContentDisplay", "LessonDisplay",
    "DisciplineBase", "DisciplineCreate", "DisciplineUpdate", "DisciplineDisplay",
    "QuestionBase", "QuestionCreate", "QuestionPublic", "QuestionDisplay",
    "QuizBase", "QuizCreate", "QuizUpdate", "QuizPublic", "QuizDisplay",
    "CourseBase", "CourseCreate", "CourseUpdate", "CoursePublic", "CourseDisplay",

    # Progress Schemas
    "ProgressUpdate", "ProgressDisplay", "ProgressWithLesson",

    # Activity Schemas
    "ActivityStart", "ActivityEnd", "ActivityDisplay", "ActivityTimeTotal",

    # Quiz Submission Schemas
    "QuizSubmissionCreate", "QuizResultDisplay", "QuizSubmissionResult", "QuizResultWithUser",

    # Dashboard Schemas
    "Dashboard", "DashboardCourse", "DashboardDiscipline", "DashboardLesson", "DashboardQuiz", "DashboardQuizResult",

    # Enrollment Schemas
    "EnrollmentDisplay",
]
