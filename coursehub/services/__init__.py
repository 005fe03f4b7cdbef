# This package contains the business logic services.

from .progress_aggregator import (
    LessonPlacement,
    LessonCourseResolver,
    SqlLessonCourseResolver,
    ProgressAggregator,
)
from .activity_tracker import ActivityTracker
from .quiz_scoring import (
    AppendOnlyPolicy,
    BestAttemptPolicy,
    QuizScoringService,
    grade_answers,
    get_attempt_policy,
)
from .media_streamer import MediaSlice, MediaStreamer
from .content_store import ContentStore

__all__ = [
    "LessonPlacement", "LessonCourseResolver", "SqlLessonCourseResolver", "ProgressAggregator",
    "ActivityTracker",
    "AppendOnlyPolicy", "BestAttemptPolicy", "QuizScoringService", "grade_answers", "get_attempt_policy",
    "MediaSlice", "MediaStreamer",
    "ContentStore",
]
