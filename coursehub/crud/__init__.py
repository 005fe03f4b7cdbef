# This file makes the 'crud' directory a Python package.

from .user_crud import (
    get_user_by_id,
    get_user_by_email,
    get_user_by_firebase_uid,
    create_user,
    get_students,
    delete_user
)

from .course_crud import (
    create_course, get_course, get_course_by_code, get_courses, update_course, delete_course,
    create_discipline, get_discipline, update_discipline, delete_discipline,
    create_lesson, get_lesson, get_lesson_in_discipline, get_lessons_for_discipline, update_lesson, delete_lesson,
    create_quiz, get_quiz, get_quiz_in_course, get_quizzes_for_course, update_quiz, delete_quiz
)

from .user_progress_crud import (
    increment_watch_time,
    set_completed,
    get_progress,
    get_progress_for_user,
    get_progress_by_lesson_ids
)

from .activity_crud import (
    create_activity, get_activity, close_activity_if_open, get_closed_activities_for_user
)

from .enrollment_crud import (
    get_enrollment, create_enrollment, delete_enrollment,
    increment_completed_time, get_enrollments_with_course_tree
)

from .quiz_result_crud import (
    create_quiz_result, get_best_quiz_result, get_quiz_results_for_user, get_quiz_results_for_quiz
)


__all__ = [
    # User CRUD
    "get_user_by_id", "get_user_by_email", "get_user_by_firebase_uid", "create_user",
    "get_students", "delete_user",

    # Course CRUD
    "create_course", "get_course", "get_course_by_code", "get_courses", "update_course", "delete_course",
    "create_discipline", "get_discipline", "update_discipline", "delete_discipline",
    "create_lesson", "get_lesson", "get_lesson_in_discipline", "get_lessons_for_discipline", "update_lesson", "delete_lesson",
    "create_quiz", "get_quiz", "get_quiz_in_course", "get_quizzes_for_course", "update_quiz", "delete_quiz",

    # Progress CRUD
    "increment_watch_time", "set_completed", "get_progress", "get_progress_for_user", "get_progress_by_lesson_ids",

    # Activity CRUD
    "create_activity", "get_activity", "close_activity_if_open", "get_closed_activities_for_user",

    # Enrollment CRUD
    "get_enrollment", "create_enrollment", "delete_enrollment",
    "increment_completed_time", "get_enrollments_with_course_tree",

    # Quiz Result CRUD
    "create_quiz_result", "get_best_quiz_result", "get_quiz_results_for_user", "get_quiz_results_for_quiz",
]
