# This file makes the 'routes' directory a Python package.

from fastapi import APIRouter

from .auth_routes import router as auth_router
from .course_routes import router as course_router
from .lesson_routes import router as lesson_router
from .quiz_routes import router as quiz_router
from .student_routes import router as student_router
from .admin_routes import router as admin_router
from .media_routes import router as media_router

api_router_v1 = APIRouter(prefix="/api/v1")

api_router_v1.include_router(auth_router)
api_router_v1.include_router(course_router)
api_router_v1.include_router(lesson_router)
api_router_v1.include_router(quiz_router)
api_router_v1.include_router(student_router)

# Admin routes are prefixed with /admin in admin_routes.py
api_router_v1.include_router(admin_router)

__all__ = [
    "api_router_v1",
    "media_router",  # served from the root, outside /api/v1
]
