"""
Shared fixtures: an app per test on in-memory SQLite, a controllable clock,
auth overrides and small seeding helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from coursehub.core.config import Settings
from coursehub.core.database import get_db
from coursehub.core.dependencies import get_current_user
from coursehub.main import create_app
from coursehub.models import (
    Course,
    Discipline,
    Enrollment,
    Lesson,
    Question,
    Quiz,
    User,
    UserRole,
)


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class Seed:
    """Creates rows directly through the ORM and commits each one."""

    def __init__(self, db: Session):
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, role: UserRole = UserRole.STUDENT, email: str = None) -> User:
        n = self._next()
        return self._save(User(
            firebase_uid=f"uid-{n}",
            email=email or f"user{n}@example.com",
            full_name=f"User {n}",
            role=role,
        ))

    def admin(self) -> User:
        return self.user(role=UserRole.ADMIN)

    def course(self, title: str = "Course") -> Course:
        return self._save(Course(code=f"C{self._next()}", title=title))

    def discipline(self, course: Course, order: int = 0, title: str = "Discipline") -> Discipline:
        return self._save(Discipline(course_id=course.id, title=title, order=order))

    def lesson(self, discipline: Discipline, order: int = 1, title: str = "Lesson") -> Lesson:
        return self._save(Lesson(discipline_id=discipline.id, title=title, order=order))

    def quiz(self, course: Course, answers=(0, 2, 1, 3)) -> Quiz:
        questions = [
            Question(position=i, text=f"Question {i + 1}", options=["a", "b", "c", "d"], answer=answer)
            for i, answer in enumerate(answers)
        ]
        return self._save(Quiz(course_id=course.id, code=f"Q{self._next()}", title="Quiz", questions=questions))

    def enroll(self, user: User, course: Course) -> Enrollment:
        return self._save(Enrollment(user_id=user.id, course_id=course.id, completed_time=0))


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite://",
        UPLOADS_DIR=str(tmp_path / "uploads"),
        CREATE_TABLES_ON_STARTUP=True,
        GOOGLE_APPLICATION_CREDENTIALS=None,
        CORS_ALLOWED_ORIGINS_STR="http://testserver",
    )


@pytest.fixture
def app(settings, clock):
    app = create_app(settings)
    app.state.clock = clock
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # Entering the client runs startup: tables and upload folders
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(client, app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    return Seed(db)


@pytest.fixture
def login(app):
    """Authenticates subsequent requests as the given user."""
    def _login(user: User):
        user_id = user.id

        def _current_user(db: Session = Depends(get_db)) -> User:
            return db.get(User, user_id)

        app.dependency_overrides[get_current_user] = _current_user
        return user
    return _login
