"""
Activity sessions: opening, closing and the time they feed into progress.
"""

from datetime import datetime, timedelta, timezone

import pytest

from coursehub.models import Activity, Enrollment, Progress
from coursehub.services.activity_tracker import elapsed_seconds


def start(client, resource_id, activity_type="LESSON"):
    response = client.post("/api/v1/student/activity/start", json={"type": activity_type, "resource_id": resource_id})
    assert response.status_code == 201, response.text
    return response.json()


def end(client, activity_id, **body):
    return client.post(f"/api/v1/student/activity/{activity_id}/end", json=body or None)


@pytest.fixture
def enrolled_lesson(seed, login):
    student = login(seed.user())
    course = seed.course()
    lesson = seed.lesson(seed.discipline(course))
    seed.enroll(student, course)
    return student, course, lesson


def progress_row(db, user_id, lesson_id):
    db.expire_all()
    return db.query(Progress).filter_by(user_id=user_id, lesson_id=lesson_id).one_or_none()


def enrollment_row(db, user_id, course_id):
    db.expire_all()
    return db.query(Enrollment).filter_by(user_id=user_id, course_id=course_id).one()


class TestElapsedSeconds:
    def test_floors_fractional_seconds(self):
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert elapsed_seconds(t0, t0 + timedelta(seconds=2.9)) == 2

    def test_never_negative(self):
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert elapsed_seconds(t0, t0 - timedelta(seconds=5)) == 0

    def test_naive_values_are_treated_as_utc(self):
        naive = datetime(2024, 1, 1, 12, 0, 0)
        aware = datetime(2024, 1, 1, 12, 0, 7, tzinfo=timezone.utc)
        assert elapsed_seconds(naive, aware) == 7


class TestStartActivity:
    def test_opens_session_without_end_time(self, client, enrolled_lesson, clock):
        _, _, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        assert activity["type"] == "LESSON"
        assert activity["resource_id"] == lesson.id
        assert activity["end_time"] is None
        assert activity["time_spent"] is None

    def test_rejects_unknown_type(self, client, enrolled_lesson):
        response = client.post("/api/v1/student/activity/start", json={"type": "VIDEO", "resource_id": 1})
        assert response.status_code == 422


class TestEndActivity:
    def test_watch_time_is_sum_of_sessions(self, client, db, clock, enrolled_lesson):
        student, course, lesson = enrolled_lesson
        for seconds in (5, 3, 10):
            activity = start(client, lesson.id)
            clock.advance(seconds)
            response = end(client, activity["id"])
            assert response.status_code == 200
            assert response.json()["time_spent"] == seconds

        assert progress_row(db, student.id, lesson.id).watch_time == 18
        assert enrollment_row(db, student.id, course.id).completed_time == 18

    def test_interleaved_sessions_accumulate(self, client, db, clock, enrolled_lesson):
        student, course, lesson = enrolled_lesson
        first = start(client, lesson.id)
        clock.advance(4)
        second = start(client, lesson.id)
        clock.advance(6)
        assert end(client, second["id"]).json()["time_spent"] == 6
        assert end(client, first["id"]).json()["time_spent"] == 10

        assert progress_row(db, student.id, lesson.id).watch_time == 16
        assert enrollment_row(db, student.id, course.id).completed_time == 16

    def test_fractional_seconds_are_floored(self, client, db, clock, enrolled_lesson):
        student, _, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        clock.advance(2.9)
        assert end(client, activity["id"]).json()["time_spent"] == 2
        assert progress_row(db, student.id, lesson.id).watch_time == 2

    def test_completed_flag_follows_latest_close(self, client, db, clock, enrolled_lesson):
        student, _, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        clock.advance(1)
        end(client, activity["id"], completion_status="completed")
        assert progress_row(db, student.id, lesson.id).completed is True

        activity = start(client, lesson.id)
        clock.advance(1)
        end(client, activity["id"], completion_status="in_progress")
        assert progress_row(db, student.id, lesson.id).completed is False

    def test_any_other_status_counts_as_not_completed(self, client, db, clock, enrolled_lesson):
        student, course, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        clock.advance(1)
        end(client, activity["id"], completion_status="completed")

        activity = start(client, lesson.id)
        clock.advance(5)
        response = end(client, activity["id"], completion_status="incomplete")
        assert response.status_code == 200, response.text
        assert response.json()["end_time"] is not None

        row = progress_row(db, student.id, lesson.id)
        assert row.completed is False
        assert row.watch_time == 6
        assert enrollment_row(db, student.id, course.id).completed_time == 6

    def test_second_end_is_conflict_without_double_counting(self, client, db, clock, enrolled_lesson):
        student, course, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        clock.advance(30)
        assert end(client, activity["id"]).status_code == 200

        clock.advance(30)
        response = end(client, activity["id"])
        assert response.status_code == 409

        assert progress_row(db, student.id, lesson.id).watch_time == 30
        assert enrollment_row(db, student.id, course.id).completed_time == 30

    def test_other_users_activity_is_forbidden_and_untouched(self, client, db, seed, login, clock, enrolled_lesson):
        owner, course, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        clock.advance(12)

        login(seed.user())
        response = end(client, activity["id"])
        assert response.status_code == 403

        db.expire_all()
        assert db.get(Activity, activity["id"]).end_time is None
        assert progress_row(db, owner.id, lesson.id) is None
        assert enrollment_row(db, owner.id, course.id).completed_time == 0

    def test_unknown_activity_is_not_found(self, client, enrolled_lesson):
        assert end(client, 9999).status_code == 404

    def test_unknown_lesson_still_closes(self, client, db, clock, enrolled_lesson):
        student, _, _ = enrolled_lesson
        activity = start(client, 4242)
        clock.advance(8)
        response = end(client, activity["id"])
        assert response.status_code == 200
        assert response.json()["time_spent"] == 8

        db.expire_all()
        assert db.query(Progress).filter_by(user_id=student.id).count() == 0

    def test_not_enrolled_records_progress_only(self, client, db, seed, login, clock):
        student = login(seed.user())
        lesson = seed.lesson(seed.discipline(seed.course()))
        activity = start(client, lesson.id)
        clock.advance(5)
        assert end(client, activity["id"]).status_code == 200

        assert progress_row(db, student.id, lesson.id).watch_time == 5
        db.expire_all()
        assert db.query(Enrollment).filter_by(user_id=student.id).count() == 0

    def test_quiz_sessions_do_not_touch_progress(self, client, db, seed, clock, enrolled_lesson):
        student, course, _ = enrolled_lesson
        quiz = seed.quiz(course)
        activity = start(client, quiz.id, activity_type="QUIZ")
        clock.advance(20)
        assert end(client, activity["id"]).status_code == 200

        db.expire_all()
        assert db.query(Progress).filter_by(user_id=student.id).count() == 0
        assert enrollment_row(db, student.id, course.id).completed_time == 0

    def test_clock_going_backwards_gives_zero(self, client, clock, enrolled_lesson):
        _, _, lesson = enrolled_lesson
        activity = start(client, lesson.id)
        clock.advance(-10)
        body = end(client, activity["id"]).json()
        assert body["time_spent"] == 0


class TestTotalTrackedTime:
    def test_sums_closed_sessions_of_all_types(self, client, seed, clock, enrolled_lesson):
        _, course, lesson = enrolled_lesson
        quiz = seed.quiz(course)

        lesson_activity = start(client, lesson.id)
        clock.advance(7)
        end(client, lesson_activity["id"])

        quiz_activity = start(client, quiz.id, activity_type="QUIZ")
        clock.advance(5)
        end(client, quiz_activity["id"])

        start(client, lesson.id)  # left open
        clock.advance(100)

        response = client.get("/api/v1/student/activity/time")
        assert response.status_code == 200
        assert response.json() == {"total_time": 12}

    def test_zero_without_activity(self, client, seed, login):
        login(seed.user())
        assert client.get("/api/v1/student/activity/time").json() == {"total_time": 0}
