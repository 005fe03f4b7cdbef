"""
Progress aggregation: explicit completion, listing and the dashboard.
"""

import pytest

from coursehub.models import CompletionStatus, Enrollment, Progress
from coursehub.services.progress_aggregator import (
    LessonPlacement,
    ProgressAggregator,
    SqlLessonCourseResolver,
    completion_percentage,
)


class StubResolver:
    def __init__(self, placements):
        self.placements = placements
        self.calls = []

    def resolve(self, lesson_id):
        self.calls.append(lesson_id)
        return self.placements.get(lesson_id)


class TestCompletionPercentage:
    def test_zero_lessons_is_zero(self):
        assert completion_percentage(0, 0) == 0.0

    def test_rounds_to_two_decimals(self):
        assert completion_percentage(1, 3) == 33.33
        assert completion_percentage(2, 2) == 100.0


class TestResolver:
    def test_resolves_course_through_discipline(self, db, seed):
        course = seed.course()
        discipline = seed.discipline(course)
        lesson = seed.lesson(discipline)
        placement = SqlLessonCourseResolver(db).resolve(lesson.id)
        assert placement == LessonPlacement(lesson_id=lesson.id, discipline_id=discipline.id, course_id=course.id)

    def test_unknown_lesson(self, db):
        assert SqlLessonCourseResolver(db).resolve(12345) is None


class TestRecordLessonTime:
    def test_uses_injected_resolver(self, db, seed):
        student = seed.user()
        course = seed.course()
        lesson = seed.lesson(seed.discipline(course))
        seed.enroll(student, course)
        resolver = StubResolver({lesson.id: LessonPlacement(lesson.id, None, course.id)})

        aggregator = ProgressAggregator(db, resolver)
        aggregator.record_lesson_time(student.id, lesson.id, 40, CompletionStatus.COMPLETED)
        aggregator.record_lesson_time(student.id, lesson.id, 2)
        db.commit()

        db.expire_all()
        progress = db.query(Progress).filter_by(user_id=student.id, lesson_id=lesson.id).one()
        assert progress.watch_time == 42
        assert progress.completed is False
        assert db.query(Enrollment).filter_by(user_id=student.id).one().completed_time == 42
        assert resolver.calls == [lesson.id, lesson.id]

    def test_lesson_without_course_skips_enrollment(self, db, seed):
        student = seed.user()
        course = seed.course()
        lesson = seed.lesson(seed.discipline(course))
        seed.enroll(student, course)
        resolver = StubResolver({lesson.id: LessonPlacement(lesson.id, None, None)})

        ProgressAggregator(db, resolver).record_lesson_time(student.id, lesson.id, 9)
        db.commit()

        db.expire_all()
        assert db.query(Progress).filter_by(user_id=student.id).one().watch_time == 9
        assert db.query(Enrollment).filter_by(user_id=student.id).one().completed_time == 0


class TestMarkCompletion:
    def test_latest_signal_wins(self, client, db, seed, login):
        student = login(seed.user())
        lesson = seed.lesson(seed.discipline(seed.course()))

        response = client.put(f"/api/v1/student/progress/{lesson.id}", json={"completed": True})
        assert response.status_code == 200
        assert response.json()["completed"] is True
        assert response.json()["watch_time"] == 0

        response = client.put(f"/api/v1/student/progress/{lesson.id}", json={"completed": False})
        assert response.json()["completed"] is False

        db.expire_all()
        assert db.query(Progress).filter_by(user_id=student.id).count() == 1

    def test_does_not_touch_watch_time_or_course_time(self, client, db, seed, login, clock):
        student = login(seed.user())
        course = seed.course()
        lesson = seed.lesson(seed.discipline(course))
        seed.enroll(student, course)

        activity = client.post("/api/v1/student/activity/start", json={"type": "LESSON", "resource_id": lesson.id}).json()
        clock.advance(15)
        client.post(f"/api/v1/student/activity/{activity['id']}/end")

        response = client.put(f"/api/v1/student/progress/{lesson.id}", json={"completed": True})
        assert response.json()["watch_time"] == 15

        db.expire_all()
        assert db.query(Enrollment).filter_by(user_id=student.id).one().completed_time == 15

    def test_unknown_lesson_is_not_found(self, client, seed, login):
        login(seed.user())
        response = client.put("/api/v1/student/progress/999", json={"completed": True})
        assert response.status_code == 404

    def test_missing_body_field_is_rejected(self, client, seed, login):
        login(seed.user())
        lesson = seed.lesson(seed.discipline(seed.course()))
        assert client.put(f"/api/v1/student/progress/{lesson.id}", json={}).status_code == 422


class TestListProgress:
    def test_includes_titles_and_only_own_rows(self, client, seed, login):
        other = login(seed.user())
        course = seed.course(title="Algebra")
        lesson = seed.lesson(seed.discipline(course, title="Equations"), title="Linear")
        client.put(f"/api/v1/student/progress/{lesson.id}", json={"completed": True})

        login(seed.user())
        assert client.get("/api/v1/student/progress").json() == []

        login(other)
        rows = client.get("/api/v1/student/progress").json()
        assert len(rows) == 1
        assert rows[0]["lesson_title"] == "Linear"
        assert rows[0]["discipline_title"] == "Equations"
        assert rows[0]["course_title"] == "Algebra"


class TestDashboard:
    @pytest.fixture
    def course_tree(self, seed, login):
        student = login(seed.user())
        course = seed.course(title="Physics")
        first = seed.discipline(course, order=0, title="Mechanics")
        second = seed.discipline(course, order=1, title="Optics")
        lessons = [seed.lesson(first, order=i) for i in range(1, 4)]
        seed.lesson(second)
        seed.enroll(student, course)
        return student, course, lessons

    def test_percentages_per_course_and_discipline(self, client, course_tree):
        _, _, lessons = course_tree
        client.put(f"/api/v1/student/progress/{lessons[0].id}", json={"completed": True})
        client.put(f"/api/v1/student/progress/{lessons[1].id}", json={"completed": True})

        dashboard = client.get("/api/v1/student/dashboard").json()
        course = dashboard["courses"][0]
        assert course["title"] == "Physics"
        assert course["completion_percentage"] == 50.0
        mechanics, optics = course["disciplines"]
        assert mechanics["title"] == "Mechanics"
        assert mechanics["completion_percentage"] == 66.67
        assert optics["completion_percentage"] == 0.0
        assert mechanics["lessons"][0]["progress"]["completed"] is True
        assert mechanics["lessons"][2]["progress"] is None

    def test_course_without_lessons_is_zero_percent(self, client, seed, login):
        student = login(seed.user())
        seed.enroll(student, seed.course())
        dashboard = client.get("/api/v1/student/dashboard").json()
        assert dashboard["courses"][0]["completion_percentage"] == 0.0
        assert dashboard["quiz_results"] == []

    def test_lists_quizzes_with_best_score(self, client, seed, course_tree):
        _, course, _ = course_tree
        quiz = seed.quiz(course)
        client.post(f"/api/v1/student/quiz/{quiz.id}/submit", json={"answers": [0, 0, 0, 0]})
        client.post(f"/api/v1/student/quiz/{quiz.id}/submit", json={"answers": [0, 2, 0, 0]})

        dashboard = client.get("/api/v1/student/dashboard").json()
        [dash_quiz] = dashboard["courses"][0]["quizzes"]
        assert dash_quiz["best_score"] == 50.0
        assert dash_quiz["attempts"] == 2
        assert [(r["score"], r["answers"]) for r in dash_quiz["results"]] == [(50.0, [0, 2, 0, 0]), (25.0, [0, 0, 0, 0])]
        assert [r["score"] for r in dashboard["quiz_results"]] == [50.0, 25.0]
        assert dashboard["quiz_results"][0]["course_title"] == "Physics"

    def test_only_enrolled_courses(self, client, seed, course_tree):
        seed.course(title="Not enrolled")
        dashboard = client.get("/api/v1/student/dashboard").json()
        assert [c["title"] for c in dashboard["courses"]] == ["Physics"]

    def test_quiz_results_are_the_users_own(self, client, seed, login, course_tree):
        student, course, _ = course_tree
        quiz = seed.quiz(course)
        login(seed.user())
        client.post(f"/api/v1/student/quiz/{quiz.id}/submit", json={"answers": [0, 2, 1, 3]})

        login(student)
        [dash_quiz] = client.get("/api/v1/student/dashboard").json()["courses"][0]["quizzes"]
        assert dash_quiz["results"] == []
        assert dash_quiz["best_score"] is None
