"""
Lesson administration with file uploads stored through the content store.
"""

import os

import pytest

from coursehub.models import Content, ContentType, Lesson


@pytest.fixture
def discipline(seed, login):
    login(seed.admin())
    return seed.discipline(seed.course())


def stored_path(settings, url):
    # /uploads/<folder>/<filename>
    return os.path.join(settings.UPLOADS_DIR, *url.split("/")[2:])


class TestCreateLesson:
    def test_with_video(self, client, settings, discipline):
        response = client.post(
            f"/api/v1/disciplines/{discipline.id}/lessons/",
            data={"title": "Intro", "description": "First steps", "order": "2"},
            files={"video": ("intro.mp4", b"x" * 64, "video/mp4")},
        )
        assert response.status_code == 201, response.text
        lesson = response.json()
        assert lesson["order"] == 2
        content = lesson["content"]
        assert content["type"] == "VIDEO"
        assert content["size"] == 64
        assert content["mime_type"] == "video/mp4"
        assert content["url"] == f"/uploads/videos/{content['filename']}"
        assert content["filename"].endswith(".mp4")
        assert os.path.exists(stored_path(settings, content["url"]))

    def test_uploaded_file_can_be_streamed(self, client, discipline):
        lesson = client.post(
            f"/api/v1/disciplines/{discipline.id}/lessons/",
            data={"title": "Slides"},
            files={"pdf": ("slides.pdf", b"%PDF-1.4 test", "application/pdf")},
        ).json()
        response = client.get(lesson["content"]["url"])
        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 test"

    def test_video_wins_when_several_files_are_sent(self, client, discipline):
        lesson = client.post(
            f"/api/v1/disciplines/{discipline.id}/lessons/",
            data={"title": "Mixed"},
            files={
                "image": ("cover.png", b"png", "image/png"),
                "video": ("clip.mp4", b"mp4", "video/mp4"),
            },
        ).json()
        assert lesson["content"]["type"] == "VIDEO"

    def test_without_file(self, client, discipline):
        response = client.post(f"/api/v1/disciplines/{discipline.id}/lessons/", data={"title": "Reading"})
        assert response.status_code == 201
        assert response.json()["content"] is None

    def test_wrong_extension_is_rejected(self, client, discipline):
        response = client.post(
            f"/api/v1/disciplines/{discipline.id}/lessons/",
            data={"title": "Bad"},
            files={"video": ("clip.avi", b"avi", "video/x-msvideo")},
        )
        assert response.status_code == 400

    def test_unknown_discipline(self, client, discipline):
        response = client.post("/api/v1/disciplines/999/lessons/", data={"title": "Lost"})
        assert response.status_code == 404

    def test_students_cannot_create(self, client, seed, login, discipline):
        login(seed.user())
        response = client.post(f"/api/v1/disciplines/{discipline.id}/lessons/", data={"title": "Nope"})
        assert response.status_code == 403


class TestReplaceAndRemoveContent:
    @pytest.fixture
    def lesson(self, client, discipline):
        return client.post(
            f"/api/v1/disciplines/{discipline.id}/lessons/",
            data={"title": "Intro"},
            files={"video": ("intro.mp4", b"old", "video/mp4")},
        ).json()

    def test_replacing_deletes_previous_record_and_file(self, client, db, settings, discipline, lesson):
        old = lesson["content"]
        response = client.put(
            f"/api/v1/disciplines/{discipline.id}/lessons/{lesson['id']}",
            data={"title": "Intro v2"},
            files={"pdf": ("notes.pdf", b"new", "application/pdf")},
        )
        assert response.status_code == 200, response.text
        updated = response.json()
        assert updated["title"] == "Intro v2"
        assert updated["content"]["type"] == "PDF"

        assert not os.path.exists(stored_path(settings, old["url"]))
        assert os.path.exists(stored_path(settings, updated["content"]["url"]))
        db.expire_all()
        assert db.get(Content, old["id"]) is None

    def test_update_without_file_keeps_content(self, client, discipline, lesson):
        response = client.put(f"/api/v1/disciplines/{discipline.id}/lessons/{lesson['id']}", data={"order": "5"})
        assert response.json()["order"] == 5
        assert response.json()["content"]["id"] == lesson["content"]["id"]

    def test_remove_by_type(self, client, settings, discipline, lesson):
        url = f"/api/v1/disciplines/{discipline.id}/lessons/{lesson['id']}/content"
        assert client.delete(f"{url}/PDF").status_code == 400

        response = client.delete(f"{url}/VIDEO")
        assert response.status_code == 200
        assert response.json()["content"] is None
        assert not os.path.exists(stored_path(settings, lesson["content"]["url"]))

        assert client.delete(f"{url}/VIDEO").status_code == 404

    def test_delete_lesson_removes_content(self, client, db, settings, discipline, lesson):
        response = client.delete(f"/api/v1/disciplines/{discipline.id}/lessons/{lesson['id']}")
        assert response.status_code == 204
        assert not os.path.exists(stored_path(settings, lesson["content"]["url"]))
        db.expire_all()
        assert db.get(Lesson, lesson["id"]) is None
        assert db.query(Content).count() == 0

    def test_list_for_students(self, client, seed, login, discipline, lesson):
        login(seed.user())
        lessons = client.get(f"/api/v1/disciplines/{discipline.id}/lessons/").json()
        assert [item["id"] for item in lessons] == [lesson["id"]]
        assert lessons[0]["content"]["type"] == ContentType.VIDEO.value
