from urllib.parse import urlparse

from schooldesk.core.security import create_access_token
from schooldesk.db.models import Attendance, User


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["database"]["ok"] is True


def test_auth_required(client, school_class):
    assert client.get(f"/api/classes/{school_class.id}/students").status_code == 401

    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get(f"/api/classes/{school_class.id}/students", headers=bad).status_code == 401


def test_admin_allowed_other_roles_not(client, db, school_class):
    admin = User(username="boss", full_name="Head Admin", role="admin")
    db.add(admin)
    db.commit()
    headers = {"Authorization": f"Bearer {create_access_token(data={'sub': str(admin.id)})}"}
    assert client.get(f"/api/classes/{school_class.id}/students", headers=headers).status_code == 200

    unknown = {"Authorization": f"Bearer {create_access_token(data={'sub': '9999'})}"}
    assert client.get(f"/api/classes/{school_class.id}/students", headers=unknown).status_code == 401


def test_students_by_class(client, auth_headers, school_class, students):
    response = client.get(f"/api/classes/{school_class.id}/students", headers=auth_headers)

    assert response.status_code == 200
    names = [s["name"] for s in response.json()]
    assert names[:2] == ["Aiko", "Ben"]
    assert "Emi" not in names

    assert client.get("/api/classes/999/students", headers=auth_headers).status_code == 404


class TestAttendanceApi:
    def test_upsert_normalizes_date_and_updates(self, client, db, auth_headers, school_class, students):
        payload = {"student_id": students[0].id, "class_id": school_class.id, "date": "02/02/2026", "status": "O"}

        first = client.post("/api/attendance", json=payload, headers=auth_headers)
        second = client.post("/api/attendance", json={**payload, "status": "X"}, headers=auth_headers)

        assert first.status_code == 200
        assert first.json()["date"] == "2026-02-02"
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["status"] == "X"
        assert db.query(Attendance).count() == 1

    def test_upsert_validation(self, client, auth_headers, school_class, students):
        base = {"student_id": students[0].id, "class_id": school_class.id, "date": "2026-02-02"}
        assert client.post("/api/attendance", json={**base, "status": "maybe"}, headers=auth_headers).status_code == 400
        assert client.post("/api/attendance", json={**base, "date": "soon", "status": "O"}, headers=auth_headers).status_code == 400
        # Неактивный ученик
        inactive = {**base, "student_id": students[4].id, "status": "O"}
        assert client.post("/api/attendance", json=inactive, headers=auth_headers).status_code == 400

    def test_matrix(self, client, auth_headers, school_class, students, add_attendance):
        add_attendance(students[1], "2026-02-03", "/")

        response = client.get(
            "/api/attendance/matrix",
            params={"class_id": school_class.id, "start_date": "2026-02-01", "end_date": "2026-02-05"},
            headers=auth_headers,
        )

        body = response.json()
        assert response.status_code == 200
        assert len(body["dates"]) == 5
        assert body["attendance_map"] == {f"{students[1].id}-2026-02-03": "/"}
        assert body["class_data"]["teacher_name"] == "Sarah Miller"

    def test_matrix_bad_date(self, client, auth_headers, school_class):
        response = client.get(
            "/api/attendance/matrix",
            params={"class_id": school_class.id, "start_date": "2026-02-31", "end_date": "2026-03-05"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_bulk_and_move(self, client, db, auth_headers, school_class, students):
        bulk = client.post(
            "/api/attendance/bulk",
            json={"class_id": school_class.id, "date": "2026-02-02", "status": "O"},
            headers=auth_headers,
        )
        assert bulk.json()["updated"] == 4

        moved = client.post(
            "/api/attendance/move",
            json={"class_id": school_class.id, "from_date": "2026-02-02", "to_date": "2026-02-03"},
            headers=auth_headers,
        )
        assert moved.status_code == 200
        assert moved.json()["moved"] == 4
        assert {r.date for r in db.query(Attendance).all()} == {"2026-02-03"}

        listed = client.get(
            "/api/attendance", params={"class_id": school_class.id, "start_date": "2026-02-03"}, headers=auth_headers
        )
        assert len(listed.json()) == 4

    def test_update_and_delete(self, client, auth_headers, school_class, students, add_attendance):
        record = add_attendance(students[0], "2026-02-02", "O")

        updated = client.put(f"/api/attendance/{record.id}", json={"status": "/", "notes": "5 min"}, headers=auth_headers)
        assert updated.json()["status"] == "/"

        assert client.delete(f"/api/attendance/{record.id}", headers=auth_headers).status_code == 200
        assert client.delete(f"/api/attendance/{record.id}", headers=auth_headers).status_code == 404


class TestCommentSheetsApi:
    def test_create_conflict_and_lookup(self, client, auth_headers, school_class, teacher):
        payload = {"class_id": school_class.id, "teacher_id": teacher.id, "date": "2026-02-02", "target_topic": "Colors"}

        created = client.post("/api/comment-sheets", json=payload, headers=auth_headers)
        duplicate = client.post("/api/comment-sheets", json=payload, headers=auth_headers)

        assert created.status_code == 201
        assert created.json()["teacher_name"] == "Sarah Miller"
        assert duplicate.status_code == 409
        assert duplicate.json()["existing_id"] == created.json()["id"]

        found = client.get(f"/api/comment-sheets/by-date/{school_class.id}/2026-02-02", headers=auth_headers)
        assert found.json()["id"] == created.json()["id"]

    def test_update_list_delete(self, client, auth_headers, school_class, teacher, add_sheet):
        sheet = add_sheet(school_class, teacher, "2026-02-02", target_topic="Colors")

        updated = client.put(
            f"/api/comment-sheets/{sheet.id}",
            json={"teacher_id": teacher.id, "target_topic": "Shapes", "comments": "Good"},
            headers=auth_headers,
        )
        assert updated.json()["target_topic"] == "Shapes"

        listed = client.get("/api/comment-sheets", params={"class_id": school_class.id}, headers=auth_headers)
        assert [s["id"] for s in listed.json()] == [sheet.id]

        assert client.delete(f"/api/comment-sheets/{sheet.id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/comment-sheets/{sheet.id}", headers=auth_headers).status_code == 404


class TestMonthlyReportsApi:
    def test_auto_generate_is_idempotent(self, client, auth_headers, school_class, teacher, add_sheet):
        add_sheet(school_class, teacher, "2026-02-02", target_topic="Colors")
        payload = {"class_id": school_class.id, "year": 2026, "month": 2}

        first = client.post("/api/monthly-reports/auto-generate", json=payload, headers=auth_headers)
        second = client.post("/api/monthly-reports/auto-generate", json=payload, headers=auth_headers)

        assert first.status_code == 201
        assert first.json()["already_exists"] is False
        assert first.json()["created_by_name"] == "Sarah Miller"
        assert second.status_code == 200
        assert second.json()["already_exists"] is True
        assert second.json()["id"] == first.json()["id"]

    def test_auto_generate_without_lessons(self, client, auth_headers, school_class):
        response = client.post(
            "/api/monthly-reports/auto-generate",
            json={"class_id": school_class.id, "year": 2026, "month": 2},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_auto_generate_year_out_of_range(self, client, auth_headers, school_class):
        response = client.post(
            "/api/monthly-reports/auto-generate",
            json={"class_id": school_class.id, "year": 10000, "month": 2},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_preview_summary_months(self, client, auth_headers, school_class, teacher, add_sheet):
        add_sheet(school_class, teacher, "2026-01-12")
        add_sheet(school_class, teacher, "2026-02-02", target_topic="Colors")
        add_sheet(school_class, teacher, "2026-02-09", target_topic="Animals")

        preview = client.post(
            "/api/monthly-reports/preview-generate",
            json={"class_id": school_class.id, "start_date": "2026-02-01", "end_date": "2026-02-28"},
            headers=auth_headers,
        )
        assert [w["target"] for w in preview.json()["weeks"]] == ["Colors", "Animals"]

        summary = client.get(
            f"/api/monthly-reports/summary/{school_class.id}", params={"year": 2026, "month": 2}, headers=auth_headers
        )
        assert summary.json()["lesson_summary"]["total_lessons"] == 2

        months = client.get(f"/api/monthly-reports/available-months/{school_class.id}", headers=auth_headers)
        assert months.json() == [
            {"year": 2026, "month": 2, "lesson_count": 2},
            {"year": 2026, "month": 1, "lesson_count": 1},
        ]

    def test_crud_and_pdf(self, client, auth_headers, school_class, teacher, add_sheet):
        add_sheet(school_class, teacher, "2026-02-02", target_topic="Colors")
        report = client.post(
            "/api/monthly-reports/auto-generate",
            json={"class_id": school_class.id, "year": 2026, "month": 2},
            headers=auth_headers,
        ).json()

        updated = client.put(
            f"/api/monthly-reports/{report['id']}",
            json={"monthly_theme": "Spring", "status": "published", "weeks": [{"week_number": 1, "target": "Flowers"}]},
            headers=auth_headers,
        )
        assert updated.json()["status"] == "published"
        assert updated.json()["weeks"][0]["target"] == "Flowers"

        listed = client.get("/api/monthly-reports", params={"status": "published"}, headers=auth_headers)
        assert [r["id"] for r in listed.json()] == [report["id"]]

        assert client.get(f"/api/monthly-reports/{report['id']}/pdf", headers=auth_headers).status_code == 404
        generated = client.post(f"/api/monthly-reports/{report['id']}/generate-pdf", headers=auth_headers)
        assert generated.status_code == 200

        url = urlparse(client.get(f"/api/monthly-reports/{report['id']}/pdf", headers=auth_headers).json()["download_url"])
        download = client.get(f"{url.path}?{url.query}")
        assert download.status_code == 200
        assert download.content.startswith(b"%PDF")

        assert client.delete(f"/api/monthly-reports/{report['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/monthly-reports/{report['id']}", headers=auth_headers).status_code == 404

    def test_manual_create(self, client, auth_headers, school_class):
        payload = {
            "class_id": school_class.id, "year": 2026, "month": 3,
            "weeks": [{"week_number": 1, "lesson_date": "2026-03-02", "target": "Food"}],
        }
        first = client.post("/api/monthly-reports", json=payload, headers=auth_headers)
        second = client.post("/api/monthly-reports", json=payload, headers=auth_headers)

        assert first.status_code == 201
        assert first.json()["start_date"] == "2026-03-01"
        assert first.json()["end_date"] == "2026-03-31"
        assert second.status_code == 200
        assert second.json()["already_exists"] is True


class TestPdfApi:
    def test_attendance_grid_and_history(self, client, auth_headers, school_class, students):
        response = client.post(
            f"/api/pdf/attendance-grid/{school_class.id}",
            json={"start_date": "2026-02-01", "end_date": "2026-02-28"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        key = response.json()["key"]

        history = client.get("/api/pdf/history", params={"class_id": school_class.id}, headers=auth_headers)
        assert [h["storage_key"] for h in history.json()] == [key]

    def test_download_rejects_bad_token(self, client, auth_headers, school_class, students):
        key = client.post(f"/api/pdf/attendance-grid/{school_class.id}", headers=auth_headers).json()["key"]

        response = client.get(f"/api/pdf/files/{key}", params={"token": "forged"})
        assert response.status_code == 403
