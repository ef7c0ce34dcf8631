from sqlalchemy import func, select

from examdesk.models.activity_log import ActivityLog
from examdesk.models.invigilation import InvigilationDuty
from examdesk.models.seating import SeatingArrangement


def _exam_with_schedules(client, name="Term 1", start_date="2026-03-02"):
    exam = client.post("/api/exams", json={"name": name, "start_date": start_date, "end_date": "2026-03-06"}).json()
    for offset, subject in enumerate(("Mathematics", "Science")):
        client.post(
            "/api/exam-schedules",
            json={
                "exam_id": exam["id"],
                "subject": subject,
                "exam_date": f"2026-03-0{2 + offset}",
                "start_time": "10:00",
                "end_time": "13:00",
                "class_name": "10-A",
                "full_marks": 80,
                "pass_marks": 28,
            },
        )
    return exam


def test_exam_period_must_be_ordered(client):
    response = client.post("/api/exams", json={"name": "Bad", "start_date": "2026-03-05", "end_date": "2026-03-01"})

    assert response.status_code == 422


def test_clone_copies_schedules_and_shifts_dates(client):
    exam = _exam_with_schedules(client)

    response = client.post(
        f"/api/exams/{exam['id']}/clone",
        json={"name": "Term 2", "start_date": "2026-09-07", "end_date": "2026-09-11"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["schedules_copied"] == 2
    assert body["exam"]["name"] == "Term 2"
    cloned = client.get("/api/exam-schedules", params={"exam_id": body["exam"]["id"]}).json()
    assert [(item["subject"], item["exam_date"]) for item in cloned] == [
        ("Mathematics", "2026-09-07"),
        ("Science", "2026-09-08"),
    ]
    assert all(item["full_marks"] == 80 and item["pass_marks"] == 28 for item in cloned)


def test_clone_without_start_date_keeps_dates(client):
    exam = _exam_with_schedules(client)

    body = client.post(f"/api/exams/{exam['id']}/clone", json={"name": "Retest"}).json()

    cloned = client.get("/api/exam-schedules", params={"exam_id": body["exam"]["id"]}).json()
    assert [item["exam_date"] for item in cloned] == ["2026-03-02", "2026-03-03"]
    # Copies sit on the same slots as the source entries for the same class.
    assert cloned[0]["conflicts"][0]["conflict_type"] == "time_overlap"


def test_bulk_delete_removes_dependents(client, db_session):
    exam = _exam_with_schedules(client)
    keep = _exam_with_schedules(client, name="Term 2")
    schedules = client.get("/api/exam-schedules", params={"exam_id": exam["id"]}).json()
    client.post("/api/teachers", json={"name": "Lena"})
    client.post("/api/rooms", json={"name": "Hall A", "capacity": 10})
    client.post(
        "/api/students",
        json={"name": "Ira", "student_code": "S-1", "class_name": "10-A", "roll_number": "1"},
    )
    client.post(
        f"/api/exam-schedules/{schedules[0]['id']}/duties/auto-generate",
        json={"ratio": {"chief_ratio": 1, "assistant_ratio": 1}},
    )
    client.post(f"/api/exam-schedules/{schedules[0]['id']}/seating/auto-generate", json={})

    response = client.post("/api/exams/bulk-delete", json={"exam_ids": [exam["id"]]})

    assert response.status_code == 200
    assert response.json() == {"deleted": 1, "schedules_deleted": 2}
    assert [item["id"] for item in client.get("/api/exams").json()] == [keep["id"]]
    assert db_session.execute(select(func.count(InvigilationDuty.id))).scalar_one() == 0
    assert db_session.execute(select(func.count(SeatingArrangement.id))).scalar_one() == 0
    logged = db_session.execute(select(ActivityLog).where(ActivityLog.action == "exams.bulk_delete")).scalar_one()
    assert logged.actor == "exam-office"
    assert logged.details["exam_ids"] == [exam["id"]]


def test_bulk_delete_is_all_or_nothing(client):
    exam = _exam_with_schedules(client)

    response = client.post("/api/exams/bulk-delete", json={"exam_ids": [exam["id"], 4040]})

    assert response.status_code == 404
    assert len(client.get("/api/exams").json()) == 1


def test_delete_single_exam(client):
    exam = _exam_with_schedules(client)

    assert client.delete(f"/api/exams/{exam['id']}").status_code == 200
    assert client.get("/api/exams").json() == []
    assert client.get("/api/exam-schedules").json() == []
