from sqlalchemy import select

from examdesk.models.activity_log import ActivityLog
from examdesk.services.generation_lock import generation_guard


def _setup(client, teachers=8, rooms=2):
    exam_id = client.post("/api/exams", json={"name": "Finals"}).json()["id"]
    schedule = client.post(
        "/api/exam-schedules",
        json={
            "exam_id": exam_id,
            "subject": "Mathematics",
            "exam_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "13:00",
        },
    ).json()
    teacher_ids = [
        client.post("/api/teachers", json={"name": f"Teacher {index}"}).json()["id"] for index in range(teachers)
    ]
    room_ids = [
        client.post("/api/rooms", json={"name": f"Hall {index}", "capacity": 30}).json()["id"] for index in range(rooms)
    ]
    return schedule, teacher_ids, room_ids


def test_auto_generate_builds_roster(client):
    schedule, teacher_ids, _ = _setup(client)

    response = client.post(f"/api/exam-schedules/{schedule['id']}/duties/auto-generate", json={})

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["total_assignments"] == 8
    assert body["stats"]["chief_count"] == 2
    assert body["stats"]["assistant_count"] == 6
    assert body["stats"]["unassigned_count"] == 0
    assert {item["teacher_id"] for item in body["assignments"]} == set(teacher_ids)
    assert all(item["duty_date"] == "2026-03-02" for item in body["assignments"])
    assert all((item["start_time"], item["end_time"]) == ("10:00", "13:00") for item in body["assignments"])

    listed = client.get(f"/api/exam-schedules/{schedule['id']}/duties").json()
    assert len(listed) == 8


def test_regeneration_replaces_previous_roster(client, db_session):
    schedule, _, room_ids = _setup(client)
    url = f"/api/exam-schedules/{schedule['id']}/duties/auto-generate"
    client.post(url, json={})

    second = client.post(url, json={"ratio": {"chief_ratio": 1, "assistant_ratio": 1}, "room_ids": [room_ids[1]]})

    assert second.status_code == 200
    listed = client.get(f"/api/exam-schedules/{schedule['id']}/duties").json()
    assert len(listed) == 2
    assert {item["room_number"] for item in listed} == {"Hall 1"}
    actions = db_session.execute(select(ActivityLog.action)).scalars().all()
    assert actions.count("duties.auto_generate") == 2


def test_shortfall_is_reported_in_stats(client):
    schedule, _, _ = _setup(client, teachers=3, rooms=2)

    response = client.post(f"/api/exam-schedules/{schedule['id']}/duties/auto-generate", json={})

    stats = response.json()["stats"]
    assert response.status_code == 200
    assert stats["total_assignments"] == 3
    assert stats["unassigned_count"] == 5
    assert len(stats["unassigned_slots"]) == 5


def test_no_teachers_returns_scheduler_error_and_keeps_roster(client):
    schedule, teacher_ids, _ = _setup(client)
    url = f"/api/exam-schedules/{schedule['id']}/duties/auto-generate"
    client.post(url, json={})

    response = client.post(url, json={"teacher_ids": []})

    assert response.status_code == 400
    assert "teachers" in response.json()["message"]
    assert len(client.get(f"/api/exam-schedules/{schedule['id']}/duties").json()) == 8


def test_no_rooms_returns_scheduler_error(client):
    schedule, _, _ = _setup(client, rooms=0)

    response = client.post(f"/api/exam-schedules/{schedule['id']}/duties/auto-generate", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "No rooms available for invigilation duty"


def test_unavailable_teacher_is_not_assigned(client):
    schedule, teacher_ids, _ = _setup(client, teachers=5, rooms=1)
    client.post(
        f"/api/teachers/{teacher_ids[0]}/availability",
        json={"availability_date": "2026-03-02", "is_available": False},
    )

    body = client.post(f"/api/exam-schedules/{schedule['id']}/duties/auto-generate", json={}).json()

    assert teacher_ids[0] not in {item["teacher_id"] for item in body["assignments"]}
    assert body["stats"]["total_assignments"] == 4


def test_duties_on_other_schedules_block_overlapping_windows(client):
    schedule, teacher_ids, _ = _setup(client, teachers=2, rooms=1)
    other = client.post(
        "/api/exam-schedules",
        json={
            "exam_id": schedule["exam_id"],
            "subject": "Science",
            "exam_date": "2026-03-02",
            "start_time": "11:00",
            "end_time": "12:00",
        },
    ).json()
    client.post(
        f"/api/exam-schedules/{other['id']}/duties",
        json={
            "teacher_id": teacher_ids[0],
            "room_number": "Lab",
            "duty_type": "chief",
            "duty_date": "2026-03-02",
            "start_time": "11:00",
            "end_time": "12:00",
        },
    )

    body = client.post(
        f"/api/exam-schedules/{schedule['id']}/duties/auto-generate",
        json={"ratio": {"chief_ratio": 1, "assistant_ratio": 1}},
    ).json()

    assert [item["teacher_id"] for item in body["assignments"]] == [teacher_ids[1]]
    assert body["stats"]["unassigned_count"] == 1


def test_concurrent_generation_is_rejected(client):
    schedule, _, _ = _setup(client)

    with generation_guard(kind="duty", school_id=1, exam_schedule_id=schedule["id"]):
        response = client.post(f"/api/exam-schedules/{schedule['id']}/duties/auto-generate", json={})

    assert response.status_code == 409
    assert response.json()["details"]["exam_schedule_id"] == schedule["id"]


def test_manual_duty_update_and_delete(client):
    schedule, teacher_ids, _ = _setup(client, teachers=2, rooms=1)
    created = client.post(
        f"/api/exam-schedules/{schedule['id']}/duties",
        json={
            "teacher_id": teacher_ids[0],
            "room_number": "Hall 0",
            "duty_type": "supervisor",
            "duty_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "13:00",
        },
    )
    assert created.status_code == 201
    duty_id = created.json()["id"]

    updated = client.put(f"/api/duties/{duty_id}", json={"teacher_id": teacher_ids[1], "notes": "Front gate"})
    assert updated.status_code == 200
    assert updated.json()["teacher_id"] == teacher_ids[1]
    assert updated.json()["notes"] == "Front gate"

    assert client.delete(f"/api/duties/{duty_id}").status_code == 200
    assert client.get(f"/api/exam-schedules/{schedule['id']}/duties").json() == []


def test_unknown_schedule_returns_404(client):
    response = client.post("/api/exam-schedules/999/duties/auto-generate", json={})

    assert response.status_code == 404


def test_room_slot_accepts_only_one_chief(client):
    schedule, teacher_ids, _ = _setup(client, teachers=3, rooms=1)
    url = f"/api/exam-schedules/{schedule['id']}/duties"

    def duty(teacher_id, duty_type, start_time="10:00", end_time="13:00"):
        return {
            "teacher_id": teacher_id,
            "room_number": "Hall 0",
            "duty_type": duty_type,
            "duty_date": "2026-03-02",
            "start_time": start_time,
            "end_time": end_time,
        }

    first = client.post(url, json=duty(teacher_ids[0], "chief"))
    second = client.post(url, json=duty(teacher_ids[1], "chief", start_time="12:00"))
    later = client.post(url, json=duty(teacher_ids[1], "chief", start_time="13:00", end_time="14:00"))
    assistant = client.post(url, json=duty(teacher_ids[2], "assistant")).json()

    promoted = client.put(f"/api/duties/{assistant['id']}", json={"duty_type": "chief"})
    moved = client.put(f"/api/duties/{assistant['id']}", json={"duty_type": "chief", "room_number": "Hall 9"})
    renamed = client.put(f"/api/duties/{first.json()['id']}", json={"notes": "Keys at office"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "Room already has a chief invigilator for this slot"
    assert later.status_code == 201
    assert promoted.status_code == 409
    assert moved.status_code == 200
    assert renamed.status_code == 200
    chiefs = [
        item
        for item in client.get(url).json()
        if item["duty_type"] == "chief" and item["room_number"] == "Hall 0" and item["start_time"] == "10:00"
    ]
    assert len(chiefs) == 1


def test_auto_generate_skips_teachers_of_the_sitting_class(client):
    exam_id = client.post("/api/exams", json={"name": "Finals"}).json()["id"]
    schedule = client.post(
        "/api/exam-schedules",
        json={
            "exam_id": exam_id,
            "subject": "Mathematics",
            "exam_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "13:00",
            "class_name": "10-A",
        },
    ).json()
    own = client.post("/api/teachers", json={"name": "Class teacher", "class_name": "10-A"}).json()
    others = [
        client.post("/api/teachers", json={"name": f"Teacher {index}", "class_name": "9-B"}).json()["id"]
        for index in range(2)
    ]
    client.post("/api/rooms", json={"name": "Hall 0", "capacity": 30})
    url = f"/api/exam-schedules/{schedule['id']}/duties/auto-generate"
    ratio = {"chief_ratio": 1, "assistant_ratio": 1}

    avoided = client.post(url, json={"ratio": ratio}).json()
    allowed = client.post(url, json={"ratio": ratio, "avoid_own_class": False}).json()

    assert own["class_name"] == "10-A"
    assert [item["teacher_id"] for item in avoided["assignments"]] == others
    assert own["id"] in [item["teacher_id"] for item in allowed["assignments"]]
