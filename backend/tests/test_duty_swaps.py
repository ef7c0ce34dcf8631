def _duty_setup(client):
    exam_id = client.post("/api/exams", json={"name": "Finals"}).json()["id"]
    schedule_id = client.post(
        "/api/exam-schedules",
        json={
            "exam_id": exam_id,
            "subject": "Mathematics",
            "exam_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "13:00",
        },
    ).json()["id"]
    teachers = [client.post("/api/teachers", json={"name": name}).json()["id"] for name in ("Ravi", "Meena", "Joel")]
    duty = client.post(
        f"/api/exam-schedules/{schedule_id}/duties",
        json={
            "teacher_id": teachers[0],
            "room_number": "Hall A",
            "duty_type": "chief",
            "duty_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "13:00",
        },
    ).json()
    return schedule_id, teachers, duty


def test_approved_swap_reassigns_duty(client):
    _, teachers, duty = _duty_setup(client)
    swap = client.post(
        "/api/duty-swaps",
        json={"duty_id": duty["id"], "to_teacher_id": teachers[1], "reason": "Family event"},
    )
    assert swap.status_code == 201
    assert swap.json()["status"] == "pending"
    assert swap.json()["from_teacher_id"] == teachers[0]

    decided = client.put(f"/api/duty-swaps/{swap.json()['id']}/status", json={"status": "approved"})

    assert decided.status_code == 200
    assert decided.json()["status"] == "approved"
    assert decided.json()["approved_by"] == "exam-office"
    assert decided.json()["decided_at"] is not None
    duties = client.get(f"/api/exam-schedules/{duty['exam_schedule_id']}/duties").json()
    assert duties[0]["teacher_id"] == teachers[1]


def test_rejected_swap_leaves_duty_untouched(client):
    schedule_id, teachers, duty = _duty_setup(client)
    swap_id = client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[2]}).json()["id"]

    decided = client.put(
        f"/api/duty-swaps/{swap_id}/status",
        json={"status": "rejected", "approved_by": "Principal", "decision_note": "No cover"},
    )

    assert decided.json()["status"] == "rejected"
    assert decided.json()["approved_by"] == "Principal"
    assert client.get(f"/api/exam-schedules/{schedule_id}/duties").json()[0]["teacher_id"] == teachers[0]


def test_swap_decides_only_once(client):
    _, teachers, duty = _duty_setup(client)
    swap_id = client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[1]}).json()["id"]
    client.put(f"/api/duty-swaps/{swap_id}/status", json={"status": "rejected"})

    again = client.put(f"/api/duty-swaps/{swap_id}/status", json={"status": "approved"})

    assert again.status_code == 409


def test_second_pending_swap_for_duty_is_rejected(client):
    _, teachers, duty = _duty_setup(client)
    client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[1]})

    duplicate = client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[2]})

    assert duplicate.status_code == 409


def test_swap_to_current_holder_is_rejected(client):
    _, teachers, duty = _duty_setup(client)

    response = client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[0]})

    assert response.status_code == 400


def test_approval_blocked_when_target_is_busy(client):
    schedule_id, teachers, duty = _duty_setup(client)
    client.post(
        f"/api/exam-schedules/{schedule_id}/duties",
        json={
            "teacher_id": teachers[1],
            "room_number": "Hall B",
            "duty_type": "assistant",
            "duty_date": "2026-03-02",
            "start_time": "12:00",
            "end_time": "14:00",
        },
    )
    swap_id = client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[1]}).json()["id"]

    response = client.put(f"/api/duty-swaps/{swap_id}/status", json={"status": "approved"})

    assert response.status_code == 409
    listed = client.get("/api/duty-swaps", params={"status": "pending"}).json()
    assert [item["id"] for item in listed] == [swap_id]


def test_list_filters_by_status(client):
    _, teachers, duty = _duty_setup(client)
    swap_id = client.post("/api/duty-swaps", json={"duty_id": duty["id"], "to_teacher_id": teachers[1]}).json()["id"]
    client.put(f"/api/duty-swaps/{swap_id}/status", json={"status": "approved"})

    assert client.get("/api/duty-swaps", params={"status": "pending"}).json() == []
    assert [item["id"] for item in client.get("/api/duty-swaps", params={"status": "approved"}).json()] == [swap_id]
