def test_room_names_are_unique_per_school(client):
    assert client.post("/api/rooms", json={"name": "Hall A", "capacity": 40}).status_code == 201

    duplicate = client.post("/api/rooms", json={"name": "Hall A", "capacity": 20})
    other_school = client.post("/api/rooms", json={"name": "Hall A", "capacity": 20}, headers={"X-School-Id": "2"})

    assert duplicate.status_code == 409
    assert other_school.status_code == 201
    assert [item["name"] for item in client.get("/api/rooms").json()] == ["Hall A"]


def test_room_geometry_must_cover_capacity(client):
    response = client.post("/api/rooms", json={"name": "Lab", "capacity": 30, "rows_count": 4, "seats_per_row": 5})

    assert response.status_code == 422


def test_room_update_and_delete(client):
    room_id = client.post("/api/rooms", json={"name": "Hall A", "capacity": 40}).json()["id"]
    client.post("/api/rooms", json={"name": "Hall B", "capacity": 40})

    clash = client.put(f"/api/rooms/{room_id}", json={"name": "Hall B"})
    renamed = client.put(f"/api/rooms/{room_id}", json={"name": "Hall C", "rows_count": 8})

    assert clash.status_code == 409
    assert renamed.json()["name"] == "Hall C"
    assert renamed.json()["rows_count"] == 8
    assert client.delete(f"/api/rooms/{room_id}").status_code == 200
    assert client.delete(f"/api/rooms/{room_id}").status_code == 404


def test_teacher_crud_and_availability_upsert(client):
    teacher_id = client.post("/api/teachers", json={"name": "Nila", "subject": "Physics"}).json()["id"]

    client.post(f"/api/teachers/{teacher_id}/availability", json={"availability_date": "2026-03-02"})
    updated = client.post(
        f"/api/teachers/{teacher_id}/availability",
        json={"availability_date": "2026-03-02", "is_available": True, "reason": "  "},
    )

    assert updated.status_code == 200
    assert updated.json()["is_available"] is True
    assert updated.json()["reason"] is None
    assert len(client.get(f"/api/teachers/{teacher_id}/availability").json()) == 1

    deactivated = client.put(f"/api/teachers/{teacher_id}", json={"is_active": False})
    assert deactivated.json()["is_active"] is False
    assert client.get("/api/teachers", params={"active_only": True}).json() == []
    assert client.delete(f"/api/teachers/{teacher_id}").status_code == 200


def test_teacher_with_duties_cannot_be_deleted(client):
    exam_id = client.post("/api/exams", json={"name": "Finals"}).json()["id"]
    schedule_id = client.post(
        "/api/exam-schedules",
        json={
            "exam_id": exam_id,
            "subject": "Art",
            "exam_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "11:00",
        },
    ).json()["id"]
    teacher_id = client.post("/api/teachers", json={"name": "Omar"}).json()["id"]
    client.post(
        f"/api/exam-schedules/{schedule_id}/duties",
        json={
            "teacher_id": teacher_id,
            "room_number": "Hall A",
            "duty_date": "2026-03-02",
            "start_time": "10:00",
            "end_time": "11:00",
        },
    )

    assert client.delete(f"/api/teachers/{teacher_id}").status_code == 409


def test_invalid_teacher_email_is_rejected(client):
    response = client.post("/api/teachers", json={"name": "Nila", "email": "not-an-email"})

    assert response.status_code == 422


def test_student_bulk_import_and_filters(client):
    students = [
        {"name": f"Student {index}", "student_code": f"S-{index}", "class_name": cls, "roll_number": str(index)}
        for index, cls in enumerate(("9-A", "9-B", "9-A"), start=1)
    ]

    created = client.post("/api/students/bulk", json={"students": students})
    duplicate_codes = client.post("/api/students/bulk", json={"students": [students[0], students[0]]})

    assert created.status_code == 201
    assert duplicate_codes.status_code == 400
    assert len(client.get("/api/students", params={"class_name": "9-A"}).json()) == 2
    assert client.get("/api/students", headers={"X-School-Id": "3"}).json() == []


def test_student_update_and_delete(client):
    student_id = client.post(
        "/api/students",
        json={"name": "Tara", "student_code": "S-9", "class_name": "8-B", "roll_number": "9"},
    ).json()["id"]

    updated = client.put(
        f"/api/students/{student_id}",
        json={"is_special_needs": True, "special_needs_note": "Front row"},
    )

    assert updated.json()["is_special_needs"] is True
    assert updated.json()["special_needs_note"] == "Front row"
    assert client.delete(f"/api/students/{student_id}").status_code == 200
    assert client.get("/api/students").json() == []
