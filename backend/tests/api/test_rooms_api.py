ROOMS = "/api/v1/rooms"


def test_admin_manages_rooms(act_as, admin):
    client = act_as(admin)

    created = client.post(
        f"{ROOMS}/",
        json={"name": "Aquarium", "capacity": 6, "amenities": ["tv", "whiteboard"]},
    )
    assert created.status_code == 201
    room = created.json()
    assert room["amenities"] == ["tv", "whiteboard"]
    assert room["max_duration_minutes"] == 240
    assert room["is_blocked"] is False

    updated = client.patch(f"{ROOMS}/{room['id']}", json={"capacity": 8})
    assert updated.json()["capacity"] == 8
    assert updated.json()["name"] == "Aquarium"

    blocked = client.patch(f"{ROOMS}/{room['id']}/toggle-block")
    assert blocked.json()["is_blocked"] is True

    assert client.delete(f"{ROOMS}/{room['id']}").status_code == 204
    assert client.get(f"{ROOMS}/{room['id']}").status_code == 404


def test_employees_cannot_change_rooms(act_as, employee, room):
    client = act_as(employee)

    response = client.post(f"{ROOMS}/", json={"name": "Mine"})
    assert response.status_code == 403
    assert response.json()["code"] == "admin_required"
    assert client.patch(f"{ROOMS}/{room.id}/toggle-block").status_code == 403

    rooms = client.get(f"{ROOMS}/").json()
    assert [r["name"] for r in rooms] == ["Boardroom"]


def test_room_in_use_cannot_be_deleted(act_as, admin, employee, room):
    act_as(employee).post(
        "/api/v1/bookings/",
        json={
            "room_id": str(room.id),
            "date": "2024-01-01",
            "start_time": "10:00",
            "end_time": "11:00",
            "purpose": "Planning",
        },
    )

    response = act_as(admin).delete(f"{ROOMS}/{room.id}")

    assert response.status_code == 409
    assert response.json()["code"] == "room_in_use"


def test_availability(act_as, employee, room):
    client = act_as(employee)
    client.post(
        "/api/v1/bookings/",
        json={
            "room_id": str(room.id),
            "date": "2024-01-01",
            "start_time": "10:00",
            "end_time": "11:00",
            "purpose": "Planning",
        },
    )

    response = client.get(f"{ROOMS}/{room.id}/availability", params={"date": "2024-01-01"})

    assert response.status_code == 200
    data = response.json()
    assert data["slots"][0] == {"start": "09:00", "end": "10:00", "free": True, "pending_requests": 0}
    assert data["slots"][1]["free"] is False
    assert len(data["bookings"]) == 1


def test_blocked_rooms_can_be_filtered(act_as, admin, room):
    client = act_as(admin)
    client.patch(f"{ROOMS}/{room.id}/toggle-block")

    assert client.get(f"{ROOMS}/", params={"include_blocked": False}).json() == []


def test_explicit_null_cannot_clear_required_fields(act_as, admin, room):
    client = act_as(admin)

    for field in ("name", "capacity", "max_duration_minutes", "amenities"):
        response = client.patch(f"{ROOMS}/{room.id}", json={field: None})
        assert response.status_code == 422, field

    unchanged = client.get(f"{ROOMS}/{room.id}").json()
    assert unchanged["name"] == "Boardroom"
    assert unchanged["capacity"] == 10

    cleared = client.patch(f"{ROOMS}/{room.id}", json={"location": None})
    assert cleared.status_code == 200
    assert cleared.json()["location"] is None
