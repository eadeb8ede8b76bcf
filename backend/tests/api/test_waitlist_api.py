WAITLIST = "/api/v1/waitlist"


def test_join_list_and_leave(act_as, employee, other_employee, room):
    entry = {
        "room_id": str(room.id),
        "date": "2024-01-01",
        "start_time": "10:00",
        "end_time": "11:00",
        "purpose": "Retro",
    }
    client = act_as(employee)

    created = client.post(f"{WAITLIST}/", json=entry)
    assert created.status_code == 201
    assert created.json()["start_time"] == "10:00"
    assert created.json()["notified"] is False

    duplicate = client.post(f"{WAITLIST}/", json=entry)
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "already_waitlisted"

    assert act_as(other_employee).get(f"{WAITLIST}/").json() == []
    assert act_as(other_employee).delete(f"{WAITLIST}/{created.json()['id']}").status_code == 403

    client = act_as(employee)
    assert len(client.get(f"{WAITLIST}/").json()) == 1
    assert client.delete(f"{WAITLIST}/{created.json()['id']}").status_code == 204
    assert client.get(f"{WAITLIST}/").json() == []


def test_cancellation_marks_waiter_notified(act_as, employee, other_employee, room, sink):
    booking = act_as(employee).post(
        "/api/v1/bookings/",
        json={
            "room_id": str(room.id),
            "date": "2024-01-01",
            "start_time": "10:00",
            "end_time": "11:00",
            "purpose": "Planning",
        },
    ).json()["booking"]
    act_as(other_employee).post(
        f"{WAITLIST}/",
        json={"room_id": str(room.id), "date": "2024-01-01", "start_time": "10:00", "end_time": "11:00"},
    )

    act_as(employee).patch(f"/api/v1/bookings/{booking['id']}/cancel")

    entries = act_as(other_employee).get(f"{WAITLIST}/").json()
    assert entries[0]["notified"] is True
    assert "waitlist.slot_available" in sink.kinds()
