from datetime import date, time
from uuid import uuid4

import pytest

from roombook.core.errors import NotFoundError, StateError
from roombook.models import Room
from roombook.services.bookings import create_booking
from roombook.services.rooms import delete_room, room_availability


def test_hourly_availability(session, room, employee, other_employee, make_payload, fixed_now):
    create_booking(session, make_payload(), employee, now=fixed_now)
    create_booking(
        session,
        make_payload(meeting_type="external", start_time="13:30", end_time="14:30"),
        other_employee,
        now=fixed_now,
    )

    slots, bookings = room_availability(session, room.id, date(2024, 1, 1))

    assert len(slots) == 11
    assert slots[0].start == time(9, 0)
    assert slots[-1].end == time(20, 0)
    by_hour = {slot.start.hour: slot for slot in slots}
    assert by_hour[10].free is False
    assert by_hour[9].free is True
    assert by_hour[11].free is True
    assert by_hour[13].free is True
    assert by_hour[13].pending_requests == 1
    assert by_hour[14].pending_requests == 1
    assert len(bookings) == 2


def test_availability_for_unknown_room(session):
    with pytest.raises(NotFoundError):
        room_availability(session, uuid4(), date(2024, 1, 1))


def test_room_with_bookings_cannot_be_deleted(session, room, employee, make_payload, fixed_now):
    create_booking(session, make_payload(), employee, now=fixed_now)

    with pytest.raises(StateError) as exc_info:
        delete_room(session, room.id)
    assert exc_info.value.code == "room_in_use"


def test_unused_room_is_deleted(session):
    spare = Room(name="Spare")
    session.add(spare)
    session.commit()

    delete_room(session, spare.id)

    assert session.get(Room, spare.id) is None
