from datetime import date
from uuid import uuid4

from roombook.core.errors import ConflictError, NotFoundError, ValidationError
from roombook.models import Room
from roombook.services.bookings import create_booking
from roombook.services.slots import (
    SlotViolationCode,
    overlaps,
    parse_clock,
    validate_slot,
)

BOOKING_DATE = date(2024, 1, 1)
TODAY = date(2023, 12, 31)


def _check(session, room, start, end, **kwargs):
    options = {"room_id": room.id, "booking_date": BOOKING_DATE, "today": TODAY}
    options.update(kwargs)
    return validate_slot(session, start=start, end=end, **options)


def test_overlap_is_half_open():
    ten, eleven, noon = parse_clock("10:00"), parse_clock("11:00"), parse_clock("12:00")
    assert overlaps(ten, eleven, parse_clock("10:30"), noon)
    assert not overlaps(ten, eleven, eleven, noon)
    assert not overlaps(eleven, noon, ten, eleven)


def test_clean_slot_passes(session, room):
    assert _check(session, room, "10:00", "11:00", persons=10) is None


def test_malformed_times(session, room):
    violation = _check(session, room, "25:00", "26:00")
    assert violation.code == SlotViolationCode.INVALID_TIME
    assert violation.message == "Invalid times."


def test_end_must_follow_start(session, room):
    violation = _check(session, room, "11:00", "10:00")
    assert violation.code == SlotViolationCode.END_BEFORE_START
    assert _check(session, room, "10:00", "10:00").code == SlotViolationCode.END_BEFORE_START


def test_office_hours(session, room):
    violation = _check(session, room, "08:30", "09:30")
    assert violation.code == SlotViolationCode.OUTSIDE_OFFICE_HOURS
    assert violation.message == "Office hours: 09:00 to 20:00 only."
    assert _check(session, room, "19:00", "20:30").code == SlotViolationCode.OUTSIDE_OFFICE_HOURS
    assert _check(session, room, "19:00", "20:00") is None


def test_minimum_slot(session, room):
    violation = _check(session, room, "10:00", "10:10")
    assert violation.code == SlotViolationCode.SLOT_TOO_SHORT
    assert violation.message == "Minimum 15 minutes."
    assert _check(session, room, "10:00", "10:15") is None


def test_past_dates_rejected(session, room):
    violation = _check(session, room, "10:00", "11:00", booking_date=date(2023, 12, 30))
    assert violation.code == SlotViolationCode.DATE_IN_PAST


def test_rules_run_in_order(session, room):
    # Outside office hours wins over the past date and the unknown room
    violation = validate_slot(
        session,
        room_id=uuid4(),
        booking_date=date(2020, 1, 1),
        start="07:00",
        end="08:00",
        today=TODAY,
    )
    assert violation.code == SlotViolationCode.OUTSIDE_OFFICE_HOURS


def test_unknown_room(session):
    violation = validate_slot(
        session,
        room_id=uuid4(),
        booking_date=BOOKING_DATE,
        start="10:00",
        end="11:00",
        today=TODAY,
    )
    assert violation.code == SlotViolationCode.ROOM_NOT_FOUND
    assert isinstance(violation.to_error(), NotFoundError)


def test_blocked_room(session, room):
    room.is_blocked = True
    session.add(room)
    session.commit()

    violation = _check(session, room, "10:00", "11:00")
    assert violation.code == SlotViolationCode.ROOM_BLOCKED
    assert isinstance(violation.to_error(), ValidationError)


def test_room_max_duration(session):
    short_room = Room(name="Phone booth", capacity=2, max_duration_minutes=60)
    session.add(short_room)
    session.commit()

    violation = _check(session, short_room, "10:00", "11:30")
    assert violation.code == SlotViolationCode.EXCEEDS_MAX_DURATION
    assert violation.message == "Exceeds max 1h for this room."


def test_capacity(session, room):
    violation = _check(session, room, "10:00", "11:00", persons=12)
    assert violation.code == SlotViolationCode.EXCEEDS_CAPACITY
    assert violation.message == "Exceeds room capacity (10)."


def test_conflict_names_owner_and_range(session, room, employee, make_payload, fixed_now):
    create_booking(session, make_payload(), employee, now=fixed_now)

    violation = _check(session, room, "10:30", "11:30")
    assert violation.code == SlotViolationCode.SLOT_CONFLICT
    assert "(10:00-11:00)" in violation.message
    assert "Erin Employee" in violation.message
    assert violation.details["owner"] == "Erin Employee"
    assert isinstance(violation.to_error(), ConflictError)

    # Touching the end of the approved booking is fine
    assert _check(session, room, "11:00", "12:00") is None


def test_pending_bookings_do_not_block(session, room, employee, make_payload, fixed_now):
    create_booking(
        session, make_payload(meeting_type="external"), employee, now=fixed_now
    )
    assert _check(session, room, "10:00", "11:00") is None


def test_exclude_id_skips_the_booking_itself(session, room, employee, make_payload, fixed_now):
    booking = create_booking(session, make_payload(), employee, now=fixed_now)
    assert _check(session, room, "10:00", "11:00", exclude_id=booking.id) is None
