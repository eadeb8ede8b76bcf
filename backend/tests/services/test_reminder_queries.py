from datetime import datetime

from roombook.services.bookings import create_booking
from roombook.services.reminders import due_for_reminder, mark_reminder_sent


def test_due_thirty_minutes_ahead(session, employee, make_payload, fixed_now):
    booking = create_booking(session, make_payload(), employee, now=fixed_now)

    assert [b.id for b in due_for_reminder(session, datetime(2024, 1, 1, 9, 30))] == [booking.id]
    assert [b.id for b in due_for_reminder(session, datetime(2024, 1, 1, 9, 31))] == [booking.id]
    assert due_for_reminder(session, datetime(2024, 1, 1, 9, 25)) == []
    assert due_for_reminder(session, datetime(2023, 12, 31, 9, 30)) == []


def test_latch_is_set_once(session, employee, make_payload, fixed_now):
    booking = create_booking(session, make_payload(), employee, now=fixed_now)

    assert mark_reminder_sent(session, booking.id) is True
    assert mark_reminder_sent(session, booking.id) is False
    assert due_for_reminder(session, datetime(2024, 1, 1, 9, 30)) == []


def test_pending_bookings_get_no_reminder(session, employee, make_payload, fixed_now):
    create_booking(session, make_payload(meeting_type="external"), employee, now=fixed_now)
    assert due_for_reminder(session, datetime(2024, 1, 1, 9, 30)) == []


def test_custom_lead(session, employee, make_payload, fixed_now):
    booking = create_booking(session, make_payload(), employee, now=fixed_now)
    assert [b.id for b in due_for_reminder(session, datetime(2024, 1, 1, 9, 0), lead_minutes=60)] == [booking.id]
