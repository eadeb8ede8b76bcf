from unittest.mock import MagicMock

from sqlmodel import select

from roombook.core.celery_utils import safe_celery_delay
from roombook.models import Notification, User, UserRole
from roombook.services.bookings import approve, create_booking
from roombook.services.events import EventKind
from roombook.services.notifications import record_event_notifications
from roombook.tasks.notifications import deliver_booking_event_task


def _dumped(sink, kind):
    return sink.of_kind(kind)[0].model_dump(mode="json")


def test_created_event_goes_to_active_admins(session, admin, employee, make_payload, sink, fixed_now):
    session.add(User(email="retired@example.com", role=UserRole.ADMIN, is_active=False))
    session.commit()
    create_booking(session, make_payload(), employee, sink=sink, now=fixed_now)

    notifications = record_event_notifications(session, _dumped(sink, EventKind.BOOKING_CREATED))
    session.commit()

    assert [n.user_id for n in notifications] == [admin.id]
    assert notifications[0].title == "New Booking"
    assert "Erin Employee booked Boardroom on 2024-01-01 (10:00-11:00)" in notifications[0].message


def test_owner_hears_about_auto_rejection(session, employee, other_employee, make_payload, sink, fixed_now):
    winner = create_booking(session, make_payload(meeting_type="external"), employee, now=fixed_now)
    create_booking(session, make_payload(meeting_type="external"), other_employee, now=fixed_now)
    approve(session, winner.id, sink=sink, now=fixed_now)

    notifications = record_event_notifications(session, _dumped(sink, EventKind.BOOKING_AUTO_REJECTED))

    assert [n.user_id for n in notifications] == [other_employee.id]
    assert notifications[0].title == "Booking Auto-Rejected"


def test_calendar_sync_is_not_shown_in_app(session, employee, make_payload, sink, fixed_now):
    create_booking(session, make_payload(), employee, sink=sink, now=fixed_now)
    assert record_event_notifications(session, _dumped(sink, EventKind.CALENDAR_SYNC_REQUESTED)) == []


def test_delivery_task_writes_notifications(session, employee, make_payload, sink, fixed_now):
    booking = create_booking(session, make_payload(), employee, sink=sink, now=fixed_now)

    result = deliver_booking_event_task.apply(
        args=(_dumped(sink, EventKind.BOOKING_APPROVED),)
    ).get()

    assert result["kind"] == EventKind.BOOKING_APPROVED
    stored = session.exec(
        select(Notification).where(Notification.user_id == employee.id)
    ).all()
    assert len(stored) == 1
    assert stored[0].booking_id == booking.id
    assert stored[0].title == "Booking Approved"


def test_broker_failure_does_not_propagate():
    task = MagicMock()
    task.name = "deliver"
    task.delay.side_effect = ConnectionError("broker down")

    assert safe_celery_delay(task, {"kind": "booking.created"}) is None
