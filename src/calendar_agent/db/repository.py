"""
Calendar Repository

All reads and writes against the calendar tables go through this class:
- Event types, events, attendees and reminders CRUD
- find_overlapping: the interval read used by conflict detection

Each method runs in its own session and returns pydantic records.
Storage errors (sqlalchemy.exc.SQLAlchemyError) are not caught here.
"""

import logging
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.orm import sessionmaker

from calendar_agent.constants import ATTENDEE_STATUSES
from calendar_agent.db.database import session_scope
from calendar_agent.db.models import Attendee, Event, EventType, Reminder
from calendar_agent.dto import (
    AttendeeRecord,
    EventDetails,
    EventRecord,
    EventSummary,
    EventTypeRecord,
    ReminderRecord,
)
from calendar_agent.utils.datetime_utils import to_naive_utc

logger = logging.getLogger(__name__)

_UNSET = object()


def _utcnow() -> datetime:
    return to_naive_utc(datetime.now(pytz.UTC))


def _check_status(status: str) -> str:
    if status not in ATTENDEE_STATUSES:
        raise ValueError(f"Invalid attendee status '{status}'. Expected one of: {', '.join(ATTENDEE_STATUSES)}")
    return status


class CalendarRepository:
    """SQLAlchemy-backed storage for the calendar schema."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # ===================================================================
    # CONFLICT DETECTION READ
    # ===================================================================

    def find_overlapping(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_event_id: Optional[int] = None,
    ) -> List[EventSummary]:
        """
        Find stored events whose [start, end] range touches or crosses the candidate range.

        An event overlaps when event.end_time >= start_time and
        event.start_time <= end_time, so an event ending exactly at the
        candidate start (or starting exactly at its end) is reported.

        Args:
            start_time: Candidate start (naive UTC)
            end_time: Candidate end (naive UTC); not required to follow start_time
            exclude_event_id: Event ID removed from the result regardless of overlap

        Returns:
            Overlapping events ordered by start time then ID
        """
        if end_time < start_time:
            logger.warning(f"Inverted candidate range {start_time} > {end_time}; evaluating literally")

        with session_scope(self.session_factory) as session:
            query = session.query(Event).filter(
                Event.end_time >= start_time,
                Event.start_time <= end_time,
            )
            if exclude_event_id is not None:
                query = query.filter(Event.id != exclude_event_id)
            rows = query.order_by(Event.start_time, Event.id).all()
            return [EventSummary.model_validate(row) for row in rows]

    # ===================================================================
    # EVENT TYPES
    # ===================================================================

    def create_event_type(self, name: str, color: str, description: Optional[str] = None) -> EventTypeRecord:
        with session_scope(self.session_factory) as session:
            event_type = EventType(name=name, color=color, description=description)
            session.add(event_type)
            session.flush()
            logger.info(f"Created event type {event_type.id}: {name}")
            return EventTypeRecord.model_validate(event_type)

    def list_event_types(self) -> List[EventTypeRecord]:
        with session_scope(self.session_factory) as session:
            rows = session.query(EventType).order_by(EventType.name).all()
            return [EventTypeRecord.model_validate(row) for row in rows]

    # ===================================================================
    # EVENTS
    # ===================================================================

    def create_event(
        self,
        title: str,
        start_time: datetime,
        end_time: datetime,
        event_type_id: int,
        description: Optional[str] = None,
        location: Optional[str] = None,
        is_all_day: bool = False,
        is_recurring: bool = False,
        recurrence_rule: Optional[str] = None,
    ) -> EventRecord:
        with session_scope(self.session_factory) as session:
            event = Event(
                title=title,
                description=description,
                start_time=start_time,
                end_time=end_time,
                location=location,
                event_type_id=event_type_id,
                is_all_day=is_all_day,
                is_recurring=is_recurring,
                recurrence_rule=recurrence_rule,
            )
            session.add(event)
            session.flush()
            logger.info(f"Created event {event.id}: {title}")
            return EventRecord.model_validate(event)

    def get_event(self, event_id: int) -> Optional[EventDetails]:
        with session_scope(self.session_factory) as session:
            event = session.get(Event, event_id)
            if event is None:
                return None
            return EventDetails(
                event=EventRecord.model_validate(event),
                event_type_name=event.event_type.name if event.event_type else None,
                attendees=[AttendeeRecord.model_validate(a) for a in event.attendees],
            )

    def list_events(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        event_type_id: Optional[int] = None,
    ) -> List[EventRecord]:
        """List events starting at or after start_date and ending at or before end_date."""
        with session_scope(self.session_factory) as session:
            query = session.query(Event)
            if start_date is not None:
                query = query.filter(Event.start_time >= start_date)
            if end_date is not None:
                query = query.filter(Event.end_time <= end_date)
            if event_type_id is not None:
                query = query.filter(Event.event_type_id == event_type_id)
            rows = query.order_by(Event.start_time, Event.id).all()
            return [EventRecord.model_validate(row) for row in rows]

    def update_event(
        self,
        event_id: int,
        title: Optional[str] = None,
        description=_UNSET,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        location=_UNSET,
    ) -> Optional[EventRecord]:
        """
        Update an event in place.

        Empty title/start/end leave the stored value alone; description and
        location are replaced whenever they are passed, including by None.
        """
        with session_scope(self.session_factory) as session:
            event = session.get(Event, event_id)
            if event is None:
                return None
            if title:
                event.title = title
            if description is not _UNSET:
                event.description = description
            if start_time:
                event.start_time = start_time
            if end_time:
                event.end_time = end_time
            if location is not _UNSET:
                event.location = location
            event.updated_at = _utcnow()
            session.flush()
            logger.info(f"Updated event {event_id}")
            return EventRecord.model_validate(event)

    def delete_event(self, event_id: int) -> bool:
        with session_scope(self.session_factory) as session:
            event = session.get(Event, event_id)
            if event is None:
                return False
            session.delete(event)
            logger.info(f"Deleted event {event_id}")
            return True

    # ===================================================================
    # ATTENDEES
    # ===================================================================

    def add_attendee(
        self,
        event_id: int,
        name: str,
        email: Optional[str] = None,
        status: Optional[str] = None,
    ) -> AttendeeRecord:
        with session_scope(self.session_factory) as session:
            attendee = Attendee(
                event_id=event_id,
                name=name,
                email=email,
                status=_check_status(status or "pending"),
            )
            session.add(attendee)
            session.flush()
            logger.info(f"Added attendee {attendee.id} to event {event_id}")
            return AttendeeRecord.model_validate(attendee)

    def update_attendee_status(
        self,
        attendee_id: int,
        status: str,
        notes: Optional[str] = None,
    ) -> Optional[AttendeeRecord]:
        with session_scope(self.session_factory) as session:
            attendee = session.get(Attendee, attendee_id)
            if attendee is None:
                return None
            attendee.status = _check_status(status)
            attendee.response_at = _utcnow()
            if notes is not None:
                attendee.notes = notes
            session.flush()
            return AttendeeRecord.model_validate(attendee)

    def remove_attendee(self, attendee_id: int) -> bool:
        with session_scope(self.session_factory) as session:
            attendee = session.get(Attendee, attendee_id)
            if attendee is None:
                return False
            session.delete(attendee)
            return True

    def list_event_attendees(self, event_id: int) -> List[AttendeeRecord]:
        with session_scope(self.session_factory) as session:
            rows = session.query(Attendee).filter(Attendee.event_id == event_id).order_by(Attendee.id).all()
            return [AttendeeRecord.model_validate(row) for row in rows]

    # ===================================================================
    # REMINDERS
    # ===================================================================

    def create_reminder(self, event_id: int, reminder_time: datetime) -> ReminderRecord:
        with session_scope(self.session_factory) as session:
            reminder = Reminder(event_id=event_id, reminder_time=reminder_time, sent=False)
            session.add(reminder)
            session.flush()
            logger.info(f"Created reminder {reminder.id} for event {event_id}")
            return ReminderRecord.model_validate(reminder)

    def list_reminders(self, event_id: Optional[int] = None, include_sent: bool = False) -> List[ReminderRecord]:
        """List reminders ordered by reminder time; sent reminders are hidden unless include_sent."""
        with session_scope(self.session_factory) as session:
            query = session.query(Reminder, Event.title).outerjoin(Event, Reminder.event_id == Event.id)
            if event_id is not None:
                query = query.filter(Reminder.event_id == event_id)
            if not include_sent:
                query = query.filter(Reminder.sent.is_(False))
            rows = query.order_by(Reminder.reminder_time, Reminder.id).all()
            return [
                ReminderRecord(
                    id=reminder.id,
                    event_id=reminder.event_id,
                    reminder_time=reminder.reminder_time,
                    sent=reminder.sent,
                    event_title=title,
                )
                for reminder, title in rows
            ]

    def mark_reminder_sent(self, reminder_id: int) -> bool:
        with session_scope(self.session_factory) as session:
            reminder = session.get(Reminder, reminder_id)
            if reminder is None:
                return False
            reminder.sent = True
            return True
