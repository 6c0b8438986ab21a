from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from calendar_agent.constants import ATTENDEE_STATUSES
from calendar_agent.db.database import Base


# Meetings, parties, appointments, workshops, etc.
class EventType(Base):
    __tablename__ = "event_types"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    color = Column(String(7), nullable=False)  # hex color code
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    events = relationship("Event", back_populates="event_type")


class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False, index=True)
    location = Column(Text, nullable=True)
    event_type_id = Column(Integer, ForeignKey("event_types.id"), nullable=False)
    is_all_day = Column(Boolean, default=False, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_rule = Column(Text, nullable=True)  # iCalendar RRULE, stored as-is
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    event_type = relationship("EventType", back_populates="events")
    attendees = relationship("Attendee", back_populates="event", cascade="all, delete-orphan")
    reminders = relationship("Reminder", back_populates="event", cascade="all, delete-orphan")


class Attendee(Base):
    __tablename__ = "attendees"
    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    status = Column(Enum(*ATTENDEE_STATUSES, name="attendee_status"), default="pending", nullable=False)
    response_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    event = relationship("Event", back_populates="attendees")


class Reminder(Base):
    __tablename__ = "reminders"
    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    reminder_time = Column(DateTime, nullable=False)
    sent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    event = relationship("Event", back_populates="reminders")
