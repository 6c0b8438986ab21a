"""
Calendar Data Models

Records returned by the repository and the request/result models of the
conflict detector. Repository methods always return these models, never
live ORM objects, so results stay valid after the session closes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from calendar_agent.constants import DEFAULT_TIMEZONE
from calendar_agent.utils.datetime_utils import parse_iso_datetime


class EventTypeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    description: Optional[str] = None


class EventRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    event_type_id: int
    is_all_day: bool = False
    is_recurring: bool = False
    recurrence_rule: Optional[str] = None


class AttendeeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    name: str
    email: Optional[str] = None
    status: str = "pending"
    response_at: Optional[datetime] = None
    notes: Optional[str] = None


class ReminderRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    reminder_time: datetime
    sent: bool = False
    event_title: Optional[str] = None


class EventDetails(BaseModel):
    """Event joined with its type name and attendees."""
    event: EventRecord
    event_type_name: Optional[str] = None
    attendees: List[AttendeeRecord] = []


class EventSummary(BaseModel):
    """The slice of a stored event the conflict detector reads."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None


class ConflictCheckRequest(BaseModel):
    """Candidate time range to check. start_time <= end_time is not enforced."""
    start_time: datetime
    end_time: datetime
    exclude_event_id: Optional[int] = None

    @classmethod
    def from_tool_args(cls, args: Dict[str, Any], timezone=DEFAULT_TIMEZONE) -> "ConflictCheckRequest":
        """
        Build a request from check_event_conflicts tool-call arguments.

        Raises:
            ValueError: If a time is missing or not valid ISO 8601
            KeyError: If start_time or end_time is absent
        """
        exclude_event_id = args.get("exclude_event_id")
        return cls(
            start_time=parse_iso_datetime(args["start_time"], timezone),
            end_time=parse_iso_datetime(args["end_time"], timezone),
            exclude_event_id=int(exclude_event_id) if exclude_event_id is not None else None,
        )


class ConflictCheckResult(BaseModel):
    conflicts: List[EventSummary] = []
    has_conflicts: bool = False
    message: str = ""
