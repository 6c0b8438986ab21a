"""
Calendar Agent Tools Module

LangChain tools the model can call. Every tool catches its own failures
and returns an error string instead of raising, so the model sees the
failure as ordinary tool output and can react to it.

Date Format Standards:
- Accepts ISO 8601 (YYYY-MM-DD, YYYY-MM-DDTHH:MM:SS, optional Z or offset)
- Times without an offset are read in the configured timezone; replies show that timezone too
"""

import json
import logging
from typing import List, Optional

from langchain_core.tools import BaseTool, tool

from calendar_agent.conflict.detector import ConflictDetector
from calendar_agent.constants import CONFLICT_CHECK_TOOL, DEFAULT_TIMEZONE
from calendar_agent.db.repository import CalendarRepository
from calendar_agent.dto import ConflictCheckRequest
from calendar_agent.utils.datetime_utils import (
    current_datetime_info,
    format_display_datetime as fmt,
    parse_iso_datetime,
    parse_optional_datetime,
)

# Set up logging
logger = logging.getLogger(__name__)


def build_calendar_tools(
    repository: CalendarRepository,
    detector: ConflictDetector,
    timezone=DEFAULT_TIMEZONE,
) -> List[BaseTool]:
    """
    Build the tool catalog bound to a repository and conflict detector.

    Args:
        repository: Storage for events, event types, attendees and reminders
        detector: Conflict detector shared with the workflow
        timezone: Timezone for naive input times, displayed times and get_current_datetime

    Returns:
        List of tools, conflict check first
    """

    # ============= CONFLICT DETECTION TOOL =============

    @tool(CONFLICT_CHECK_TOOL)
    async def check_event_conflicts(start_time: str, end_time: str, exclude_event_id: Optional[int] = None) -> str:
        """
        Check for conflicting events in a given time range. Use this before creating or updating
        events to avoid scheduling conflicts.

        Args:
            start_time: Event start time (ISO 8601 format)
            end_time: Event end time (ISO 8601 format)
            exclude_event_id: Event ID to exclude from the check (useful when updating an event)
        """
        try:
            request = ConflictCheckRequest.from_tool_args({
                "start_time": start_time,
                "end_time": end_time,
                "exclude_event_id": exclude_event_id,
            }, timezone)
            result = await detector.check_conflicts(request)
            return result.message
        except Exception as e:
            return f"Error checking conflicts: {str(e)}"

    # ============= EVENT TYPE TOOLS =============

    @tool
    def create_event_type(name: str, color: str, description: Optional[str] = None) -> str:
        """
        Create a new event type (meeting, party, workshop, etc.)

        Args:
            name: Event type name (e.g., "Meeting", "Party", "Workshop")
            color: Hex color code (e.g., "#FF5733")
            description: Description of the event type
        """
        try:
            event_type = repository.create_event_type(name, color, description)
            return f"Event type created: {event_type.name} ({event_type.color}) (ID: {event_type.id})"
        except Exception as e:
            return f"Error creating event type: {str(e)}"

    @tool
    def list_event_types() -> str:
        """List all available event types"""
        try:
            types = repository.list_event_types()
            if not types:
                return "No event types found"
            return "\n".join(
                f"{t.id}: {t.name} ({t.color})" + (f" - {t.description}" if t.description else "")
                for t in types
            )
        except Exception as e:
            return f"Error listing event types: {str(e)}"

    # ============= EVENT TOOLS =============

    @tool
    def create_event(
        title: str,
        start_time: str,
        end_time: str,
        event_type_id: int,
        description: Optional[str] = None,
        location: Optional[str] = None,
        is_all_day: Optional[bool] = None,
        is_recurring: Optional[bool] = None,
        recurrence_rule: Optional[str] = None,
    ) -> str:
        """
        Create a new calendar event

        Args:
            title: Event title
            start_time: Event start time (ISO 8601 format)
            end_time: Event end time (ISO 8601 format)
            event_type_id: Event type ID
            description: Event description
            location: Event location
            is_all_day: Whether this is an all-day event
            is_recurring: Whether this event recurs
            recurrence_rule: Recurrence rule in iCalendar RRULE format
        """
        try:
            event = repository.create_event(
                title=title,
                start_time=parse_iso_datetime(start_time, timezone),
                end_time=parse_iso_datetime(end_time, timezone),
                event_type_id=event_type_id,
                description=description,
                location=location,
                is_all_day=bool(is_all_day),
                is_recurring=bool(is_recurring),
                recurrence_rule=recurrence_rule,
            )
            return f'Event created: "{event.title}" on {fmt(event.start_time, timezone)} (ID: {event.id})'
        except Exception as e:
            return f"Error creating event: {str(e)}"

    @tool
    def get_event(event_id: int) -> str:
        """
        Get detailed information about a specific event

        Args:
            event_id: Event ID
        """
        try:
            details = repository.get_event(event_id)
            if details is None:
                return "Event not found"

            event = details.event
            if details.attendees:
                attendees_list = "\n".join(
                    f"  - {a.name}" + (f" ({a.email})" if a.email else "") + f" - {a.status}"
                    for a in details.attendees
                )
            else:
                attendees_list = "  None"

            return "\n".join([
                f"Event: {event.title}",
                f"Type: {details.event_type_name or 'Unknown Type'}",
                f"Start: {fmt(event.start_time, timezone)}",
                f"End: {fmt(event.end_time, timezone)}",
                f"Location: {event.location or 'N/A'}",
                f"All Day: {event.is_all_day}",
                f"Recurring: {event.is_recurring}" + (f" ({event.recurrence_rule})" if event.recurrence_rule else ""),
                f"Description: {event.description or 'N/A'}",
                "Attendees:",
                attendees_list,
            ])
        except Exception as e:
            return f"Error getting event: {str(e)}"

    @tool
    def list_events(
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        event_type_id: Optional[int] = None,
    ) -> str:
        """
        List events with optional filters

        Args:
            start_date: Only events starting at or after this date (ISO 8601)
            end_date: Only events ending at or before this date (ISO 8601)
            event_type_id: Filter by event type ID
        """
        try:
            events = repository.list_events(
                start_date=parse_optional_datetime(start_date, timezone),
                end_date=parse_optional_datetime(end_date, timezone),
                event_type_id=event_type_id,
            )
            if not events:
                return "No events found"
            return "\n".join(
                f"{e.id}: {e.title} | {fmt(e.start_time, timezone)} to {fmt(e.end_time, timezone)}"
                + (f" | {e.location}" if e.location else "")
                for e in events
            )
        except Exception as e:
            return f"Error listing events: {str(e)}"

    @tool
    def update_event(
        event_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        location: Optional[str] = None,
    ) -> str:
        """
        Update an existing event. Check conflicts first with exclude_event_id set to this event.

        Args:
            event_id: Event ID to update
            title: New event title
            description: New event description
            start_time: New start time (ISO 8601)
            end_time: New end time (ISO 8601)
            location: New location
        """
        try:
            changes = {}
            if description is not None:
                changes["description"] = description
            if location is not None:
                changes["location"] = location
            updated = repository.update_event(
                event_id,
                title=title,
                start_time=parse_optional_datetime(start_time, timezone),
                end_time=parse_optional_datetime(end_time, timezone),
                **changes,
            )
            if updated is None:
                return "Error: Failed to update event or event not found"
            return f'Event updated: "{updated.title}"'
        except Exception as e:
            return f"Error updating event: {str(e)}"

    @tool
    def delete_event(event_id: int) -> str:
        """
        Delete an event from the calendar

        Args:
            event_id: Event ID to delete
        """
        try:
            if not repository.delete_event(event_id):
                return f"Event {event_id} not found"
            return f"Event {event_id} deleted successfully"
        except Exception as e:
            return f"Error deleting event: {str(e)}"

    # ============= ATTENDEE TOOLS =============

    @tool
    def add_attendee(event_id: int, name: str, email: Optional[str] = None, status: Optional[str] = None) -> str:
        """
        Add an attendee to an event

        Args:
            event_id: Event ID
            name: Attendee name
            email: Attendee email address
            status: Initial attendance status: pending, confirmed, tentative or declined (default: pending)
        """
        try:
            attendee = repository.add_attendee(event_id, name, email, status)
            email_part = f" ({attendee.email})" if attendee.email else ""
            return (
                f"Attendee added: {attendee.name}{email_part} to event {event_id} "
                f"with status: {attendee.status} (ID: {attendee.id})"
            )
        except Exception as e:
            return f"Error adding attendee: {str(e)}"

    @tool
    def update_attendee_status(attendee_id: int, status: str, notes: Optional[str] = None) -> str:
        """
        Update an attendee's response status for an event

        Args:
            attendee_id: Attendee record ID
            status: New attendance status: pending, confirmed, tentative or declined
            notes: Optional notes from the attendee
        """
        try:
            updated = repository.update_attendee_status(attendee_id, status, notes)
            if updated is None:
                return "Error: Failed to update attendee status or attendee not found"
            return f"Attendee status updated to: {updated.status}"
        except Exception as e:
            return f"Error updating attendee status: {str(e)}"

    @tool
    def remove_attendee(attendee_id: int) -> str:
        """
        Remove an attendee from an event

        Args:
            attendee_id: Attendee record ID to remove
        """
        try:
            if not repository.remove_attendee(attendee_id):
                return f"Attendee {attendee_id} not found"
            return f"Attendee {attendee_id} removed successfully"
        except Exception as e:
            return f"Error removing attendee: {str(e)}"

    @tool
    def list_event_attendees(event_id: int) -> str:
        """
        List all attendees for a specific event

        Args:
            event_id: Event ID
        """
        try:
            attendees = repository.list_event_attendees(event_id)
            if not attendees:
                return "No attendees found for this event"
            return "\n".join(
                f"{a.id}: {a.name}"
                + (f" ({a.email})" if a.email else "")
                + f" - Status: {a.status}"
                + (f" - Notes: {a.notes}" if a.notes else "")
                for a in attendees
            )
        except Exception as e:
            return f"Error listing attendees: {str(e)}"

    # ============= REMINDER TOOLS =============

    @tool
    def create_reminder(event_id: int, reminder_time: str) -> str:
        """
        Create a reminder for an event

        Args:
            event_id: Event ID
            reminder_time: When to send the reminder (ISO 8601 format)
        """
        try:
            reminder = repository.create_reminder(event_id, parse_iso_datetime(reminder_time, timezone))
            return f"Reminder created for event {event_id} at {fmt(reminder.reminder_time, timezone)} (ID: {reminder.id})"
        except Exception as e:
            return f"Error creating reminder: {str(e)}"

    @tool
    def list_reminders(event_id: Optional[int] = None, include_sent: Optional[bool] = None) -> str:
        """
        List reminders with optional filters

        Args:
            event_id: Filter by event ID
            include_sent: Include already sent reminders (default: false)
        """
        try:
            reminders = repository.list_reminders(event_id=event_id, include_sent=bool(include_sent))
            if not reminders:
                return "No reminders found"
            return "\n".join(
                f'{r.id}: Event "{r.event_title or "Unknown Event"}" at {fmt(r.reminder_time, timezone)} (Sent: {r.sent})'
                for r in reminders
            )
        except Exception as e:
            return f"Error listing reminders: {str(e)}"

    @tool
    def mark_reminder_sent(reminder_id: int) -> str:
        """
        Mark a reminder as sent

        Args:
            reminder_id: Reminder ID
        """
        try:
            if not repository.mark_reminder_sent(reminder_id):
                return f"Reminder {reminder_id} not found"
            return f"Reminder {reminder_id} marked as sent"
        except Exception as e:
            return f"Error marking reminder as sent: {str(e)}"

    # ============= UTILITY TOOLS =============

    @tool
    def get_current_datetime() -> str:
        """
        Get current date and time in standardized formats to help with date calculations.
        """
        try:
            return json.dumps(current_datetime_info(timezone), indent=2)
        except Exception as e:
            return json.dumps({"error": f"Failed to get current datetime: {str(e)}"})

    return [
        check_event_conflicts,
        create_event_type,
        list_event_types,
        create_event,
        get_event,
        list_events,
        update_event,
        delete_event,
        add_attendee,
        update_attendee_status,
        remove_attendee,
        list_event_attendees,
        create_reminder,
        list_reminders,
        mark_reminder_sent,
        get_current_datetime,
    ]
