"""Tests for the tool catalog, run through the same ainvoke path the workflow uses."""

import json
from datetime import datetime

import pytest
import pytz

from calendar_agent.conflict.detector import ConflictDetector
from calendar_agent.constants import CONFLICT_CHECK_TOOL
from calendar_agent.tools import build_calendar_tools


def test_catalog_names_are_stable(tools):
    assert list(tools) == [
        "check_event_conflicts",
        "create_event_type",
        "list_event_types",
        "create_event",
        "get_event",
        "list_events",
        "update_event",
        "delete_event",
        "add_attendee",
        "update_attendee_status",
        "remove_attendee",
        "list_event_attendees",
        "create_reminder",
        "list_reminders",
        "mark_reminder_sent",
        "get_current_datetime",
    ]
    assert CONFLICT_CHECK_TOOL in tools


@pytest.mark.asyncio
async def test_conflict_tool_returns_rendered_message(tools, event_a):
    output = await tools["check_event_conflicts"].ainvoke({
        "start_time": "2024-01-01T10:30:00",
        "end_time": "2024-01-01T11:30:00",
    })

    assert output.startswith("⚠️  Found 1 conflicting event(s):")
    assert '"Team Sync"' in output


@pytest.mark.asyncio
async def test_conflict_tool_with_exclusion(tools, event_a):
    output = await tools["check_event_conflicts"].ainvoke({
        "start_time": "2024-01-01T10:30:00",
        "end_time": "2024-01-01T11:30:00",
        "exclude_event_id": event_a.id,
    })

    assert output == "✓ No conflicts found"


@pytest.mark.asyncio
async def test_conflict_tool_reports_bad_dates_as_text(tools):
    output = await tools["check_event_conflicts"].ainvoke({"start_time": "next week", "end_time": "later"})

    assert output.startswith("Error checking conflicts:")


@pytest.mark.asyncio
async def test_event_type_and_event_flow(tools, repository):
    created_type = await tools["create_event_type"].ainvoke({"name": "Workshop", "color": "#123456"})
    assert created_type.startswith("Event type created: Workshop (#123456)")
    type_id = repository.list_event_types()[0].id

    assert (await tools["list_event_types"].ainvoke({})) == f"{type_id}: Workshop (#123456)"

    created = await tools["create_event"].ainvoke({
        "title": "Python Workshop",
        "start_time": "2024-03-01T14:00:00",
        "end_time": "2024-03-01T17:00:00",
        "event_type_id": type_id,
        "location": "Lab",
    })
    event_id = repository.list_events()[0].id
    assert created == f'Event created: "Python Workshop" on 2024-03-01 14:00 (ID: {event_id})'

    listed = await tools["list_events"].ainvoke({"start_date": "2024-03-01"})
    assert listed == f"{event_id}: Python Workshop | 2024-03-01 14:00 to 2024-03-01 17:00 | Lab"

    updated = await tools["update_event"].ainvoke({"event_id": event_id, "title": "Advanced Python"})
    assert updated == 'Event updated: "Advanced Python"'

    details = await tools["get_event"].ainvoke({"event_id": event_id})
    assert "Event: Advanced Python" in details
    assert "Type: Workshop" in details
    assert "Location: Lab" in details

    assert (await tools["delete_event"].ainvoke({"event_id": event_id})) == f"Event {event_id} deleted successfully"
    assert (await tools["get_event"].ainvoke({"event_id": event_id})) == "Event not found"
    assert (await tools["list_events"].ainvoke({})) == "No events found"


@pytest.mark.asyncio
async def test_create_event_with_unknown_type_returns_error_text(tools):
    output = await tools["create_event"].ainvoke({
        "title": "Orphan",
        "start_time": "2024-03-01T14:00:00",
        "end_time": "2024-03-01T15:00:00",
        "event_type_id": 999,
    })

    assert output.startswith("Error creating event:")


@pytest.mark.asyncio
async def test_update_missing_event(tools):
    output = await tools["update_event"].ainvoke({"event_id": 999, "title": "Ghost"})

    assert output == "Error: Failed to update event or event not found"


@pytest.mark.asyncio
async def test_attendee_tools(tools, event_a):
    added = await tools["add_attendee"].ainvoke({"event_id": event_a.id, "name": "Ann", "email": "ann@example.com"})
    assert added.startswith(f"Attendee added: Ann (ann@example.com) to event {event_a.id} with status: pending")

    listed = await tools["list_event_attendees"].ainvoke({"event_id": event_a.id})
    attendee_id = int(listed.split(":")[0])
    assert listed == f"{attendee_id}: Ann (ann@example.com) - Status: pending"

    status = await tools["update_attendee_status"].ainvoke({"attendee_id": attendee_id, "status": "declined"})
    assert status == "Attendee status updated to: declined"

    bad_status = await tools["update_attendee_status"].ainvoke({"attendee_id": attendee_id, "status": "maybe"})
    assert bad_status.startswith("Error updating attendee status:")

    removed = await tools["remove_attendee"].ainvoke({"attendee_id": attendee_id})
    assert removed == f"Attendee {attendee_id} removed successfully"
    assert (await tools["list_event_attendees"].ainvoke({"event_id": event_a.id})) == "No attendees found for this event"


@pytest.mark.asyncio
async def test_reminder_tools(tools, repository, event_a):
    created = await tools["create_reminder"].ainvoke({"event_id": event_a.id, "reminder_time": "2024-01-01T09:45:00"})
    assert created.startswith(f"Reminder created for event {event_a.id} at 2024-01-01 09:45")
    reminder_id = repository.list_reminders()[0].id

    listed = await tools["list_reminders"].ainvoke({})
    assert listed == f'{reminder_id}: Event "Team Sync" at 2024-01-01 09:45 (Sent: False)'

    assert (await tools["mark_reminder_sent"].ainvoke({"reminder_id": reminder_id})) == f"Reminder {reminder_id} marked as sent"
    assert (await tools["list_reminders"].ainvoke({})) == "No reminders found"
    assert "(Sent: True)" in await tools["list_reminders"].ainvoke({"include_sent": True})


@pytest.mark.asyncio
async def test_current_datetime_tool(tools):
    info = json.loads(await tools["get_current_datetime"].ainvoke({}))

    assert datetime.strptime(info["current_date"], "%Y-%m-%d")
    assert info["timezone"]


@pytest.mark.asyncio
async def test_naive_and_offset_times_clash_in_local_timezone(repository, meeting_type):
    budapest = pytz.timezone("Europe/Budapest")
    local_tools = {
        t.name: t
        for t in build_calendar_tools(repository, ConflictDetector(repository, budapest), budapest)
    }

    created = await local_tools["create_event"].ainvoke({
        "title": "Standup",
        "start_time": "2024-01-01T10:00:00",
        "end_time": "2024-01-01T10:30:00",
        "event_type_id": meeting_type.id,
    })
    assert created.startswith('Event created: "Standup" on 2024-01-01 10:00')
    assert repository.list_events()[0].start_time == datetime(2024, 1, 1, 9, 0)

    output = await local_tools["check_event_conflicts"].ainvoke({
        "start_time": "2024-01-01T10:15:00+01:00",
        "end_time": "2024-01-01T11:00:00+01:00",
    })

    assert output == (
        "⚠️  Found 1 conflicting event(s):\n"
        '  - "Standup" (2024-01-01 10:00 – 2024-01-01 10:30)'
    )
