"""Tests for conflict detection and its rendered summary."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from calendar_agent.conflict.detector import ConflictDetector, render_conflict_message
from calendar_agent.constants import NO_CONFLICTS_MESSAGE
from calendar_agent.dto import ConflictCheckRequest, EventSummary


def _request(start, end, exclude=None):
    return ConflictCheckRequest(start_time=start, end_time=end, exclude_event_id=exclude)


@pytest.mark.asyncio
async def test_overlapping_candidate_reports_conflict(detector, event_a):
    result = await detector.check_conflicts(
        _request(datetime(2024, 1, 1, 10, 30), datetime(2024, 1, 1, 11, 30))
    )

    assert result.has_conflicts is True
    assert [c.id for c in result.conflicts] == [event_a.id]
    assert result.message == (
        "⚠️  Found 1 conflicting event(s):\n"
        '  - "Team Sync" (2024-01-01 10:00 – 2024-01-01 11:00) at Room 1'
    )


@pytest.mark.asyncio
async def test_touching_boundary_counts_as_conflict(detector, event_a):
    result = await detector.check_conflicts(
        _request(datetime(2024, 1, 1, 11, 0), datetime(2024, 1, 1, 12, 0))
    )

    assert result.has_conflicts is True
    assert [c.id for c in result.conflicts] == [event_a.id]


@pytest.mark.asyncio
async def test_excluded_event_is_not_a_conflict(detector, event_a):
    result = await detector.check_conflicts(
        _request(datetime(2024, 1, 1, 10, 30), datetime(2024, 1, 1, 11, 30), exclude=event_a.id)
    )

    assert result.has_conflicts is False
    assert result.conflicts == []
    assert result.message == NO_CONFLICTS_MESSAGE


@pytest.mark.asyncio
async def test_empty_store_has_no_conflicts(detector):
    result = await detector.check_conflicts(
        _request(datetime(2030, 6, 1, 0, 0), datetime(2030, 6, 30, 0, 0))
    )

    assert result.has_conflicts is False
    assert result.conflicts == []
    assert result.message == "✓ No conflicts found"


@pytest.mark.asyncio
async def test_repeated_checks_return_identical_results(detector, repository, meeting_type, event_a):
    repository.create_event(
        title="Lunch",
        start_time=datetime(2024, 1, 1, 10, 45),
        end_time=datetime(2024, 1, 1, 12, 0),
        event_type_id=meeting_type.id,
    )
    request = _request(datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 12, 0))

    first = await detector.check_conflicts(request)
    second = await detector.check_conflicts(request)

    assert first == second
    assert first.message.startswith("⚠️  Found 2 conflicting event(s):")


@pytest.mark.asyncio
async def test_storage_failure_propagates():
    repository = MagicMock()
    repository.find_overlapping.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    detector = ConflictDetector(repository)

    with pytest.raises(OperationalError):
        await detector.check_conflicts(_request(datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11)))


def test_render_lists_each_conflict_on_its_own_line():
    conflicts = [
        EventSummary(id=1, title="Standup", start_time=datetime(2024, 1, 1, 9, 0),
                     end_time=datetime(2024, 1, 1, 9, 15), location=None),
        EventSummary(id=2, title="Review", start_time=datetime(2024, 1, 1, 9, 10),
                     end_time=datetime(2024, 1, 1, 10, 0), location="HQ"),
    ]

    lines = render_conflict_message(conflicts).split("\n")

    assert lines == [
        "⚠️  Found 2 conflicting event(s):",
        '  - "Standup" (2024-01-01 09:00 – 2024-01-01 09:15)',
        '  - "Review" (2024-01-01 09:10 – 2024-01-01 10:00) at HQ',
    ]


def test_request_from_tool_args_parses_iso_strings():
    request = ConflictCheckRequest.from_tool_args({
        "start_time": "2024-01-01T10:30:00Z",
        "end_time": "2024-01-01T13:30:00+02:00",
        "exclude_event_id": 7,
    })

    assert request.start_time == datetime(2024, 1, 1, 10, 30)
    assert request.end_time == datetime(2024, 1, 1, 11, 30)
    assert request.exclude_event_id == 7


def test_request_from_tool_args_rejects_bad_times():
    with pytest.raises(ValueError):
        ConflictCheckRequest.from_tool_args({"start_time": "tomorrow", "end_time": "2024-01-01T10:00"})
