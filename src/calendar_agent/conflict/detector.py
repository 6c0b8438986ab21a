"""
Conflict Detection

One-node LangGraph subgraph: read overlapping events from the repository,
then render a summary the model can show to the user. Used both by the
check_event_conflicts tool and by the workflow's conflict_detector node,
which hold the same ConflictDetector instance.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from calendar_agent.constants import DEFAULT_TIMEZONE, NO_CONFLICTS_MESSAGE
from calendar_agent.db.repository import CalendarRepository
from calendar_agent.dto import ConflictCheckRequest, ConflictCheckResult, EventSummary
from calendar_agent.utils.datetime_utils import format_display_datetime

logger = logging.getLogger(__name__)


class ConflictState(TypedDict):
    """State structure for the conflict graph."""
    # Input parameters
    start_time: datetime
    end_time: datetime
    exclude_event_id: Optional[int]

    # Result
    conflicts: List[EventSummary]
    has_conflicts: bool
    message: str


def render_conflict_message(conflicts: List[EventSummary], timezone=DEFAULT_TIMEZONE) -> str:
    """
    Render conflicts as text, with times shown in the given timezone.

    Returns the fixed no-conflicts message for an empty list, otherwise a
    count line followed by one line per event:
    '  - "<title>" (<start> – <end>) at <location>'
    """
    if not conflicts:
        return NO_CONFLICTS_MESSAGE

    lines = [f"⚠️  Found {len(conflicts)} conflicting event(s):"]
    for event in conflicts:
        line = (
            f'  - "{event.title}" '
            f"({format_display_datetime(event.start_time, timezone)} – "
            f"{format_display_datetime(event.end_time, timezone)})"
        )
        if event.location:
            line += f" at {event.location}"
        lines.append(line)
    return "\n".join(lines)


class ConflictDetector:
    def __init__(self, repository: CalendarRepository, timezone=DEFAULT_TIMEZONE):
        self.repository = repository
        self.timezone = timezone
        self.graph = self._build_graph().compile()

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(ConflictState)
        graph.add_node("check", self._check_node)
        graph.add_edge(START, "check")
        graph.add_edge("check", END)
        return graph

    async def _check_node(self, state: ConflictState) -> Dict[str, Any]:
        """The storage read runs in a worker thread; storage errors propagate."""
        conflicts = await asyncio.to_thread(
            self.repository.find_overlapping,
            state["start_time"],
            state["end_time"],
            state.get("exclude_event_id"),
        )
        logger.info(
            f"Conflict check {state['start_time']} - {state['end_time']} "
            f"(exclude={state.get('exclude_event_id')}): {len(conflicts)} conflict(s)"
        )
        return {
            "conflicts": conflicts,
            "has_conflicts": bool(conflicts),
            "message": render_conflict_message(conflicts, self.timezone),
        }

    async def check_conflicts(self, request: ConflictCheckRequest) -> ConflictCheckResult:
        """Check a candidate range against stored events."""
        result = await self.graph.ainvoke({
            "start_time": request.start_time,
            "end_time": request.end_time,
            "exclude_event_id": request.exclude_event_id,
            "conflicts": [],
            "has_conflicts": False,
            "message": "",
        })
        return ConflictCheckResult(
            conflicts=result["conflicts"],
            has_conflicts=result["has_conflicts"],
            message=result["message"],
        )
