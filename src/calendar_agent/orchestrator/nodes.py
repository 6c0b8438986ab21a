"""
Workflow nodes and routers.

Nodes are async callables taking the current AgentState and returning a
partial update; routers are pure functions naming the next node.
"""

import logging
from typing import Any, Dict, List, Optional

from langgraph.graph import END

from calendar_agent.conflict.detector import ConflictDetector
from calendar_agent.constants import CONFLICT_CHECK_TOOL, DEFAULT_TIMEZONE
from calendar_agent.dto import ConflictCheckRequest
from calendar_agent.orchestrator.prompts import build_system_message
from calendar_agent.orchestrator.state import AgentState, last_ai_message, last_tool_calls

logger = logging.getLogger(__name__)

AGENT = "agent"
TOOLS = "tools"
CONFLICT_DETECTOR = "conflict_detector"


def conflict_request_from_calls(tool_calls: List[Dict[str, Any]], timezone=DEFAULT_TIMEZONE) -> Optional[ConflictCheckRequest]:
    """Pending request from the conflict-check calls of one model step; the last parseable one wins."""
    pending = None
    for call in tool_calls:
        if call["name"] != CONFLICT_CHECK_TOOL:
            continue
        try:
            pending = ConflictCheckRequest.from_tool_args(call.get("args") or {}, timezone)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Could not build conflict check request from {call.get('args')}: {e}")
    return pending


class Routes:
    @staticmethod
    def should_continue(state: AgentState) -> str:
        """After the agent: run tools if the reply requested any, otherwise finish."""
        return TOOLS if last_tool_calls(state) else END

    @staticmethod
    def should_check_conflicts(state: AgentState) -> str:
        """After tools: run the conflict detector if the dispatched calls included the conflict check."""
        message = last_ai_message(state)
        tool_calls = message.tool_calls if message is not None else []
        if any(call["name"] == CONFLICT_CHECK_TOOL for call in tool_calls):
            return CONFLICT_DETECTOR
        return AGENT


class WorkflowNodes:
    def __init__(self, model, detector: ConflictDetector, timezone=DEFAULT_TIMEZONE):
        self.model = model
        self.detector = detector
        self.timezone = timezone

    async def call_model(self, state: AgentState) -> Dict[str, Any]:
        """
        Decision step. Provider errors propagate to the caller of the workflow.

        A conflict-check call in the reply also fills the pending conflict
        request read by the conflict_detector node.
        """
        messages = [build_system_message(self.timezone), *state["messages"]]
        response = await self.model.ainvoke(messages)
        tool_calls = getattr(response, "tool_calls", None) or []
        update: Dict[str, Any] = {"messages": [response]}

        if tool_calls:
            logger.info(f"Model requested tools: {', '.join(call['name'] for call in tool_calls)}")
            pending = conflict_request_from_calls(tool_calls, self.timezone)
            if pending is not None:
                update["pending_conflict_check"] = pending
        else:
            logger.info("Model produced a final reply")
        return update

    async def check_conflicts(self, state: AgentState) -> Dict[str, Any]:
        """Re-run the pending conflict check through the conflict graph, store its message and clear the request."""
        pending = state.get("pending_conflict_check")
        if pending is None:
            return {"conflict_check_result": None}

        result = await self.detector.check_conflicts(pending)
        return {
            "conflict_check_result": result.message,
            "pending_conflict_check": None,
        }
