from typing import Annotated, Iterable, List, Optional

from langchain_core.messages import AIMessage, BaseMessage
from langgraph.graph.message import add_messages
from typing_extensions import TypedDict

from calendar_agent.dto import ConflictCheckRequest


class AgentState(TypedDict):
    """
    State carried through one workflow run.

    messages only grows (add_messages); the conflict fields are plain
    channels, so the last node that writes them wins, including a write of None.
    """
    messages: Annotated[List[BaseMessage], add_messages]
    pending_conflict_check: Optional[ConflictCheckRequest]
    conflict_check_result: Optional[str]


def initial_state(transcript: Iterable) -> AgentState:
    return {
        "messages": list(transcript),
        "pending_conflict_check": None,
        "conflict_check_result": None,
    }


def last_tool_calls(state) -> list:
    """Tool calls on the last message, or [] if it is not an AI message."""
    messages = state.get("messages") or []
    if messages and isinstance(messages[-1], AIMessage):
        return list(messages[-1].tool_calls or [])
    return []


def last_ai_message(state) -> Optional[AIMessage]:
    for message in reversed(state.get("messages") or []):
        if isinstance(message, AIMessage):
            return message
    return None
