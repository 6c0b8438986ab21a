"""
Calendar Agent Workflow

LangGraph state machine driving one conversation turn:

    agent ──(tool calls)──▶ tools ──(conflict check called)──▶ conflict_detector
      ▲  └─(no tool calls)─▶ END   └──────(otherwise)──────▶ agent ◀───┘

Routing lives in Routes; the tools node is LangGraph's ToolNode, which turns
tool failures and unknown tool names into error ToolMessages.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from langchain.chat_models import init_chat_model
from langchain_core.messages import BaseMessage
from langchain_core.tools import BaseTool
from langgraph.errors import GraphRecursionError
from langgraph.graph import END, START, StateGraph
from langgraph.prebuilt import ToolNode

from calendar_agent.config import settings
from calendar_agent.conflict.detector import ConflictDetector
from calendar_agent.constants import AGENT_SETTINGS, DEFAULT_TIMEZONE
from calendar_agent.db.database import create_db_engine, create_session_factory, init_db
from calendar_agent.db.repository import CalendarRepository
from calendar_agent.exceptions import IterationLimitError
from calendar_agent.orchestrator.nodes import AGENT, CONFLICT_DETECTOR, TOOLS, Routes, WorkflowNodes
from calendar_agent.orchestrator.state import AgentState, initial_state
from calendar_agent.tools import build_calendar_tools

logger = logging.getLogger(__name__)

# An agent step is followed by at most tools and conflict_detector
STEPS_PER_ITERATION = 3


def get_chat_model():
    """Create the chat model configured in AGENT_SETTINGS."""
    return init_chat_model(
        model=AGENT_SETTINGS.MODEL,
        model_provider=AGENT_SETTINGS.PROVIDER,
        api_key=AGENT_SETTINGS.API_KEY or None,
        temperature=AGENT_SETTINGS.TEMPERATURE,
    )


class CalendarWorkflow:
    """Runs conversation turns through the agent / tools / conflict_detector graph."""

    def __init__(
        self,
        model,
        tools: Iterable[BaseTool],
        detector: ConflictDetector,
        max_iterations: Optional[int] = AGENT_SETTINGS.MAX_ITERATIONS,
        timezone=DEFAULT_TIMEZONE,
    ):
        """
        Args:
            model: Chat model supporting bind_tools
            tools: Tool catalog offered to the model
            detector: Conflict detector used by the conflict_detector node
            max_iterations: Maximum agent steps per turn (None or 0 for LangGraph's default step limit)
            timezone: Timezone used for "today" in the system prompt and for naive tool-call times
        """
        self.tools = list(tools)
        names = set()
        for tool in self.tools:
            if tool.name in names:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            names.add(tool.name)

        self.detector = detector
        self.max_iterations = max_iterations
        self.model = model.bind_tools(self.tools)
        self.nodes = WorkflowNodes(self.model, detector, timezone)
        self.routes = {
            AGENT: Routes.should_continue,
            TOOLS: Routes.should_check_conflicts,
        }
        self.graph = self._build_graph().compile()

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(AgentState)

        # Nodes
        graph.add_node(AGENT, self.nodes.call_model)
        graph.add_node(TOOLS, ToolNode(self.tools, handle_tool_errors=True))
        graph.add_node(CONFLICT_DETECTOR, self.nodes.check_conflicts)

        # Edges
        graph.add_edge(START, AGENT)
        graph.add_conditional_edges(AGENT, self.routes[AGENT], {TOOLS: TOOLS, END: END})
        graph.add_conditional_edges(
            TOOLS,
            self.routes[TOOLS],
            {CONFLICT_DETECTOR: CONFLICT_DETECTOR, AGENT: AGENT},
        )
        graph.add_edge(CONFLICT_DETECTOR, AGENT)
        return graph

    def next_node(self, current: str, state: AgentState) -> str:
        if current == CONFLICT_DETECTOR:
            return AGENT
        return self.routes[current](state)

    def run_config(self) -> Dict[str, Any]:
        if not self.max_iterations:
            return {}
        return {"recursion_limit": self.max_iterations * STEPS_PER_ITERATION + 1}

    async def invoke(self, transcript: Iterable) -> AgentState:
        """
        Run one turn to completion.

        Args:
            transcript: Prior messages plus the new user message. Message
                objects or {"role": ..., "content": ...} dicts.

        Returns:
            Final state; its messages hold the input transcript followed by
            every message appended during the turn.

        Raises:
            IterationLimitError: If the turn runs past max_iterations agent steps
        """
        try:
            final_state = await self.graph.ainvoke(initial_state(transcript), config=self.run_config())
        except GraphRecursionError as e:
            raise IterationLimitError(self.max_iterations) from e

        logger.info(f"Turn finished with {len(final_state['messages'])} messages")
        return final_state

    async def run(self, transcript: Iterable) -> List[BaseMessage]:
        """Run one turn and return the final transcript."""
        final_state = await self.invoke(transcript)
        return list(final_state["messages"])


def build_workflow(
    model=None,
    repository: Optional[CalendarRepository] = None,
    database_url: Optional[str] = None,
    max_iterations: Optional[int] = AGENT_SETTINGS.MAX_ITERATIONS,
    timezone=DEFAULT_TIMEZONE,
) -> CalendarWorkflow:
    """
    Wire repository, conflict detector, tool catalog and model into a workflow.

    Args:
        model: Chat model; defaults to get_chat_model()
        repository: Calendar storage; defaults to one on database_url
        database_url: SQLAlchemy URL; defaults to settings.DATABASE_URL
        max_iterations: Maximum agent steps per turn
        timezone: Timezone shared by the prompt, the tools and the conflict detector

    Returns:
        Ready-to-run CalendarWorkflow
    """
    if repository is None:
        engine = create_db_engine(database_url or settings.DATABASE_URL)
        init_db(engine)
        repository = CalendarRepository(create_session_factory(engine))

    detector = ConflictDetector(repository, timezone)
    tools = build_calendar_tools(repository, detector, timezone)
    return CalendarWorkflow(
        model=model if model is not None else get_chat_model(),
        tools=tools,
        detector=detector,
        max_iterations=max_iterations,
        timezone=timezone,
    )
