from datetime import datetime
from typing import Generator, List

import pytest
from langchain_core.language_models.fake_chat_models import FakeMessagesListChatModel
from langchain_core.outputs import ChatGeneration, ChatResult
from sqlalchemy.engine import Engine

from calendar_agent.conflict.detector import ConflictDetector
from calendar_agent.db.database import Base, create_db_engine, create_session_factory, init_db
from calendar_agent.db.repository import CalendarRepository
from calendar_agent.dto import EventRecord, EventTypeRecord
from calendar_agent.tools import build_calendar_tools


class ScriptedChatModel(FakeMessagesListChatModel):
    """Fake chat model returning scripted messages in order and recording its inputs."""

    bound_tools: List[str] = []
    received: List[list] = []

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = [t.name for t in tools]
        return self

    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        self.received.append(list(messages))
        # fresh copy per call so repeated replies get their own message id
        response = self.responses[self.i].model_copy()
        self.i = self.i + 1 if self.i < len(self.responses) - 1 else 0
        return ChatResult(generations=[ChatGeneration(message=response)])


class FailingChatModel(ScriptedChatModel):
    """Fake chat model whose provider call always fails."""

    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        raise RuntimeError("provider unavailable")


# --- Test database ---

@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite with all calendar tables created."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    assert len(Base.metadata.tables) > 0, "Calendar models were not registered on Base.metadata"
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def repository(engine: Engine) -> CalendarRepository:
    return CalendarRepository(create_session_factory(engine))


@pytest.fixture
def detector(repository: CalendarRepository) -> ConflictDetector:
    return ConflictDetector(repository)


@pytest.fixture
def tools(repository: CalendarRepository, detector: ConflictDetector):
    return {t.name: t for t in build_calendar_tools(repository, detector)}


@pytest.fixture
def meeting_type(repository: CalendarRepository) -> EventTypeRecord:
    return repository.create_event_type("Meeting", "#FF5733", "Work meetings")


@pytest.fixture
def event_a(repository: CalendarRepository, meeting_type: EventTypeRecord) -> EventRecord:
    """Stored event A: 2024-01-01 10:00 - 11:00."""
    return repository.create_event(
        title="Team Sync",
        start_time=datetime(2024, 1, 1, 10, 0),
        end_time=datetime(2024, 1, 1, 11, 0),
        event_type_id=meeting_type.id,
        location="Room 1",
    )
