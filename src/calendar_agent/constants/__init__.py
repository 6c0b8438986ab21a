"""
Calendar Agent Constants
"""

from dataclasses import dataclass
from typing import Optional

import pytz

from calendar_agent.config import settings


@dataclass
class AppSettings:
    """HTTP application metadata"""
    APP_NAME: str = "Calendar Agent API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Natural-language calendar management with conflict detection"


@dataclass
class AgentSettings:
    """LLM configuration for the calendar agent"""
    MODEL: str = settings.LLM_MODEL
    PROVIDER: str = settings.LLM_PROVIDER
    API_KEY: str = settings.LLM_API_KEY
    TEMPERATURE: float = settings.LLM_TEMPERATURE
    MAX_ITERATIONS: Optional[int] = settings.MAX_ITERATIONS


# Reserved tool name: the engine routes to the conflict detector when it is called
CONFLICT_CHECK_TOOL = "check_event_conflicts"

ATTENDEE_STATUSES = ("pending", "confirmed", "tentative", "declined")

DISPLAY_DATETIME_FORMAT = "%Y-%m-%d %H:%M"

NO_CONFLICTS_MESSAGE = "✓ No conflicts found"

DEFAULT_TIMEZONE = pytz.timezone(settings.TIMEZONE)

# Global settings
APP_SETTINGS = AppSettings()
AGENT_SETTINGS = AgentSettings()
