class CalendarAgentError(Exception):
    """Base error for the calendar agent."""


class IterationLimitError(CalendarAgentError):
    """Raised when the agent/tools loop exceeds the configured number of agent steps."""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__(
            f"Agent did not produce a final reply within {max_iterations} iterations"
        )
