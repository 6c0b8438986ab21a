"""
Interactive Calendar Agent REPL

Keeps the transcript in memory for the session; each line runs one turn
through the workflow and the reply is rendered as Markdown.
"""

import asyncio
import logging
from typing import List

from langchain_core.messages import BaseMessage, HumanMessage
from rich.console import Console
from rich.markdown import Markdown
from rich.rule import Rule

from calendar_agent.config import settings, validate_required_keys
from calendar_agent.orchestrator.workflow import CalendarWorkflow, build_workflow
from calendar_agent.utils.helper import message_text

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit"}


async def run_repl(workflow: CalendarWorkflow, console: Console = None) -> List[BaseMessage]:
    """
    Read user requests until exit/quit or end of input.

    A failed turn is reported and dropped; the conversation history only
    grows with completed turns.

    Returns:
        The conversation history at exit
    """
    console = console or Console()
    console.print("\n🗓️  Calendar Agent REPL", style="bold cyan")
    console.print(Rule(style="grey50"))
    console.print('Type your requests or "exit" to quit\n', style="yellow")

    conversation_history: List[BaseMessage] = []

    while True:
        try:
            user_input = (await asyncio.to_thread(console.input, "[green]You: [/green]")).strip()
        except (EOFError, KeyboardInterrupt):
            break

        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break

        try:
            console.print("\n🤔 Thinking...", style="grey50")
            conversation_history = await workflow.run(
                [*conversation_history, HumanMessage(content=user_input)]
            )
            reply = message_text(conversation_history[-1])
            if reply:
                console.print("\nAgent:", style="blue")
                console.print(Markdown(reply))
        except Exception as e:
            logger.debug("Turn failed", exc_info=True)
            console.print(f"\n❌ Error: {e}", style="red")
        console.print(Rule(style="grey50"))

    console.print("\n👋 Goodbye!\n", style="cyan")
    return conversation_history


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    console = Console()
    try:
        validate_required_keys()
        workflow = build_workflow()
    except Exception as e:
        console.print(f"Fatal error: {e}", style="red")
        raise SystemExit(1)

    asyncio.run(run_repl(workflow, console))


if __name__ == "__main__":
    main()
