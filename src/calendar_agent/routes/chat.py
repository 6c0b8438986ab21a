from fastapi import APIRouter, Depends, HTTPException, Request
import logging
import time
import uuid

from langchain_core.messages import AIMessage, HumanMessage

from calendar_agent.db.persistence import ConversationStore
from calendar_agent.orchestrator.workflow import CalendarWorkflow
from calendar_agent.routes.dto import ChatRequest, ChatResponse, ClearConversationResponse
from calendar_agent.utils.helper import message_text

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter()


def get_workflow(request: Request) -> CalendarWorkflow:
    workflow = getattr(request.app.state, "workflow", None)
    if workflow is None:
        raise HTTPException(status_code=503, detail="Calendar agent not initialized")
    return workflow


def get_conversation_store(request: Request) -> ConversationStore:
    return request.app.state.conversation_store


@router.post("/", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    workflow: CalendarWorkflow = Depends(get_workflow),
    store: ConversationStore = Depends(get_conversation_store),
):
    """
    Run one conversation turn through the calendar agent.

    Flow:
    1. Load the conversation's transcript and append the user's query
    2. Run the agent / tools / conflict detector loop to a final reply
    3. Store the returned transcript and answer with the final reply

    Turns for the same conversation are serialised. A failed turn is not
    recorded, so the caller can retry it as-is.
    """
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty")

    conversation_id = request.conversation_id or str(uuid.uuid4())
    route_start_time = time.time()

    async with store.lock_for(conversation_id):
        history = store.get_history(conversation_id)
        try:
            final_state = await workflow.invoke([*history, HumanMessage(content=request.query)])
        except Exception as e:
            processing_time = time.time() - route_start_time
            logger.error("Chat turn failed in %.3f seconds: %s", processing_time, str(e))
            return ChatResponse(
                success=False,
                response="I'm sorry, I encountered an error while processing your request.",
                conversation_id=conversation_id,
                metadata={"processing_time": processing_time},
                error_message=str(e),
            )
        store.save_history(conversation_id, list(final_state["messages"]))

    messages = final_state["messages"]
    turn_messages = messages[len(history):]
    tools_called = [
        call["name"]
        for message in turn_messages
        if isinstance(message, AIMessage)
        for call in message.tool_calls
    ]
    return ChatResponse(
        success=True,
        response=message_text(messages[-1]),
        conversation_id=conversation_id,
        conflict_check=final_state.get("conflict_check_result"),
        tools_called=tools_called,
        metadata={
            "processing_time": time.time() - route_start_time,
            "messages_in_turn": len(turn_messages),
            "history_length": len(messages),
        },
    )


@router.delete("/{conversation_id}", response_model=ClearConversationResponse)
async def clear_conversation(conversation_id: str, store: ConversationStore = Depends(get_conversation_store)):
    async with store.lock_for(conversation_id):
        cleared = store.clear_history(conversation_id)
    return ClearConversationResponse(conversation_id=conversation_id, cleared=cleared)
