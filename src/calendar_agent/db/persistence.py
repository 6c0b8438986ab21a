"""
In-Memory Conversation Persistence

Transcripts are kept per conversation ID for the HTTP surface. Turns for
the same conversation are serialised through one asyncio.Lock each, so a
single workflow run owns a transcript from start to finish.

Storage is lost on restart.
"""

import asyncio
import logging
import weakref
from typing import Any, Dict, List, Optional

from langchain_core.messages import BaseMessage

logger = logging.getLogger(__name__)


class ConversationStore:
    """Per-conversation transcripts with one lock per conversation."""

    def __init__(self):
        self._histories: Dict[str, List[BaseMessage]] = {}
        # Entries disappear once no turn holds or waits on the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, conversation_id: str) -> asyncio.Lock:
        """Get the lock that serialises turns for a conversation."""
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    def get_history(self, conversation_id: str, limit: Optional[int] = None) -> List[BaseMessage]:
        """
        Get conversation history.

        Args:
            conversation_id: Conversation identifier
            limit: Maximum number of messages to return (None for all)

        Returns:
            Copy of the stored transcript, oldest first
        """
        history = list(self._histories.get(conversation_id, []))
        if limit is not None:
            history = history[-limit:]
        return history

    def save_history(self, conversation_id: str, history: List[BaseMessage]) -> None:
        """Replace the stored transcript with the one returned by a completed turn."""
        self._histories[conversation_id] = list(history)
        logger.debug(f"Saved {len(history)} messages for conversation {conversation_id}")

    def clear_history(self, conversation_id: str) -> bool:
        """Clear a conversation. Returns False if it was unknown."""
        existed = conversation_id in self._histories
        self._histories.pop(conversation_id, None)
        return existed

    def get_storage_stats(self) -> Dict[str, Any]:
        return {
            "total_conversations": len(self._histories),
            "total_messages": sum(len(hist) for hist in self._histories.values()),
            "active_locks": len(self._locks),
            "storage_type": "in-memory",
        }
