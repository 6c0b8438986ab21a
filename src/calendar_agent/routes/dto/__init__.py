"""
Routes Data Transfer Objects (DTOs)

This module contains all Pydantic models used by API routes:
- Request and response models for the chat endpoint
- Health check response models
"""

from pydantic import BaseModel
from typing import Optional, List, Dict, Any


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""
    query: str
    conversation_id: Optional[str] = None


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""
    success: bool
    response: str
    conversation_id: str
    conflict_check: Optional[str] = None
    tools_called: List[str] = []
    metadata: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None


class ClearConversationResponse(BaseModel):
    conversation_id: str
    cleared: bool


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: Optional[str] = None
    components: Optional[Dict[str, str]] = None
