"""
Pydantic schemas for group chat messages.

A chat message is immutable once posted; it can only be deleted.  The
author's name and special-status flags are snapshotted at posting
time so later profile changes do not rewrite history.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ChatMessageCreate(BaseModel):
    message: str = Field(..., min_length=1, description="Text of the chat message")


class ChatMessageRead(BaseModel):
    id: str
    author_id: str
    author_name: Optional[str] = None
    contributor: Optional[Dict[str, Any]] = None
    npc: Optional[str] = None
    text: str
    timestamp: int = Field(..., description="Milliseconds since the UNIX epoch")
