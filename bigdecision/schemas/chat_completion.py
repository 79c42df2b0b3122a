from __future__ import annotations

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: str
    content: str | None = None
    reasoning_content: str | None = None


class ChatChoice(BaseModel):
    message: ChatMessage
    finish_reason: str | None = None


class ChatResponse(BaseModel):
    choices: list[ChatChoice]


class ChatDelta(BaseModel):
    content: str | None = None
    reasoning_content: str | None = None


class ChatStreamChoice(BaseModel):
    delta: ChatDelta = Field(default_factory=ChatDelta)
    finish_reason: str | None = None


class ChatStreamChunk(BaseModel):
    choices: list[ChatStreamChoice] = Field(default_factory=list)
