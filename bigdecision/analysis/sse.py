from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from bigdecision.schemas.chat_completion import ChatStreamChunk

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


@dataclass
class StreamDelta:
    content: str | None = None
    reasoning: str | None = None
    finish_reason: str | None = None


class StreamDone(Exception):
    """Raised by ``parse_sse_line`` for the terminator frame."""


def parse_sse_line(line: str) -> StreamDelta | None:
    """Decode one SSE line into a delta.

    Returns ``None`` for lines that carry no delta: blank lines, comments,
    non-data fields and undecodable payloads. Raises ``StreamDone`` for the
    terminator frame.
    """
    line = line.strip()
    if not line or not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX):].strip()
    if payload == DONE_MARKER:
        raise StreamDone()
    if not payload:
        return None

    try:
        chunk = ChatStreamChunk.model_validate_json(payload)
    except ValidationError:
        logger.debug("Skipping malformed stream frame: %r", payload[:200])
        return None

    if not chunk.choices:
        return None
    choice = chunk.choices[0]
    return StreamDelta(
        content=choice.delta.content,
        reasoning=choice.delta.reasoning_content,
        finish_reason=choice.finish_reason,
    )


class StreamAccumulator:
    """Running buffers for one streaming analysis attempt."""

    def __init__(self) -> None:
        self.content_parts: list[str] = []
        self.reasoning_parts: list[str] = []
        self.finished = False

    @property
    def content(self) -> str:
        return "".join(self.content_parts)

    @property
    def reasoning(self) -> str:
        return "".join(self.reasoning_parts)

    def apply(self, delta: StreamDelta) -> str | None:
        """Apply a delta; return the cumulative reasoning text if it grew."""
        updated_reasoning = None
        if delta.content:
            self.content_parts.append(delta.content)
        if delta.reasoning:
            self.reasoning_parts.append(delta.reasoning)
            updated_reasoning = self.reasoning
        if delta.finish_reason is not None:
            self.finished = True
        return updated_reasoning
