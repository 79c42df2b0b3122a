from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from bigdecision.analysis.errors import ParseError
from bigdecision.schemas.decision import DecisionResult

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_FENCE_MARKER = re.compile(r"```[ \t]*(?:json)?", re.IGNORECASE)


def strip_code_fences(content: str) -> str:
    """Remove Markdown code fences around an embedded payload.

    Fence-free text is returned stripped of surrounding whitespace. When a
    complete fenced block is present, only its body is kept, so prose before
    or after the block is dropped. Unbalanced fence markers are removed.
    """
    text = content.strip()
    match = _FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return _FENCE_MARKER.sub("", text).strip()


def _parse_json(content: str) -> dict[str, Any] | None:
    if not content:
        return None
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        start_index = content.find("{")
        end_index = content.rfind("}")
        if start_index == -1 or end_index == -1 or start_index >= end_index:
            return None
        try:
            parsed = json.loads(content[start_index : end_index + 1])
        except json.JSONDecodeError:
            return None
    return parsed if isinstance(parsed, dict) else None


def decode_result(content: str, reasoning_trace: str | None = None) -> DecisionResult:
    payload = _parse_json(strip_code_fences(content))
    if payload is None:
        tail = content[-240:] if content else "<empty>"
        logger.debug("No parseable JSON object in model output (tail=%r)", tail)
        raise ParseError("no parseable JSON object in model output")

    if reasoning_trace:
        payload["reasoning_trace"] = reasoning_trace
    try:
        return DecisionResult.model_validate(payload)
    except ValidationError as exc:
        raise ParseError(f"payload does not match the result schema ({exc.error_count()} errors)") from exc
