from __future__ import annotations

import json
import threading
from types import SimpleNamespace
from typing import Any, Iterable

import httpx

from bigdecision.config import Settings
from bigdecision.schemas.decision import DecisionCategory, DecisionOption, DecisionRequest, TimeFrame

API_URL = "https://api.example.test/v1/chat/completions"


def result_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "recommendation": "B",
        "confidence": 0.72,
        "reasoning": "Option B balances growth and risk.",
        "prosA": ["Stable income"],
        "consA": ["Limited growth"],
        "prosB": ["Faster learning", "Higher salary"],
        "consB": ["Longer commute"],
    }
    payload.update(overrides)
    return payload


def chat_body(content: str | None, reasoning: str | None = None) -> str:
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if reasoning is not None:
        message["reasoning_content"] = reasoning
    return json.dumps({"choices": [{"message": message, "finish_reason": "stop"}]})


def sse_frame(content: str | None = None, reasoning: str | None = None, finish_reason: str | None = None) -> str:
    delta: dict[str, Any] = {}
    if content is not None:
        delta["content"] = content
    if reasoning is not None:
        delta["reasoning_content"] = reasoning
    return "data: " + json.dumps({"choices": [{"delta": delta, "finish_reason": finish_reason}]})


def make_request(**overrides: Any) -> DecisionRequest:
    fields: dict[str, Any] = {
        "title": "Which job should I take?",
        "option_a": DecisionOption(title="Stay at current company", description="Comfortable team"),
        "option_b": DecisionOption(title="Join the startup", description="Equity and risk"),
        "additional_info": "I have a mortgage.",
        "category": DecisionCategory.WORK,
        "importance": 4,
        "time_frame": TimeFrame.WEEK,
    }
    fields.update(overrides)
    return DecisionRequest(**fields)


def make_settings() -> Settings:
    return Settings(api_key="test-key", base_url="https://api.example.test/v1", model="test-model")


def status_error(error_cls: type, status_code: int) -> Exception:
    response = httpx.Response(status_code, request=httpx.Request("POST", API_URL))
    return error_cls(f"HTTP {status_code}", response=response, body=None)


class FakeRawResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code


class FakeStreamResponse:
    def __init__(self, lines: Iterable[str], status_code: int = 200) -> None:
        self.lines = list(lines)
        self.status_code = status_code
        self.closed = False
        self.consumed = 0

    def __enter__(self) -> "FakeStreamResponse":
        return self

    def __exit__(self, *exc_info: Any) -> bool:
        self.close()
        return False

    def close(self) -> None:
        self.closed = True

    def iter_lines(self):
        for line in self.lines:
            if self.closed:
                return
            self.consumed += 1
            yield line


class BlockingStreamResponse(FakeStreamResponse):
    """Yields its first line, then waits until released or closed."""

    def __init__(self, first: str, rest: Iterable[str]) -> None:
        super().__init__([first, *rest])
        self.release = threading.Event()

    def close(self) -> None:
        self.closed = True
        self.release.set()

    def iter_lines(self):
        self.consumed += 1
        yield self.lines[0]
        self.release.wait(timeout=5)
        for line in self.lines[1:]:
            if self.closed:
                return
            self.consumed += 1
            yield line


class FakeCompletions:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = responses
        self.calls: list[dict[str, Any]] = []
        self.with_raw_response = SimpleNamespace(create=self._create)
        self.with_streaming_response = SimpleNamespace(create=self._create)

    def _create(self, **kwargs: Any) -> Any:
        item = self.responses[min(len(self.calls), len(self.responses) - 1)]
        self.calls.append(kwargs)
        if isinstance(item, Exception):
            raise item
        return item


class FakeOpenAI:
    def __init__(self, responses: list[Any]) -> None:
        self.chat = SimpleNamespace(completions=FakeCompletions(responses))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.chat.completions.calls


class BrokenStreamResponse(FakeStreamResponse):
    """Yields its lines, then fails the way a dropped or closed connection does."""

    def __init__(self, lines: Iterable[str], error: Exception) -> None:
        super().__init__(lines)
        self.error = error

    def iter_lines(self):
        for line in self.lines:
            self.consumed += 1
            yield line
        raise self.error
