from __future__ import annotations

import json

import pytest

from _fakes import result_payload
from bigdecision.analysis.errors import ParseError
from bigdecision.analysis.extraction import decode_result, strip_code_fences


def test_strip_code_fences_is_noop_without_fences() -> None:
    assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'


def test_strip_code_fences_removes_json_language_tag() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


def test_strip_code_fences_keeps_only_fenced_block_inside_prose() -> None:
    content = 'Here is my answer:\n```json\n{"a": 1}\n```\nHope this helps!'
    assert strip_code_fences(content) == '{"a": 1}'


def test_decode_fenced_result() -> None:
    content = "```json\n" + json.dumps(result_payload()) + "\n```"
    result = decode_result(content)
    assert result.recommendation == "B"
    assert 0 <= result.confidence <= 1
    assert result.pros_b == ["Faster learning", "Higher salary"]
    assert result.reasoning_trace is None


def test_decode_unfenced_result() -> None:
    result = decode_result(json.dumps(result_payload(recommendation="A")))
    assert result.recommendation == "A"


def test_decode_extracts_object_from_surrounding_prose() -> None:
    content = f"After weighing both options: {json.dumps(result_payload())} Good luck!"
    assert decode_result(content).reasoning == "Option B balances growth and risk."


def test_decode_accepts_empty_lists_and_attaches_trace() -> None:
    payload = result_payload(prosA=[], consA=[], prosB=[], consB=[])
    result = decode_result(json.dumps(payload), reasoning_trace="thinking...")
    assert result.pros_a == [] and result.cons_b == []
    assert result.reasoning_trace == "thinking..."


@pytest.mark.parametrize(
    "content",
    [
        "",
        "not-json-at-all",
        "```json\n{broken\n```",
        json.dumps(result_payload(recommendation="C")),
        json.dumps(result_payload(confidence=1.5)),
        json.dumps({k: v for k, v in result_payload().items() if k != "prosA"}),
        json.dumps([result_payload()]),
    ],
)
def test_decode_rejects_unusable_content(content: str) -> None:
    with pytest.raises(ParseError):
        decode_result(content)
