from __future__ import annotations

from _fakes import make_request
from bigdecision.analysis.prompts import build_messages, load_prompts
from bigdecision.schemas.presets import PRESETS


def test_prompt_files_have_both_sections() -> None:
    for name in ("decision", "decision_stream"):
        system_msg, user_template = load_prompts(name)
        assert '"recommendation"' in system_msg
        assert not system_msg.startswith("-") and not user_template.endswith("-")
        assert "{title}" in user_template


def test_user_message_serialises_every_request_field() -> None:
    request = make_request()
    user_msg = build_messages(request, streaming=False)[1]["content"]
    for expected in (
        "Which job should I take?",
        "Stay at current company",
        "Comfortable team",
        "Join the startup",
        "Equity and risk",
        "I have a mortgage.",
        "4/5",
        "week",
        "work",
    ):
        assert expected in user_msg


def test_empty_additional_info_is_spelled_out() -> None:
    request = PRESETS[0].to_request()
    user_msg = build_messages(request, streaming=True)[1]["content"]
    assert "Additional information: None" in user_msg


def test_streaming_system_prompt_asks_for_narrated_reasoning() -> None:
    standard = build_messages(make_request(), streaming=False)
    streaming = build_messages(make_request(), streaming=True)
    assert standard[1] == streaming[1]
    assert "Think out loud" in streaming[0]["content"]
    assert "Think out loud" not in standard[0]["content"]
