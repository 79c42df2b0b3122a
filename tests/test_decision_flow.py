from __future__ import annotations

import json

import openai
import pytest

from _fakes import FakeOpenAI, FakeRawResponse, chat_body, make_settings, result_payload, status_error
from bigdecision.analysis.errors import ServerBusy
from bigdecision.analysis.ingestor import ResponseIngestor
from bigdecision.connectivity import ConnectivityGate
from bigdecision.schemas.decision import DecisionCategory, TimeFrame
from bigdecision.store.decision_store import DecisionStore
from bigdecision.store.record_store import InMemoryRecordStore
from bigdecision.workflow.decision_flow import DecisionFlow
from bigdecision.workflow.messages import resolve_recommendation
from bigdecision.workflow.states import FlowStep, InvalidTransition


def _ok(**overrides) -> FakeRawResponse:
    return FakeRawResponse(chat_body(json.dumps(result_payload(**overrides))))


def _busy() -> Exception:
    return status_error(openai.RateLimitError, 429)


def _ingestor(responses: list) -> ResponseIngestor:
    return ResponseIngestor(FakeOpenAI(responses), make_settings(), gate=ConnectivityGate(True))


def _flow_at_additional_info(store: DecisionStore) -> DecisionFlow:
    flow = DecisionFlow(store)
    flow.set_title("Should I move to Lisbon?")
    flow.add_option("Move", "Sunny, new network")
    flow.add_option("Stay", "Friends nearby")
    flow.confirm_options()
    return flow


def test_happy_path_stores_record() -> None:
    store = DecisionStore(InMemoryRecordStore())
    flow = _flow_at_additional_info(store)
    flow.set_context("Remote job allowed", DecisionCategory.HOUSING, 5, TimeFrame.MONTH)

    record = flow.run(_ingestor([_ok(recommendation="A")]))

    assert flow.step is FlowStep.RESULT
    assert record is not None and store.records == [record]
    assert record.request.category is DecisionCategory.HOUSING
    assert resolve_recommendation(record.request, record.result).title == "Move"


def test_steps_must_happen_in_order() -> None:
    flow = DecisionFlow(DecisionStore(InMemoryRecordStore()))
    with pytest.raises(InvalidTransition):
        flow.add_option("Too early")
    with pytest.raises(ValueError):
        flow.set_title("   ")
    flow.set_title("Title")
    with pytest.raises(InvalidTransition):
        flow.begin_analysis()


def test_out_of_range_importance_is_rejected() -> None:
    flow = _flow_at_additional_info(DecisionStore(InMemoryRecordStore()))
    for importance in (0, 6, 9):
        with pytest.raises(ValueError):
            flow.set_context(importance=importance)
    assert flow.importance == 3
    flow.set_context(importance=5)
    assert flow.importance == 5


def test_missing_options_are_padded() -> None:
    flow = DecisionFlow(DecisionStore(InMemoryRecordStore()))
    flow.set_title("Adopt a dog?")
    flow.confirm_options()
    assert [o.title for o in flow.options] == ["Yes", "No"]


def test_third_option_is_rejected() -> None:
    flow = DecisionFlow(DecisionStore(InMemoryRecordStore()))
    flow.set_title("Pick one")
    flow.add_option("One")
    flow.add_option("Two")
    with pytest.raises(ValueError):
        flow.add_option("Three")


def test_failures_allow_bounded_retries_then_back_to_edit() -> None:
    store = DecisionStore(InMemoryRecordStore())
    flow = _flow_at_additional_info(store)
    ingestor = _ingestor([_busy()])

    assert flow.run(ingestor) is None
    assert isinstance(flow.error, ServerBusy)
    assert "busy" in flow.error_message
    assert flow.step is FlowStep.ANALYZING

    flow.run(ingestor)
    flow.run(ingestor)
    assert flow.retry_count == 2
    assert not flow.can_retry
    with pytest.raises(InvalidTransition):
        flow.run(ingestor)

    flow.back_to_edit()
    assert flow.step is FlowStep.ADDITIONAL_INFO
    assert flow.retry_count == 0 and flow.error is None
    assert store.records == []


def test_retry_succeeds_and_resets_count() -> None:
    store = DecisionStore(InMemoryRecordStore())
    flow = _flow_at_additional_info(store)
    ingestor = _ingestor([_busy(), _ok()])

    assert flow.run(ingestor) is None
    record = flow.run(ingestor)
    assert record is not None
    assert flow.retry_count == 0
    assert flow.step is FlowStep.RESULT


def test_reanalysis_keeps_record_identity() -> None:
    store = DecisionStore(InMemoryRecordStore())
    flow = _flow_at_additional_info(store)
    original = flow.run(_ingestor([_ok(recommendation="A", confidence=0.6)]))
    store.toggle_favorite(original.record_id)
    favorited = store.get(original.record_id)

    again = DecisionFlow.reanalyze(store, favorited)
    assert again.step is FlowStep.ANALYZING
    assert again.record.result is None

    updated = again.run(_ingestor([_ok(recommendation="B", confidence=0.9)]))

    assert len(store.records) == 1
    assert updated.record_id == original.record_id
    assert updated.created_at == original.created_at
    assert updated.favorited is True
    assert updated.result.recommendation == "B"
    assert store.get(original.record_id).result.confidence == 0.9
