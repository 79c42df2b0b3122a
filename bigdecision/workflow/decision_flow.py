from __future__ import annotations

import logging

from bigdecision.analysis.errors import AnalysisError
from bigdecision.analysis.ingestor import AnalysisMode, ReasoningCallback, ResponseIngestor
from bigdecision.schemas.decision import (
    DecisionCategory,
    DecisionOption,
    DecisionRequest,
    DecisionResult,
    TimeFrame,
)
from bigdecision.store.decision_store import DecisionStore
from bigdecision.store.models import DecisionRecord
from bigdecision.workflow.messages import describe_error
from bigdecision.workflow.states import FlowStep, InvalidTransition

logger = logging.getLogger(__name__)

PLACEHOLDER_OPTION_TITLES = ("Yes", "No")


class DecisionFlow:
    """Step machine for creating (or re-running) one decision.

    TITLE -> OPTIONS -> ADDITIONAL_INFO -> ANALYZING -> RESULT. A failed
    analysis stays in ANALYZING with ``error`` set until it is retried or the
    user goes back to edit the additional information.
    """

    def __init__(self, store: DecisionStore, max_retries: int = 2) -> None:
        self.store = store
        self.max_retries = max_retries
        self.step = FlowStep.TITLE
        self.title = ""
        self.options: list[DecisionOption] = []
        self.additional_info = ""
        self.category = DecisionCategory.OTHER
        self.importance = 3
        self.time_frame = TimeFrame.DAYS
        self.request: DecisionRequest | None = None
        self.record: DecisionRecord | None = None
        self.error: AnalysisError | None = None
        self.error_message: str | None = None
        self.retry_count = 0
        self.reasoning_trace = ""

    @classmethod
    def reanalyze(cls, store: DecisionStore, record: DecisionRecord, max_retries: int = 2) -> "DecisionFlow":
        """Flow positioned at ANALYZING for an existing record.

        The record keeps its id, creation time and favorite flag; its result
        is replaced when the new analysis completes.
        """
        flow = cls(store, max_retries=max_retries)
        request = record.request
        flow.title = request.title
        flow.options = [request.option_a, request.option_b]
        flow.additional_info = request.additional_info
        flow.category = request.category
        flow.importance = request.importance
        flow.time_frame = request.time_frame
        flow.record = record.cleared()
        flow.request = request
        flow.step = FlowStep.ANALYZING
        return flow

    def _require(self, action: str, *steps: FlowStep) -> None:
        if self.step not in steps:
            raise InvalidTransition(action, self.step)

    def set_title(self, title: str) -> None:
        self._require("set title", FlowStep.TITLE)
        if not title.strip():
            raise ValueError("Decision title must not be empty")
        self.title = title.strip()
        self.step = FlowStep.OPTIONS

    def add_option(self, title: str, description: str = "") -> DecisionOption:
        self._require("add option", FlowStep.OPTIONS)
        if len(self.options) >= 2:
            raise ValueError("A decision has exactly two options")
        option = DecisionOption(title=title.strip(), description=description.strip())
        self.options.append(option)
        return option

    def confirm_options(self) -> None:
        self._require("confirm options", FlowStep.OPTIONS)
        while len(self.options) < 2:
            self.options.append(DecisionOption(title=PLACEHOLDER_OPTION_TITLES[len(self.options)]))
        self.step = FlowStep.ADDITIONAL_INFO

    def set_context(
        self,
        additional_info: str = "",
        category: DecisionCategory | None = None,
        importance: int | None = None,
        time_frame: TimeFrame | None = None,
    ) -> None:
        self._require("set context", FlowStep.ADDITIONAL_INFO)
        if importance is not None and not 1 <= importance <= 5:
            raise ValueError("Importance must be between 1 and 5")
        self.additional_info = additional_info
        if category is not None:
            self.category = category
        if importance is not None:
            self.importance = importance
        if time_frame is not None:
            self.time_frame = time_frame

    def begin_analysis(self) -> DecisionRequest:
        self._require("begin analysis", FlowStep.ADDITIONAL_INFO)
        self.request = DecisionRequest(
            title=self.title,
            option_a=self.options[0],
            option_b=self.options[1],
            additional_info=self.additional_info,
            category=self.category,
            importance=self.importance,
            time_frame=self.time_frame,
        )
        self._clear_error()
        self.reasoning_trace = ""
        self.step = FlowStep.ANALYZING
        return self.request

    def complete(self, result: DecisionResult) -> DecisionRecord:
        self._require("complete analysis", FlowStep.ANALYZING)
        if self.record is not None:
            record = self.store.update(self.record.with_result(result))
        else:
            record = self.store.add(DecisionRecord(request=self.request, result=result))
        self.record = record
        self._clear_error()
        self.retry_count = 0
        self.step = FlowStep.RESULT
        return record

    def fail(self, error: AnalysisError) -> None:
        self._require("record failure", FlowStep.ANALYZING)
        logger.info("Analysis attempt failed: %s", error)
        self.error = error
        self.error_message = describe_error(error)

    @property
    def can_retry(self) -> bool:
        return self.error is not None and self.retry_count < self.max_retries

    def retry(self) -> DecisionRequest:
        self._require("retry", FlowStep.ANALYZING)
        if not self.can_retry:
            raise InvalidTransition("retry", self.step)
        self.retry_count += 1
        self._clear_error()
        self.reasoning_trace = ""
        return self.request

    def back_to_edit(self) -> None:
        self._require("go back to edit", FlowStep.ANALYZING)
        self._clear_error()
        self.retry_count = 0
        self.request = None
        self.step = FlowStep.ADDITIONAL_INFO

    def run(
        self,
        ingestor: ResponseIngestor,
        mode: AnalysisMode = AnalysisMode.STANDARD,
        on_reasoning: ReasoningCallback | None = None,
    ) -> DecisionRecord | None:
        """Run (or retry) the analysis and record its outcome.

        Returns the stored record on success, ``None`` on failure; the failure
        is available on ``error``/``error_message``.
        """
        if self.step is FlowStep.ADDITIONAL_INFO:
            request = self.begin_analysis()
        elif self.step is FlowStep.ANALYZING and self.error is not None:
            request = self.retry()
        elif self.step is FlowStep.ANALYZING and self.request is not None:
            request = self.request
        else:
            raise InvalidTransition("run analysis", self.step)

        def track(text: str) -> None:
            self.reasoning_trace = text
            if on_reasoning is not None:
                on_reasoning(text)

        try:
            result = ingestor.analyze(request, mode=mode, on_reasoning=track)
        except AnalysisError as exc:
            self.fail(exc)
            return None
        return self.complete(result)

    def _clear_error(self) -> None:
        self.error = None
        self.error_message = None
