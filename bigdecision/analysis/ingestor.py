from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Union

import openai
from openai import OpenAI
from pydantic import ValidationError

from bigdecision.analysis.errors import (
    AnalysisCancelled,
    AnalysisError,
    InvalidResponse,
    NetworkUnavailable,
    RequestFailed,
    error_for_status,
)
from bigdecision.analysis.extraction import decode_result
from bigdecision.analysis.prompts import build_messages
from bigdecision.analysis.sse import StreamAccumulator, StreamDone, parse_sse_line
from bigdecision.config import Settings
from bigdecision.connectivity import ConnectivityGate
from bigdecision.delivery import Dispatcher, ImmediateDispatcher
from bigdecision.schemas.chat_completion import ChatResponse
from bigdecision.schemas.decision import DecisionRequest, DecisionResult

logger = logging.getLogger(__name__)

ReasoningCallback = Callable[[str], None]
Outcome = Union[DecisionResult, AnalysisError]
OutcomeCallback = Callable[[Outcome], None]


class AnalysisMode(str, Enum):
    STANDARD = "standard"
    STREAMING = "streaming"


class _ActiveRun:
    def __init__(self) -> None:
        self.cancelled = threading.Event()
        self.response: Any = None

    def cancel(self) -> None:
        self.cancelled.set()
        response = self.response
        if response is not None:
            # Unblocks a reader waiting on the socket.
            response.close()


class ResponseIngestor:
    """Turns a DecisionRequest into a DecisionResult via a chat-completion endpoint.

    ``analyze`` runs on the calling thread; ``start`` runs it on a background
    worker and routes updates and the outcome through a dispatcher. At most
    one run is active per ingestor: beginning a new one cancels the previous.
    """

    def __init__(
        self,
        openai_client: OpenAI,
        settings: Settings,
        gate: ConnectivityGate | None = None,
    ) -> None:
        self.openai_client = openai_client
        self.settings = settings
        self.gate = gate or ConnectivityGate()
        self._lock = threading.Lock()
        self._active: _ActiveRun | None = None
        self._executor: ThreadPoolExecutor | None = None

    def _request_kwargs(self, request: DecisionRequest, streaming: bool) -> dict[str, Any]:
        sampling = self.settings.sampling
        return {
            "model": self.settings.model,
            "messages": build_messages(request, streaming=streaming),
            "stream": streaming,
            "max_tokens": self.settings.stream_max_tokens if streaming else self.settings.max_tokens,
            "temperature": sampling.temperature,
            "top_p": sampling.top_p,
            "frequency_penalty": sampling.frequency_penalty,
            "n": sampling.n,
            # Not part of the OpenAI schema; sent as-is in the body.
            "extra_body": {"top_k": sampling.top_k},
        }

    @staticmethod
    def _translate(exc: Exception) -> AnalysisError:
        if isinstance(exc, openai.APIStatusError):
            return error_for_status(exc.status_code, str(exc))
        if isinstance(exc, openai.APIResponseValidationError):
            return InvalidResponse(str(exc))
        return RequestFailed(str(exc) or exc.__class__.__name__)

    def _begin_run(self) -> _ActiveRun:
        run = _ActiveRun()
        with self._lock:
            previous, self._active = self._active, run
        if previous is not None:
            logger.info("Superseding in-flight analysis")
            previous.cancel()
        return run

    def _end_run(self, run: _ActiveRun) -> None:
        with self._lock:
            if self._active is run:
                self._active = None

    def cancel(self) -> None:
        with self._lock:
            run, self._active = self._active, None
        if run is not None:
            logger.info("Cancelling in-flight analysis")
            run.cancel()

    def analyze(
        self,
        request: DecisionRequest,
        mode: AnalysisMode = AnalysisMode.STANDARD,
        on_reasoning: ReasoningCallback | None = None,
    ) -> DecisionResult:
        if not self.gate.is_reachable:
            raise NetworkUnavailable()
        run = self._begin_run()
        try:
            result = self._analyze(request, mode, run, on_reasoning)
            if run.cancelled.is_set():
                raise AnalysisCancelled()
            return result
        finally:
            self._end_run(run)

    def _analyze(
        self,
        request: DecisionRequest,
        mode: AnalysisMode,
        run: _ActiveRun,
        on_reasoning: ReasoningCallback | None,
    ) -> DecisionResult:
        logger.info("Requesting decision analysis (mode=%s, model=%s)", mode.value, self.settings.model)
        if mode is AnalysisMode.STREAMING:
            result = self._analyze_streaming(request, run, on_reasoning)
        else:
            result = self._analyze_standard(request, run)
        logger.info("Analysis finished: recommendation=%s confidence=%.2f", result.recommendation, result.confidence)
        return result

    def _analyze_standard(self, request: DecisionRequest, run: _ActiveRun) -> DecisionResult:
        kwargs = self._request_kwargs(request, streaming=False)
        try:
            raw = self.openai_client.chat.completions.with_raw_response.create(**kwargs)
        except openai.APIError as exc:
            logger.warning("Decision analysis request failed: %s", exc)
            raise self._translate(exc) from exc

        if run.cancelled.is_set():
            raise AnalysisCancelled()
        if raw.status_code != 200:
            logger.warning("Decision analysis returned HTTP %s", raw.status_code)
            raise error_for_status(raw.status_code)

        try:
            envelope = ChatResponse.model_validate_json(raw.text)
        except ValidationError as exc:
            raise InvalidResponse("malformed response body") from exc
        if not envelope.choices:
            raise InvalidResponse("no choices in response")
        message = envelope.choices[0].message
        if message.content is None:
            raise InvalidResponse("missing message content")

        return decode_result(message.content, reasoning_trace=message.reasoning_content)

    def _analyze_streaming(
        self,
        request: DecisionRequest,
        run: _ActiveRun,
        on_reasoning: ReasoningCallback | None,
    ) -> DecisionResult:
        accumulator = StreamAccumulator()
        kwargs = self._request_kwargs(request, streaming=True)
        try:
            self._consume_stream(kwargs, run, accumulator, on_reasoning)
        except AnalysisError:
            raise
        except Exception as exc:
            # Closing the response on cancel surfaces as whatever the transport raises.
            if run.cancelled.is_set():
                raise AnalysisCancelled() from exc
            logger.warning("Decision analysis stream failed: %s", exc)
            raise self._translate(exc) from exc

        if run.cancelled.is_set():
            raise AnalysisCancelled()
        return decode_result(accumulator.content, reasoning_trace=accumulator.reasoning or None)

    def _consume_stream(
        self,
        kwargs: dict[str, Any],
        run: _ActiveRun,
        accumulator: StreamAccumulator,
        on_reasoning: ReasoningCallback | None,
    ) -> None:
        with self.openai_client.chat.completions.with_streaming_response.create(**kwargs) as response:
            run.response = response
            if run.cancelled.is_set():
                raise AnalysisCancelled()
            if response.status_code != 200:
                logger.warning("Decision analysis stream returned HTTP %s", response.status_code)
                raise error_for_status(response.status_code)

            for line in response.iter_lines():
                if run.cancelled.is_set():
                    raise AnalysisCancelled()
                try:
                    delta = parse_sse_line(line)
                except StreamDone:
                    break
                if delta is None:
                    continue
                reasoning = accumulator.apply(delta)
                if reasoning is not None and on_reasoning is not None:
                    on_reasoning(reasoning)
                if accumulator.finished:
                    break

    def start(
        self,
        request: DecisionRequest,
        mode: AnalysisMode = AnalysisMode.STREAMING,
        on_reasoning: ReasoningCallback | None = None,
        on_outcome: OutcomeCallback | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> Future:
        """Run ``analyze`` on a background worker.

        Reasoning updates and the terminal outcome (a DecisionResult or an
        AnalysisError) are handed to ``dispatcher`` in production order. A
        result is never delivered once the run has been cancelled; the
        outcome becomes ``AnalysisCancelled`` instead.
        """
        dispatcher = dispatcher or ImmediateDispatcher()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="decision-analysis")

        if not self.gate.is_reachable:
            run = None
        else:
            run = self._begin_run()

        def publish(text: str) -> None:
            if on_reasoning is not None:
                dispatcher.dispatch(on_reasoning, text)

        def deliver(outcome: Outcome) -> None:
            if run is not None and run.cancelled.is_set() and isinstance(outcome, DecisionResult):
                outcome = AnalysisCancelled()
            if on_outcome is not None:
                on_outcome(outcome)

        def work() -> DecisionResult:
            try:
                if run is None:
                    raise NetworkUnavailable()
                result = self._analyze(request, mode, run, publish)
                if run.cancelled.is_set():
                    raise AnalysisCancelled()
            except AnalysisError as exc:
                dispatcher.dispatch(deliver, exc)
                raise
            except Exception as exc:
                if run is not None and run.cancelled.is_set():
                    failure: AnalysisError = AnalysisCancelled()
                else:
                    failure = RequestFailed(str(exc) or exc.__class__.__name__)
                dispatcher.dispatch(deliver, failure)
                raise
            finally:
                if run is not None:
                    self._end_run(run)
            dispatcher.dispatch(deliver, result)
            return result

        return self._executor.submit(work)

    def shutdown(self) -> None:
        self.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
