from __future__ import annotations

from bigdecision.analysis.errors import (
    AnalysisCancelled,
    InvalidResponse,
    NetworkUnavailable,
    ParseError,
    RequestFailed,
    ServerBusy,
)
from bigdecision.schemas.decision import DecisionOption, DecisionRequest, DecisionResult

_MESSAGES = {
    NetworkUnavailable: "No network connection. Check your connection and try again.",
    ServerBusy: "The analysis service is busy right now. Please try again in a moment.",
    InvalidResponse: "The analysis service returned an unexpected response.",
    ParseError: "The analysis could not be read. Please try again.",
    AnalysisCancelled: "The analysis was cancelled.",
}


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, RequestFailed):
        return f"The request could not be completed ({exc.detail})."
    for kind, message in _MESSAGES.items():
        if isinstance(exc, kind):
            return message
    return "An unknown error occurred."


def resolve_recommendation(request: DecisionRequest, result: DecisionResult) -> DecisionOption:
    return request.option_a if result.recommendation == "A" else request.option_b
