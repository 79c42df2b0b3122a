from __future__ import annotations


class AnalysisError(Exception):
    """Base class for every terminal failure of one analysis attempt."""


class NetworkUnavailable(AnalysisError):
    def __init__(self) -> None:
        super().__init__("Network unavailable.")


class RequestFailed(AnalysisError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Request failed: {detail}")
        self.detail = detail


class ServerBusy(AnalysisError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server busy (HTTP {status_code}).")
        self.status_code = status_code


class InvalidResponse(AnalysisError):
    def __init__(self, detail: str = "missing content") -> None:
        super().__init__(f"Invalid response: {detail}")
        self.detail = detail


class ParseError(AnalysisError):
    def __init__(self, detail: str = "content is not a decision result") -> None:
        super().__init__(f"Could not parse analysis result: {detail}")
        self.detail = detail


class AnalysisCancelled(AnalysisError):
    def __init__(self) -> None:
        super().__init__("Analysis cancelled.")


def error_for_status(status_code: int, detail: str = "") -> AnalysisError:
    if status_code == 429 or 500 <= status_code <= 599:
        return ServerBusy(status_code)
    return RequestFailed(detail or f"unexpected HTTP status {status_code}")
