from __future__ import annotations

from enum import Enum


class FlowStep(str, Enum):
    TITLE = "TITLE"
    OPTIONS = "OPTIONS"
    ADDITIONAL_INFO = "ADDITIONAL_INFO"
    ANALYZING = "ANALYZING"
    RESULT = "RESULT"


class InvalidTransition(ValueError):
    def __init__(self, action: str, step: FlowStep) -> None:
        super().__init__(f"Cannot {action} while in step {step.value}")
        self.action = action
        self.step = step
