from __future__ import annotations

from dataclasses import dataclass

from bigdecision.schemas.decision import DecisionCategory, DecisionOption, DecisionRequest, TimeFrame


@dataclass(frozen=True)
class PresetDecision:
    title: str
    option_a: DecisionOption
    option_b: DecisionOption
    category: DecisionCategory
    importance: int
    time_frame: TimeFrame

    def to_request(self) -> DecisionRequest:
        return DecisionRequest(
            title=self.title,
            option_a=self.option_a,
            option_b=self.option_b,
            additional_info="",
            category=self.category,
            importance=self.importance,
            time_frame=self.time_frame,
        )


PRESETS: list[PresetDecision] = [
    PresetDecision(
        title="Should I accept the new job offer?",
        option_a=DecisionOption(title="Accept the offer", description="Higher salary, but likely more pressure"),
        option_b=DecisionOption(title="Stay where I am", description="Stable role, limited room to grow"),
        category=DecisionCategory.WORK,
        importance=5,
        time_frame=TimeFrame.WEEK,
    ),
    PresetDecision(
        title="Should I start my own company?",
        option_a=DecisionOption(title="Start the company", description="More upside, much higher risk"),
        option_b=DecisionOption(title="Keep my job", description="Steady income, lower risk"),
        category=DecisionCategory.WORK,
        importance=5,
        time_frame=TimeFrame.MONTH,
    ),
    PresetDecision(
        title="Should I move to a new city?",
        option_a=DecisionOption(title="Move", description="New opportunities, but I have to start over"),
        option_b=DecisionOption(title="Stay", description="Familiar surroundings, may miss new chances"),
        category=DecisionCategory.HOUSING,
        importance=4,
        time_frame=TimeFrame.MONTH,
    ),
    PresetDecision(
        title="Where should I go on holiday?",
        option_a=DecisionOption(title="Beach holiday", description="Rest and sunshine"),
        option_b=DecisionOption(title="City trip", description="Culture and sightseeing"),
        category=DecisionCategory.TRAVEL,
        importance=2,
        time_frame=TimeFrame.WEEK,
    ),
    PresetDecision(
        title="How should I invest my savings?",
        option_a=DecisionOption(title="Stocks", description="Higher potential return, higher risk"),
        option_b=DecisionOption(title="Conservative funds", description="Lower return, more stable"),
        category=DecisionCategory.INVESTMENT,
        importance=4,
        time_frame=TimeFrame.DAYS,
    ),
    PresetDecision(
        title="Should I continue my studies?",
        option_a=DecisionOption(title="Start working", description="Gain experience and income now"),
        option_b=DecisionOption(title="Keep studying", description="Better degree, costs time and money"),
        category=DecisionCategory.EDUCATION,
        importance=4,
        time_frame=TimeFrame.MONTH,
    ),
    PresetDecision(
        title="Should I buy a car?",
        option_a=DecisionOption(title="Keep using public transport", description="Cheaper and greener, less convenient"),
        option_b=DecisionOption(title="Buy a car", description="More convenient, higher running costs"),
        category=DecisionCategory.SHOPPING,
        importance=3,
        time_frame=TimeFrame.WEEK,
    ),
]
