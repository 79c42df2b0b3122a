from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Tuple

from bigdecision.schemas.decision import DecisionRequest

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


@lru_cache(maxsize=None)
def load_prompts(prompt_name: str) -> Tuple[str, str]:
    prompt_file = PROMPTS_DIR / f"{prompt_name}_v1.md"
    if not prompt_file.exists():
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")

    content = prompt_file.read_text(encoding="utf-8")
    system_msg_start = content.find("## System Message")
    user_msg_start = content.find("## User Message Template")

    if system_msg_start == -1 or user_msg_start == -1:
        raise ValueError(f"System Message or User Message Template sections not found in {prompt_file}")

    system_msg = content[system_msg_start + len("## System Message"): user_msg_start].strip().strip("---").strip()
    user_msg_template = content[user_msg_start + len("## User Message Template"):].strip().strip("---").strip()

    return system_msg, user_msg_template


def build_messages(request: DecisionRequest, streaming: bool) -> list[dict[str, str]]:
    system_msg, user_msg_template = load_prompts("decision_stream" if streaming else "decision")
    user_msg = user_msg_template.format(
        title=request.title,
        option_a_title=request.option_a.title,
        option_a_description=request.option_a.description,
        option_b_title=request.option_b.title,
        option_b_description=request.option_b.description,
        additional_info=request.additional_info.strip() or "None",
        importance=request.importance,
        time_frame=request.time_frame.value,
        category=request.category.value,
    )
    return [
        {"role": "system", "content": system_msg},
        {"role": "user", "content": user_msg},
    ]
