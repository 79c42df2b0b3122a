from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from bigdecision.analysis.ingestor import AnalysisMode, ResponseIngestor
from bigdecision.config import ConfigError, build_openai_client, load_settings
from bigdecision.connectivity import ConnectivityGate, ConnectivityMonitor, tcp_probe
from bigdecision.schemas.decision import DecisionCategory, DecisionOption, DecisionRequest, TimeFrame
from bigdecision.schemas.presets import PRESETS
from bigdecision.store.decision_store import DecisionStore
from bigdecision.store.record_store import get_record_store
from bigdecision.workflow.decision_flow import DecisionFlow
from bigdecision.workflow.messages import resolve_recommendation


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bigdecision", description="Ask a model to weigh two options.")
    parser.add_argument("--preset", type=int, help="index of a built-in example decision")
    parser.add_argument("--list-presets", action="store_true")
    parser.add_argument("--title")
    parser.add_argument("--option-a")
    parser.add_argument("--option-a-description", default="")
    parser.add_argument("--option-b")
    parser.add_argument("--option-b-description", default="")
    parser.add_argument("--info", default="", help="additional context")
    parser.add_argument("--category", choices=[c.value for c in DecisionCategory], default=DecisionCategory.OTHER.value)
    parser.add_argument("--importance", type=int, default=3)
    parser.add_argument("--time-frame", choices=[t.value for t in TimeFrame], default=TimeFrame.DAYS.value)
    parser.add_argument("--stream", action="store_true", help="stream the model's reasoning while it thinks")
    return parser.parse_args(argv)


def _request_from_args(args: argparse.Namespace) -> DecisionRequest:
    if args.preset is not None:
        if not 0 <= args.preset < len(PRESETS):
            raise SystemExit(f"--preset must be between 0 and {len(PRESETS) - 1}")
        return PRESETS[args.preset].to_request()
    if not (args.title and args.option_a and args.option_b):
        raise SystemExit("--title, --option-a and --option-b are required unless --preset is given")
    return DecisionRequest(
        title=args.title,
        option_a=DecisionOption(title=args.option_a, description=args.option_a_description),
        option_b=DecisionOption(title=args.option_b, description=args.option_b_description),
        additional_info=args.info,
        category=DecisionCategory(args.category),
        importance=args.importance,
        time_frame=TimeFrame(args.time_frame),
    )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.list_presets:
        for index, preset in enumerate(PRESETS):
            print(f"{index}: {preset.title} ({preset.option_a.title} / {preset.option_b.title})")
        return 0

    try:
        settings = load_settings()
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        request = _request_from_args(args)
    except ValidationError as exc:
        raise SystemExit(f"Invalid decision: {exc}") from exc

    gate = ConnectivityGate()
    monitor = ConnectivityMonitor(gate, tcp_probe(settings.base_url))
    monitor.check_now()
    monitor.start()

    ingestor = ResponseIngestor(build_openai_client(settings), settings, gate=gate)
    store = DecisionStore(get_record_store())

    flow = DecisionFlow(store)
    flow.set_title(request.title)
    flow.add_option(request.option_a.title, request.option_a.description)
    flow.add_option(request.option_b.title, request.option_b.description)
    flow.confirm_options()
    flow.set_context(request.additional_info, request.category, request.importance, request.time_frame)

    mode = AnalysisMode.STREAMING if args.stream else AnalysisMode.STANDARD
    printed = 0

    def show_reasoning(text: str) -> None:
        nonlocal printed
        sys.stdout.write(text[printed:])
        sys.stdout.flush()
        printed = len(text)

    print(f"\n--- Analysing: {request.title} ---")
    try:
        record = flow.run(ingestor, mode=mode, on_reasoning=show_reasoning)
        while record is None and flow.can_retry:
            print(f"\n{flow.error_message} Retrying ({flow.retry_count + 1}/{flow.max_retries})...")
            printed = 0
            record = flow.run(ingestor, mode=mode, on_reasoning=show_reasoning)
    except KeyboardInterrupt:
        ingestor.cancel()
        print("\nCancelled.")
        return 130
    finally:
        monitor.stop()
        ingestor.shutdown()

    if record is None or record.result is None:
        print(f"\nAnalysis failed: {flow.error_message}")
        return 1

    result = record.result
    chosen = resolve_recommendation(request, result)
    print("\n\n--- Analysis Completed ---")
    print(f"Recommendation: {result.recommendation} ({chosen.title})")
    print(f"Confidence: {result.confidence:.0%}")
    print(f"Reasoning: {result.reasoning}")
    for label, items in (
        (f"Pros of {request.option_a.title}", result.pros_a),
        (f"Cons of {request.option_a.title}", result.cons_a),
        (f"Pros of {request.option_b.title}", result.pros_b),
        (f"Cons of {request.option_b.title}", result.cons_b),
    ):
        print(f"{label}:")
        for item in items:
            print(f"  - {item}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
