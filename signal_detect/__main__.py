"""
ADIZ response analysis CLI.

  python -m signal_detect --data data.json events --category arms
  python -m signal_detect --data data.json actions --dime Diplomatic --year 2023
  python -m signal_detect --data data.json event --date 2024-05-20
  python -m signal_detect --data data.json category --category ships --year 2023
  python -m signal_detect --data data.json compare --a-category arms --b-category diplomatic
  python -m signal_detect --data data.json classify --date 2024-05-20 --json

Exit codes: 0 ok, 1 nothing matched, 2 bad input (missing/invalid dataset, bad args).
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Any, Callable, Optional, Sequence

from common.config import AnalysisSettings
from common.errors import DatasetValidationError, EmptyResultError, NoDataLoadedError
from common.logging import get_logger
from common.schemas import ActionFilter, Event, EventFilter
from reporting import formatter
from shared.datetime_utils import parse_date

from .session import AnalysisSession


def _date_arg(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}: {e}")


def _add_filter_args(p: argparse.ArgumentParser, prefix: str = "", group: str = "") -> None:
    who = f" for group {group}" if group else ""
    p.add_argument(f"--{prefix}category", help=f"Event category{who} ('all' = any)")
    p.add_argument(f"--{prefix}start", type=_date_arg, help=f"Earliest event date{who} (inclusive)")
    p.add_argument(f"--{prefix}end", type=_date_arg, help=f"Latest event date{who} (inclusive)")
    p.add_argument(f"--{prefix}dataset", help=f"Source dataset name{who}")
    p.add_argument(f"--{prefix}year", help=f"Event year{who} ('ALL' = any)")


def _filter_from(args: argparse.Namespace, prefix: str = "") -> EventFilter:
    attr = prefix.replace("-", "_")
    return EventFilter(
        category=getattr(args, f"{attr}category"),
        start_date=getattr(args, f"{attr}start"),
        end_date=getattr(args, f"{attr}end"),
        dataset=getattr(args, f"{attr}dataset"),
        year=getattr(args, f"{attr}year"),
    )


def build_parser(settings: AnalysisSettings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="python -m signal_detect",
        description="Analyze Taiwan ADIZ incursion responses around catalog events.",
    )
    ap.add_argument(
        "--data",
        default=settings.data_file,
        help="Dataset file (.json, or .html embedding `const DATA = {...};`). Defaults to ADIZ_DATA_FILE.",
    )
    ap.add_argument("--json", action="store_true", help="Print the full result as JSON")
    ap.add_argument("--baseline-days", type=int, default=settings.baseline_days, help="Baseline lookback (days)")

    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("events", help="List catalog events")
    _add_filter_args(p)

    p = sub.add_parser("actions", help="List Taiwan actions (taiwan_actions)")
    p.add_argument("--dime", action="append", help="DIME category; repeat for several")
    p.add_argument("--start", type=_date_arg, help="Earliest action date (inclusive)")
    p.add_argument("--end", type=_date_arg, help="Latest action date (inclusive)")
    p.add_argument("--year", help="Action year ('ALL' = any)")

    p = sub.add_parser("event", help="Single-event window analysis")
    p.add_argument("--date", type=_date_arg, required=True)
    p.add_argument("--label", help="Disambiguate events sharing a date")
    p.add_argument("--window", type=int, default=settings.event_window_days, help="Window radius (days)")

    p = sub.add_parser("category", help="Aggregate response across matching events")
    _add_filter_args(p)
    p.add_argument("--window", type=int, default=settings.aggregate_window_days, help="Window radius (days)")

    p = sub.add_parser("compare", help="A/B comparison of two event groups")
    _add_filter_args(p, "a-", "A")
    _add_filter_args(p, "b-", "B")
    p.add_argument("--window", type=int, default=settings.aggregate_window_days, help="Window radius (days)")

    p = sub.add_parser("classify", help="Reactive vs pre-planned classification")
    p.add_argument("--date", type=_date_arg, required=True)
    p.add_argument("--label", help="Disambiguate events sharing a date")
    p.add_argument("--window", type=int, default=settings.classifier_window_days, help="Window radius (days)")

    return ap


def _pick_event(session: AnalysisSession, args: argparse.Namespace, tag: str) -> Optional[Event]:
    matches = session.find_events(args.date, args.label)
    if not matches:
        what = f"'{args.label}' " if args.label else ""
        print(f"[{tag}] no event {what}on {args.date.isoformat()}", file=sys.stderr)
        return None
    if len(matches) > 1:
        print(f"[{tag}] {len(matches)} events on {args.date.isoformat()}; using '{matches[0].label}' (pass --label to choose)")
    return matches[0]


def _emit(args: argparse.Namespace, result: Any, render: Callable[[Any], str]) -> None:
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(render(result))


def run(args: argparse.Namespace, settings: AnalysisSettings) -> int:
    session = AnalysisSession(settings)
    ds = session.load_file(args.data)
    print(f"[LOAD] {args.data}: {len(ds.baseline)} baseline day(s), {ds.event_count} event(s), {len(ds.warnings)} warning(s)")

    if args.command == "events":
        events = ds.catalog.query(_filter_from(args))
        if args.json:
            print(json.dumps([e.model_dump(mode="json") for e in events], ensure_ascii=False, indent=2))
        else:
            for e in events:
                print(formatter.one_line(e))
            print(f"[EVENTS] {len(events)} match(es)")
        return 0 if events else 1

    if args.command == "actions":
        flt = ActionFilter(dime_category=args.dime, start_date=args.start, end_date=args.end, year=args.year)
        actions = session.taiwan_actions(flt)
        if args.json:
            print(json.dumps([a.model_dump(mode="json") for a in actions], ensure_ascii=False, indent=2))
        else:
            for a in actions:
                print(formatter.action_line(a))
            print(f"[ACTIONS] {len(actions)} match(es)")
        return 0 if actions else 1

    if args.command == "event":
        event = _pick_event(session, args, "EVENT")
        if event is None:
            return 1
        result = session.analyze_event(event, args.window, args.baseline_days)
        _emit(args, result, formatter.render_event)
        return 0

    if args.command == "category":
        group = session.analyze_category(_filter_from(args), args.window, args.baseline_days)
        _emit(args, group, formatter.render_group)
        print(f"[CATEGORY] {group.event_count} event(s) aggregated")
        return 0

    if args.command == "compare":
        cmp = session.compare(_filter_from(args, "a-"), _filter_from(args, "b-"), args.window, args.baseline_days)
        _emit(args, cmp, formatter.render_comparison)
        print(f"[COMPARE] more inflammatory: Group {cmp.comparison.more_inflammatory}")
        return 0

    if args.command == "classify":
        event = _pick_event(session, args, "CLASSIFY")
        if event is None:
            return 1
        result = session.classify(event, args.window, args.baseline_days)
        _emit(args, result, formatter.render_classification)
        c = result.classification
        print(f"[CLASSIFY] {c.verdict} ({c.confidence}) score={c.reactive_score:.2f}")
        return 0

    print(f"[CLI] unknown command {args.command!r}", file=sys.stderr)
    return 2


def main(argv: Optional[Sequence[str]] = None) -> int:
    # IMPORTANT: resolve env at runtime (not import time)
    settings = AnalysisSettings.from_env()
    args = build_parser(settings).parse_args(argv)
    log = get_logger("signal_detect")
    log.info("signal_detect %s starting (data=%s)", args.command, args.data)

    if not args.data:
        print("[LOAD] no dataset file given (use --data or ADIZ_DATA_FILE)", file=sys.stderr)
        return 2

    try:
        return run(args, settings)
    except (FileNotFoundError, DatasetValidationError, NoDataLoadedError) as e:
        print(f"[LOAD] {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # Unreadable file contents (bad JSON, no embedded DATA object)
        print(f"[LOAD] {e}", file=sys.stderr)
        return 2
    except EmptyResultError as e:
        group = f" (group {e.group})" if e.group else ""
        print(f"[{args.command.upper()}] {e}{group}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
