"""
ETG estimator CLI. Run from project root: python -m etg_app.main
Builds a drinking log from --session options (or a demo), prints the estimate,
and optionally saves a graph.

Session format: TYPE:AMOUNT:UNIT@TIME[/HOURS], e.g. beer:3:drinks@2026-10-18T20:00/2
Custom drinks carry their ABV: custom=8.5:500:ml@2026-10-18T20:00
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta

from etg_app.engine import estimate_request, estimate_to_dict
from etg_app.errors import EtgInputError
from etg_app.graph import save_etg_graph
from etg_app.inputs import DEFAULT_THRESHOLD, parse_request, parse_time


def parse_session_arg(text: str) -> dict:
    """Turn a --session value into the raw session dict the engine parses."""
    drink, sep, when = text.partition("@")
    parts = drink.split(":")
    if not sep or len(parts) != 3:
        raise EtgInputError(f"Bad --session {text!r}; expected TYPE:AMOUNT:UNIT@TIME[/HOURS]")
    drink_type, amount, unit = parts
    custom_abv = None
    if "=" in drink_type:
        drink_type, custom_abv = drink_type.split("=", 1)
    time, _, duration = when.partition("/")
    return {
        "drink_type": drink_type,
        "custom_abv": custom_abv,
        "amount": amount,
        "unit": unit,
        "time": time,
        "duration": duration or None,
        "duration_unit": "hours",
    }


def format_hours(hours: float) -> str:
    days, minutes = divmod(round(hours * 60), 24 * 60)
    whole, minutes = divmod(minutes, 60)
    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if whole > 0:
        parts.append(f"{whole}h")
    if minutes > 0 and days == 0:
        parts.append(f"{minutes}m")
    return " ".join(parts) or "0m"


def main(argv=None):
    parser = argparse.ArgumentParser(description="ETG estimator: log drinking sessions and predict test outcomes")
    parser.add_argument("--weight", type=float, default=70.0, help="Body weight (kg, or lb with --lbs)")
    parser.add_argument("--lbs", action="store_true", help="Weight is in pounds")
    parser.add_argument("--female", action="store_true", help="Female (default male)")
    parser.add_argument("--metabolism", choices=["slow", "average", "fast"], default="average")
    parser.add_argument("--threshold", type=int, default=DEFAULT_THRESHOLD, help="Test cutoff (ng/mL)")
    parser.add_argument("--test-time", type=str, metavar="TIME", help="Scheduled test time (YYYY-MM-DDTHH:MM)")
    parser.add_argument("--now", type=str, metavar="TIME", help="Reference time (default: current time)")
    parser.add_argument("--session", action="append", default=[], metavar="SESSION", help="Drinking session (repeatable)")
    parser.add_argument("--demo", action="store_true", help="Run with demo session (3 beers over 2h, 24h ago)")
    parser.add_argument("--graph", type=str, metavar="FILE", help="Save ETG graph to FILE (e.g. etg_graph.png)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        now = parse_time(args.now, "--now") or datetime.now()
        sessions = [parse_session_arg(s) for s in args.session]
        if args.demo or not sessions:
            start = (now - timedelta(hours=24)).strftime("%Y-%m-%dT%H:%M")
            sessions = [{"drink_type": "beer", "amount": 3, "unit": "drinks", "time": start, "duration": 2}]
            print(f"Demo session: 3 beers over 2h starting {start}")

        request = parse_request({
            "weight": args.weight,
            "weight_unit": "lbs" if args.lbs else "kg",
            "gender": "female" if args.female else "male",
            "metabolism_rate": args.metabolism,
            "test_threshold": args.threshold,
            "test_time": args.test_time,
            "sessions": sessions,
        })
        estimate, prediction = estimate_request(request, now=now)
    except EtgInputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    result = estimate_to_dict(request, estimate, prediction)
    print(f"Total alcohol: {result['total_alcohol_grams']}g ({result['total_standard_drinks']} standard drinks)")
    print(f"Peak ETG: {result['peak_etg']:,} ng/mL")
    print(f"Current ETG: {result['current_etg']:,} ng/mL ({result['current_status']})")
    if estimate.is_safe_now:
        print(f"Below {request.threshold} ng/mL now")
    else:
        print(f"Below {request.threshold} ng/mL in {format_hours(estimate.hours_until_safe)} (after {result['safe_time']})")
    if prediction is not None:
        verdict = "Likely PASS" if prediction.likely_pass else "Likely FAIL"
        print(f"Test at {result['test_prediction']['test_time']}: {verdict} "
              f"(estimated {result['test_prediction']['estimated_etg']} ng/mL)")

    if args.graph:
        try:
            path = save_etg_graph(estimate, output_path=args.graph)
            print(f"Graph saved: {path}")
        except ImportError:
            print("matplotlib not installed. pip install matplotlib", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
