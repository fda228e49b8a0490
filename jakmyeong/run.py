"""
CLI wrapper for compute_report().

Usage:
    jakmyeong --surname 김 --birth-date YYYY-MM-DD --birth-time HH:MM \
        --gender male --hanja data/hanja.xml [--hanja MORE.xml] \
        [--birth-order N] [--name1 X] [--name2 Y] \
        [--latitude LAT --longitude LON] [--top-k K] [--chart-only] [--output PATH]
"""

import argparse
import json
import logging
import sys

from jakmyeong.create_report import compute_report, save_report
from jakmyeong.errors import InvalidInputError
from jakmyeong.scoring import ScoringConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Recommend saju-based hanja names.")
    parser.add_argument("--surname", required=True)
    parser.add_argument("--birth-date", required=True, dest="birth_date")
    parser.add_argument("--birth-time", required=True, dest="birth_time")
    parser.add_argument("--gender", required=True, choices=["male", "female"])
    parser.add_argument("--hanja", action="append", default=[], dest="hanja_paths",
                        help="hanja dictionary XML (repeatable)")
    parser.add_argument("--surnames", dest="surname_path", default=None,
                        help="surname XML, keeps surname glyphs out of names")
    parser.add_argument("--birth-order", dest="birth_order", type=int, default=None)
    parser.add_argument("--name1", default=None, help="preferred first character or reading")
    parser.add_argument("--name2", default=None, help="preferred second character or reading")
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--longitude", type=float, default=None)
    parser.add_argument("--top-k", dest="top_k", type=int, default=None)
    parser.add_argument("--chart-only", dest="chart_only", action="store_true")
    parser.add_argument("--output", default=None, help="write the report JSON here")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = ScoringConfig.create_default()
    if args.top_k is not None:
        config = config.with_top_k(args.top_k)

    try:
        report = compute_report(
            surname=args.surname,
            birth_date=args.birth_date,
            birth_time=args.birth_time,
            gender=args.gender,
            hanja_paths=args.hanja_paths,
            surname_path=args.surname_path,
            birth_order=args.birth_order,
            name1=args.name1,
            name2=args.name2,
            latitude=args.latitude,
            longitude=args.longitude,
            config=config,
            chart_only=args.chart_only,
        )
    except InvalidInputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.output:
        save_report(report, args.output)
    print(json.dumps(report, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
