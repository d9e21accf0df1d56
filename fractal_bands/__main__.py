"""CLI entry point: replay a CSV of bars through the configured engines.

Usage:
    python -m fractal_bands bars.csv
    python -m fractal_bands bars.csv --config indicators.yaml --timeframe 15m --digits 5
    python -m fractal_bands bars.csv --warmup 500 --tail 20 --output result.json
"""

import argparse
import json
import logging
import sys

from fractal_bands.config_loader import load_indicator_config
from fractal_bands.models.bars import BarSeries
from fractal_bands.models.timeframe import timeframe_minutes
from fractal_bands.replay import ReplayRunner, load_bars_csv
from fractal_bands.settings import get_settings

logger = logging.getLogger(__name__)


def parse_timeframe(value: str) -> str:
    try:
        timeframe_minutes(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Replay bars through moving-average band and FDI engines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fractal_bands bars.csv
  python -m fractal_bands bars.csv --config indicators.yaml --timeframe 1h
  python -m fractal_bands bars.csv --warmup 500 --tail 5 -o out.json
        """,
    )
    parser.add_argument("csv", help="CSV with timestamp,open,high,low,close[,volume]")
    parser.add_argument(
        "--config", "-c",
        default=settings.config_path,
        help=f"Engine YAML config (default: {settings.config_path})",
    )
    parser.add_argument(
        "--timeframe",
        type=parse_timeframe,
        default=settings.timeframe,
        help=f"Timeframe of one bar in the CSV (default: {settings.timeframe})",
    )
    parser.add_argument(
        "--digits",
        type=int,
        default=settings.digits,
        help="Instrument price precision (default: unrounded)",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=0,
        help="Bars loaded as history in one full cycle before replaying the rest",
    )
    parser.add_argument(
        "--tail",
        type=int,
        default=10,
        help="Newest bars to print per buffer (default: 10)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output file path for JSON buffers",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def _fmt(value: float | None) -> str:
    return "-" if value is None else f"{value:.6f}"


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    bars = load_bars_csv(args.csv)
    if not bars:
        logger.error("No bars in %s", args.csv)
        return 1

    series = BarSeries(timeframe=args.timeframe, digits=args.digits)
    config = load_indicator_config(args.config, default_max_visible=settings.max_visible)
    engines = config.build_engines(series)
    runner = ReplayRunner(series, engines)

    warmup = max(0, min(args.warmup, len(bars)))
    if warmup:
        runner.load_history(bars[:warmup])
    summary = runner.run(bars[warmup:])

    print(f"\nReplayed {len(bars)} bars in {summary.cycles} cycles")
    for label, engine in zip(runner.labels, engines):
        counts = ", ".join(f"{s.value}={n}" for s, n in summary.statuses.get(label, {}).items())
        print(f"\n{label} (periods={engine.periods}): {counts}")
        snapshot = engine.buffers.snapshot()
        names = list(snapshot)
        print("  " + "bar".rjust(5) + "".join(n.rjust(14) for n in names))
        for bar in range(min(args.tail, len(series))):
            print("  " + str(bar).rjust(5) + "".join(_fmt(snapshot[n][bar]).rjust(14) for n in names))

    for name, result in summary.faults:
        print(f"\nFAULT {name} at bar {result.failed_bar}: {result.error}")

    if args.output:
        data = {
            "bars": len(series),
            "engines": {
                label: {
                    "periods": engine.periods,
                    "buffers": engine.buffers.snapshot(),
                }
                for label, engine in zip(runner.labels, engines)
            },
        }
        with open(args.output, "w") as f:
            json.dump(data, f, indent=2)
        print(f"\nResults saved to {args.output}")

    return 1 if summary.faults else 0


if __name__ == "__main__":
    sys.exit(main())
