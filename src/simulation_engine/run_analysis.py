"""Run a Monte Carlo balance analysis of the question catalog.

Usage:
    python -m src.simulation_engine.run_analysis [options]

Examples:
    python -m src.simulation_engine.run_analysis --players 500 --seasons 100
    python -m src.simulation_engine.run_analysis --seed none --json report.json
    python -m src.simulation_engine.run_analysis --data-dir /path/to/season
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from src.logging_config import setup_logging
from src.question_catalog.loader import load_season_inputs
from src.simulation_engine.aggregator import simulate
from src.simulation_engine.config import (
    DEFAULT_SEED,
    MC_DEFAULT_PLAYERS,
    MC_DEFAULT_SEASONS,
    MC_DEFAULT_TOP,
)
from src.simulation_engine.models import BalanceReport

logger = logging.getLogger(__name__)


def _seed(value: str) -> Optional[int]:
    """``none`` selects OS entropy; anything else must be an integer."""
    if value.strip().lower() == "none":
        return None
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid seed: {value!r}")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a value of at least 1, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m src.simulation_engine.run_analysis",
        description="Estimate how strongly each question decides the season winner.",
    )
    parser.add_argument("--players", type=_positive_int, default=MC_DEFAULT_PLAYERS,
                        help="synthetic players per season (default: %(default)s)")
    parser.add_argument("--seasons", type=_positive_int, default=MC_DEFAULT_SEASONS,
                        help="seasons to simulate (default: %(default)s)")
    parser.add_argument("--seed", type=_seed, default=DEFAULT_SEED,
                        help="random seed, or 'none' for OS entropy (default: %(default)s)")
    parser.add_argument("--top", type=_positive_int, default=MC_DEFAULT_TOP,
                        help="rows to print (default: %(default)s)")
    parser.add_argument("--json", type=Path, default=None, dest="json_path",
                        help="also write the full report as JSON to this path")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="directory with questions.json, roster.json and races.json")
    parser.add_argument("--log-level", default="INFO",
                        help="console log level (default: %(default)s)")
    parser.add_argument("--log-dir", type=Path, default=None,
                        help="directory for balance_analysis.log (default: logs/)")
    return parser.parse_args(argv)


def format_report(report: BalanceReport, top: int) -> str:
    """Human-readable summary followed by the *top* most dominant questions."""
    lines = [
        f"Players: {report.player_count}  Seasons: {report.season_count}  Seed: {report.seed}",
        f"Questions: {report.question_count} ({report.scored_question_count} scored)",
        f"Avg total: {report.avg_total:.1f}  Std: {report.std_total:.1f}  "
        f"Avg winner total: {report.avg_winner_total:.1f}",
        "",
    ]
    frame = report.to_frame().head(top)
    if frame.empty:
        lines.append("No questions to report.")
    else:
        with pd.option_context("display.float_format", "{:.1f}".format):
            lines.append(frame.to_string())
    return "\n".join(lines)


def write_report_json(report: BalanceReport, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2)
    logger.info("Wrote report to %s", path)
    return path


def run_analysis(
    players: int = MC_DEFAULT_PLAYERS,
    seasons: int = MC_DEFAULT_SEASONS,
    seed: Optional[int] = DEFAULT_SEED,
    data_dir: Optional[Path] = None,
    json_path: Optional[Path] = None,
) -> BalanceReport:
    """Load the season inputs, simulate and optionally save the report."""
    questions, roster, races = load_season_inputs(data_dir)
    report = simulate(questions, roster, races, players, seasons, seed=seed)
    if json_path is not None:
        write_report_json(report, json_path)
    return report


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_dir)

    try:
        report = run_analysis(
            players=args.players,
            seasons=args.seasons,
            seed=args.seed,
            data_dir=args.data_dir,
            json_path=args.json_path,
        )
    except Exception:
        logger.exception("Balance analysis failed")
        return 1

    print(format_report(report, args.top))
    return 0


if __name__ == "__main__":
    sys.exit(main())
