"""Monte Carlo balance aggregator.

Simulates many seasons of synthetic players and measures, per question,
how often removing that question's points would change the season winner
(flip rate) and how much of the winner's total it contributes (winner
share).  The same row arithmetic also serves a single real group scored
against stored actuals.
"""

import logging
import math
from typing import Dict, List, Mapping, Optional

import pandas as pd

from src.question_catalog.answers import decode_answer
from src.question_catalog.questions import Question
from src.question_catalog.roster import Roster
from src.scoring.leaderboard import build_leaderboard
from src.scoring.scorer import score
from src.simulation_engine.config import (
    DEFAULT_SEED,
    FLIP_WEIGHT,
    IMPACT_THRESHOLDS,
    SHARE_WEIGHT,
)
from src.simulation_engine.models import (
    BalanceReport,
    BalanceRow,
    QuestionTally,
    RunTally,
)
from src.simulation_engine.outcome_generator import OutcomeGenerator
from src.simulation_engine.predictor import PredictorGenerator, draw_profile
from src.simulation_engine.random_source import RandomSource
from src.simulation_engine.skill_model import build_skill_model
from src.simulation_engine.utils import first_max_index

logger = logging.getLogger(__name__)


class SimulationError(Exception):
    """Raised when a run cannot start from the given inputs."""
    pass


# ---------------------------------------------------------------------------
# Row arithmetic
# ---------------------------------------------------------------------------

def impact_label(flip_rate: float, winner_share: float) -> str:
    """HIGH, MED or LOW for one question."""
    for label in ("HIGH", "MED"):
        min_flip, min_share = IMPACT_THRESHOLDS[label]
        if flip_rate >= min_flip or winner_share >= min_share:
            return label
    return "LOW"


def _build_rows(records: List[Dict], avg_winner_total: float) -> List[BalanceRow]:
    """Finish per-question records into sorted :class:`BalanceRow` objects.

    Each record carries ``question_id``, ``flip_rate``, ``avg_winner`` and
    ``avg_player``.  Rows are ordered by dominance, then flip rate, then
    input order.
    """
    if not records:
        return []

    df = pd.DataFrame(records, columns=["question_id", "flip_rate", "avg_winner", "avg_player"])
    if avg_winner_total > 0:
        df["winner_share"] = df["avg_winner"] / avg_winner_total * 100
    else:
        df["winner_share"] = 0.0
    df["dominance"] = FLIP_WEIGHT * df["flip_rate"] + SHARE_WEIGHT * df["winner_share"]

    df["impact"] = [
        impact_label(flip, share) for flip, share in zip(df["flip_rate"], df["winner_share"])
    ]

    df = df.sort_values(["dominance", "flip_rate"], ascending=False, kind="mergesort")

    return [
        BalanceRow(
            question_id=row.question_id,
            flip_rate=float(row.flip_rate),
            winner_share=float(row.winner_share),
            avg_winner=float(row.avg_winner),
            avg_player=float(row.avg_player),
            dominance=float(row.dominance),
            impact=str(row.impact),
        )
        for row in df.itertuples(index=False)
    ]


def _mean_std(total: float, total_sq: float, count: int):
    mean = total / max(1, count)
    variance = total_sq / max(1, count) - mean * mean
    return mean, math.sqrt(max(0.0, variance))


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

class MonteCarloAggregator:
    """Run seasons of synthetic players against synthetic outcomes.

    Args:
        questions: The question catalog.
        roster: Drivers and teams.
        races: Race calendar.
        rng: Source of every random draw of the run.

    Raises:
        SimulationError: If the catalog or the driver roster is empty.
    """

    def __init__(
        self,
        questions: List[Question],
        roster: Roster,
        races: List[str],
        rng: RandomSource,
    ):
        if not questions:
            raise SimulationError("Cannot simulate an empty question catalog")
        if not roster.drivers:
            raise SimulationError("Cannot simulate without drivers in the roster")

        self.questions = list(questions)
        self.rng = rng
        self.model = build_skill_model(roster)
        self.outcomes = OutcomeGenerator(self.model, roster, races, rng)
        self.predictor = PredictorGenerator(self.model, roster, races, rng)

    def run_season(self, player_count: int) -> RunTally:
        """Simulate one season and return its tally."""
        actuals = self.outcomes.generate(self.questions)
        scored = [q for q in self.questions if actuals.get(q.id) is not None]

        totals = [0.0] * player_count
        per_question = {q.id: [0.0] * player_count for q in scored}
        for player in range(player_count):
            profile = draw_profile(self.rng)
            for question in scored:
                predicted = self.predictor.predict(question, profile)
                points = score(question, predicted, actuals[question.id])
                totals[player] += points
                per_question[question.id][player] = points

        winner = first_max_index(totals)
        tally = RunTally(
            seasons=1,
            samples=player_count,
            total_sum=sum(totals),
            total_sq_sum=sum(t * t for t in totals),
            winner_sum=totals[winner],
            scored_questions=len(scored),
        )
        for question in scored:
            points = per_question[question.id]
            alt_totals = [t - p for t, p in zip(totals, points)]
            tally.questions[question.id] = QuestionTally(
                flips=int(first_max_index(alt_totals) != winner),
                winner_points=points[winner],
                player_points=sum(points),
            )
        return tally

    def run(self, player_count: int, season_count: int) -> RunTally:
        """Simulate *season_count* seasons and merge their tallies."""
        tally = RunTally()
        for season in range(season_count):
            season_tally = self.run_season(player_count)
            logger.debug(
                "Season %d: winner total %.1f over %d scored questions",
                season + 1, season_tally.winner_sum, season_tally.scored_questions,
            )
            tally = tally.merge(season_tally)
        return tally

    def finalize(self, tally: RunTally, player_count: int, seed: Optional[int]) -> BalanceReport:
        """Turn a merged tally into a :class:`BalanceReport`."""
        seasons = max(1, tally.seasons)
        avg_winner_total = tally.winner_sum / seasons

        records = []
        for question in self.questions:
            q_tally = tally.questions.get(question.id, QuestionTally())
            records.append({
                "question_id": question.id,
                "flip_rate": q_tally.flips / seasons * 100,
                "avg_winner": q_tally.winner_points / seasons,
                "avg_player": q_tally.player_points / max(1, seasons * player_count),
            })

        avg_total, std_total = _mean_std(tally.total_sum, tally.total_sq_sum, tally.samples)
        return BalanceReport(
            mode="simulation",
            player_count=player_count,
            season_count=tally.seasons,
            question_count=len(self.questions),
            scored_question_count=tally.scored_questions // seasons,
            avg_total=avg_total,
            std_total=std_total,
            avg_winner_total=avg_winner_total,
            rows=_build_rows(records, avg_winner_total),
            seed=seed,
        )


def simulate(
    questions: List[Question],
    roster: Roster,
    races: List[str],
    player_count: int,
    season_count: int,
    seed: Optional[int] = DEFAULT_SEED,
) -> BalanceReport:
    """Monte Carlo balance analysis of a question catalog.

    Args:
        questions: The question catalog.
        roster: Drivers and teams.
        races: Race calendar.
        player_count: Synthetic players per season.
        season_count: Seasons to simulate.
        seed: Seed of the run's random source.  Defaults to
            ``DEFAULT_SEED``; pass ``None`` for OS entropy.

    Returns:
        BalanceReport with one row per catalog question.

    Raises:
        ValueError: If a count is below 1.
        SimulationError: If the catalog or the driver roster is empty.
    """
    if player_count < 1:
        raise ValueError(f"player_count must be at least 1, got {player_count}")
    if season_count < 1:
        raise ValueError(f"season_count must be at least 1, got {season_count}")

    rng = RandomSource(seed)
    aggregator = MonteCarloAggregator(questions, roster, races, rng)

    logger.info(
        "Simulating %d seasons x %d players over %d questions (seed=%s)",
        season_count, player_count, len(questions), seed,
    )
    tally = aggregator.run(player_count, season_count)
    report = aggregator.finalize(tally, player_count, seed)
    logger.info(
        "Simulation complete: avg total %.1f, std %.1f, avg winner %.1f",
        report.avg_total, report.std_total, report.avg_winner_total,
    )
    return report


# ---------------------------------------------------------------------------
# Real groups
# ---------------------------------------------------------------------------

def analyze_actuals(
    questions: List[Question],
    actuals: Mapping[str, object],
    entries: List[Dict],
) -> BalanceReport:
    """Balance rows for one group scored against its stored actuals.

    Flip rate is 100 when removing a question changes the leader and 0
    otherwise.  Questions without an actual answer get no row.

    Args:
        questions: The question catalog.
        actuals: Question id to actual answer.
        entries: Member dicts as accepted by :func:`build_leaderboard`.

    Raises:
        SimulationError: If the catalog is empty.
    """
    if not questions:
        raise SimulationError("Cannot analyze an empty question catalog")

    ranking = build_leaderboard(questions, actuals, entries)
    totals = [row.total for row in ranking]
    winner_total = totals[0] if totals else 0

    records = []
    for question in questions:
        if decode_answer(question, actuals.get(question.id)) is None:
            continue
        points = [row.by_question.get(question.id, 0) for row in ranking]
        alt_totals = [t - p for t, p in zip(totals, points)]
        flips = bool(alt_totals) and first_max_index(alt_totals) != 0
        records.append({
            "question_id": question.id,
            "flip_rate": 100.0 if flips else 0.0,
            "avg_winner": points[0] if points else 0,
            "avg_player": sum(points) / len(points) if points else 0,
        })

    avg_total, std_total = _mean_std(sum(totals), sum(t * t for t in totals), len(totals))
    logger.info(
        "Analyzed %d members over %d scored questions", len(ranking), len(records)
    )
    return BalanceReport(
        mode="actuals",
        player_count=len(ranking),
        season_count=1,
        question_count=len(questions),
        scored_question_count=len(records),
        avg_total=avg_total,
        std_total=std_total,
        avg_winner_total=winner_total,
        rows=_build_rows(records, winner_total),
    )
