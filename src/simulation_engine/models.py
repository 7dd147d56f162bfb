"""Data models for the simulation engine."""

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class SkillModel:
    """Expected performance of every driver and team for one run."""

    team_base: Mapping[str, float]
    driver_team: Mapping[str, str]
    driver_skill: Mapping[str, float]
    team_drivers: Mapping[str, Tuple[str, ...]]
    expected_driver: Mapping[str, float]
    expected_team: Mapping[str, float]


@dataclass(frozen=True)
class PredictionProfile:
    """How well informed (knowledge) and how daring (boldness) a player is."""

    knowledge: float
    boldness: float


class SeasonActuals:
    """Read-only question id -> actual answer for one simulated season."""

    def __init__(self, values: Dict[str, object]):
        self._values = MappingProxyType(dict(values))

    def get(self, question_id: str, default=None):
        return self._values.get(question_id, default)

    def __getitem__(self, question_id: str):
        return self._values[question_id]

    def __contains__(self, question_id) -> bool:
        return question_id in self._values

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> Mapping[str, object]:
        return self._values


@dataclass
class QuestionTally:
    """Per-question accumulator; ``merge`` is associative and commutative."""

    flips: int = 0
    winner_points: float = 0.0
    player_points: float = 0.0

    def merge(self, other: "QuestionTally") -> "QuestionTally":
        return QuestionTally(
            flips=self.flips + other.flips,
            winner_points=self.winner_points + other.winner_points,
            player_points=self.player_points + other.player_points,
        )


@dataclass
class RunTally:
    """Run-wide accumulator of player and winner totals."""

    seasons: int = 0
    samples: int = 0
    total_sum: float = 0.0
    total_sq_sum: float = 0.0
    winner_sum: float = 0.0
    scored_questions: int = 0
    questions: Dict[str, QuestionTally] = field(default_factory=dict)

    def merge(self, other: "RunTally") -> "RunTally":
        merged = {}
        for qid in {**self.questions, **other.questions}:
            merged[qid] = self.questions.get(qid, QuestionTally()).merge(
                other.questions.get(qid, QuestionTally())
            )
        return RunTally(
            seasons=self.seasons + other.seasons,
            samples=self.samples + other.samples,
            total_sum=self.total_sum + other.total_sum,
            total_sq_sum=self.total_sq_sum + other.total_sq_sum,
            winner_sum=self.winner_sum + other.winner_sum,
            scored_questions=self.scored_questions + other.scored_questions,
            questions=merged,
        )


@dataclass(frozen=True)
class BalanceRow:
    """How strongly one question decides the overall winner."""

    question_id: str
    flip_rate: float
    winner_share: float
    avg_winner: float
    avg_player: float
    dominance: float
    impact: str

    @property
    def flip_percent(self) -> float:
        return self.flip_rate

    @property
    def winner_flips(self) -> bool:
        return self.flip_rate > 0


@dataclass(frozen=True)
class BalanceReport:
    """Result of a balance analysis, rows ordered by dominance."""

    mode: str  # "simulation" or "actuals"
    player_count: int
    season_count: int
    question_count: int
    scored_question_count: int
    avg_total: float
    std_total: float
    avg_winner_total: float
    rows: List[BalanceRow]
    seed: Optional[int] = None

    def to_frame(self) -> pd.DataFrame:
        """Rows as a DataFrame indexed by question id."""
        columns = [
            "question_id", "impact", "flip_rate", "winner_share",
            "avg_winner", "avg_player", "dominance",
        ]
        frame = pd.DataFrame([asdict(r) for r in self.rows], columns=columns)
        return frame.set_index("question_id")

    def to_dict(self) -> Dict:
        """JSON-serializable report."""
        return {
            "input": {
                "mode": self.mode,
                "players": self.player_count,
                "seasons": self.season_count,
                "seed": self.seed,
            },
            "summary": {
                "avg": self.avg_total,
                "std": self.std_total,
                "wAvg": self.avg_winner_total,
                "questionCount": self.question_count,
                "scoredQuestionCount": self.scored_question_count,
            },
            "questions": [
                {
                    "id": r.question_id,
                    "flipRate": r.flip_rate,
                    "winnerShare": r.winner_share,
                    "dominance": r.dominance,
                    "impact": r.impact,
                    "avgWinner": r.avg_winner,
                    "avgPlayer": r.avg_player,
                }
                for r in self.rows
            ],
        }
