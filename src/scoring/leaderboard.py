"""Score stored responses of a group of members against stored actuals."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from src.question_catalog.questions import Question
from src.scoring.scorer import score

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardRow:
    """One member's standing."""

    user_id: str
    name: str
    total: float = 0
    by_question: Dict[str, float] = field(default_factory=dict)


def build_leaderboard(
    questions: List[Question],
    actuals: Mapping[str, object],
    entries: List[Dict],
) -> List[LeaderboardRow]:
    """Score every member and order them by total.

    Args:
        questions: The question catalog.
        actuals: Question id to actual answer (stored or typed form).
        entries: Member dicts with ``user_id``, ``name`` and ``answers``
            (question id to predicted answer). Answers for questions not in
            the catalog are ignored.

    Returns:
        Rows sorted by total descending, then name.
    """
    rows = []
    for entry in entries:
        row = LeaderboardRow(
            user_id=str(entry["user_id"]),
            name=str(entry.get("name") or entry["user_id"]),
        )
        answers = entry.get("answers") or {}
        for question in questions:
            if question.id not in answers:
                continue
            points = score(question, answers[question.id], actuals.get(question.id))
            row.by_question[question.id] = points
            row.total += points
        rows.append(row)

    rows.sort(key=lambda r: (-r.total, r.name))
    logger.debug("Built leaderboard for %d members", len(rows))
    return rows
