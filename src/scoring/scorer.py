"""Scoring rules: (question, predicted, actual) -> points.

``score`` is pure.  Both answers are decoded first, so stored strings,
JSON-shaped values and typed answers are all accepted; anything absent
or unreadable scores 0.
"""

from typing import Callable, Dict, Optional, Type

from src.question_catalog.answers import (
    RaceCountsAnswer,
    decode_answer,
    to_number,
)
from src.question_catalog.config import (
    PITLANE_GRID_POSITION,
    PITLANE_LABELS,
    POSITION_LABELS,
    TIE,
    YES,
)
from src.question_catalog.questions import (
    BooleanQuestion,
    BooleanWithDriverQuestion,
    FreeTextQuestion,
    MultiSelectLimitedQuestion,
    MultiSelectQuestion,
    NumericQuestion,
    NumericWithDriverQuestion,
    Question,
    RankingQuestion,
    SingleChoiceQuestion,
    SingleChoiceWithDriverQuestion,
    TeammateBattleQuestion,
    TextQuestion,
    UnknownQuestion,
)


def is_match(actual, predicted) -> bool:
    """String-coerced equality, or containment when *actual* is a list."""
    if actual is None or predicted is None:
        return False
    if isinstance(actual, (list, tuple, set)):
        return str(predicted) in {str(a) for a in actual}
    return str(actual) == str(predicted)


def position_label(index: int) -> str:
    """Points key for a 0-based ranking slot ("1st", "2nd", ...)."""
    if index < len(POSITION_LABELS):
        return POSITION_LABELS[index]
    return str(index + 1)


def grid_number(value) -> Optional[float]:
    """Normalise a grid slot to a number; the pit lane counts as 23."""
    if value is None:
        return None
    raw = str(value).strip().lower()
    if not raw:
        return None
    if raw in PITLANE_LABELS:
        return PITLANE_GRID_POSITION
    return to_number(raw)


# ------------------------------------------------------------------
# Per-type rules
# ------------------------------------------------------------------

def _score_ranking(question: RankingQuestion, predicted, actual):
    if not isinstance(predicted, list) or not isinstance(actual, list):
        return 0
    total = 0
    for i in range(question.count):
        actual_slot = actual[i] if i < len(actual) else None
        predicted_slot = predicted[i] if i < len(predicted) else None
        if is_match(actual_slot, predicted_slot):
            total += question.points.get(position_label(i), 0)
    return total


def _score_single_choice(question: SingleChoiceQuestion, predicted, actual):
    if (
        question.special_case == "all_podiums_bonus"
        and str(actual) == str(question.bonus_value)
    ):
        if str(predicted) == str(question.bonus_value):
            return question.bonus_points
        return 0
    return question.points if is_match(actual, predicted) else 0


def _score_exact(question, predicted, actual):
    return question.points if is_match(actual, predicted) else 0


def _score_multi_select(question: MultiSelectQuestion, predicted, actual):
    actual_set = {str(v) for v in actual}
    predicted_set = {str(v) for v in predicted}
    correct = len(predicted_set & actual_set)
    wrong = len(predicted_set - actual_set)
    missing = len(actual_set - predicted_set)
    total = correct * question.points - (wrong + missing) * question.effective_penalty
    return max(question.minimum, total)


def _score_multi_select_limited(question: MultiSelectLimitedQuestion, predicted, actual):
    if not isinstance(actual, RaceCountsAnswer) or not isinstance(predicted, list):
        return 0
    total = 0
    for race in dict.fromkeys(str(r) for r in predicted):
        total += actual.counts.get(race, 0) * question.points
    return total


def _score_teammate_battle(question: TeammateBattleQuestion, predicted, actual):
    if not actual.winner:
        return 0
    if actual.winner == TIE:
        return question.tie_bonus if predicted.winner == TIE else 0
    if predicted.winner != actual.winner:
        return 0
    actual_diff = to_number(actual.diff)
    predicted_diff = to_number(predicted.diff)
    if actual_diff is None or predicted_diff is None:
        return 0
    return max(0, question.points - abs(predicted_diff - actual_diff))


def _score_boolean_with_driver(question: BooleanWithDriverQuestion, predicted, actual):
    if actual.choice is None or predicted.choice is None:
        return 0
    if str(actual.choice) != str(predicted.choice):
        return 0
    total = question.points
    if (
        str(actual.choice) == YES
        and actual.driver
        and str(actual.driver) == str(predicted.driver)
    ):
        total += question.bonus_points
    return total


def _score_value_with_driver(question: NumericWithDriverQuestion, predicted, actual):
    total = 0
    if actual.value is not None and predicted.value is not None:
        if str(actual.value) == str(predicted.value):
            total += question.points.get("position", 0)
        elif (
            isinstance(question, SingleChoiceWithDriverQuestion)
            and question.position_nearby_points
        ):
            total += _nearby_bonus(question, predicted.value, actual.value)
    if actual.driver and predicted.driver and str(actual.driver) == str(predicted.driver):
        total += question.points.get("driver", 0)
    return total


def _nearby_bonus(question: SingleChoiceWithDriverQuestion, predicted_value, actual_value):
    actual_grid = grid_number(actual_value)
    predicted_grid = grid_number(predicted_value)
    if actual_grid is None or predicted_grid is None:
        return 0
    distance = abs(actual_grid - predicted_grid)
    if not float(distance).is_integer():
        return 0
    bonus = question.position_nearby_points.get(int(distance), 0)
    return bonus if bonus > 0 else 0


def _score_numeric(question: NumericQuestion, predicted, actual):
    actual_number = to_number(actual)
    predicted_number = to_number(predicted)
    if actual_number is None or predicted_number is None:
        return 0
    return question.points if actual_number == predicted_number else 0


def _score_nothing(question, predicted, actual):
    return 0


_RULES: Dict[Type[Question], Callable] = {
    RankingQuestion: _score_ranking,
    SingleChoiceQuestion: _score_single_choice,
    TextQuestion: _score_single_choice,
    FreeTextQuestion: _score_nothing,
    BooleanQuestion: _score_exact,
    MultiSelectQuestion: _score_multi_select,
    MultiSelectLimitedQuestion: _score_multi_select_limited,
    TeammateBattleQuestion: _score_teammate_battle,
    BooleanWithDriverQuestion: _score_boolean_with_driver,
    NumericWithDriverQuestion: _score_value_with_driver,
    SingleChoiceWithDriverQuestion: _score_value_with_driver,
    NumericQuestion: _score_numeric,
    UnknownQuestion: _score_nothing,
}


def score(question: Question, predicted, actual):
    """Points earned by *predicted* against *actual* for *question*.

    Returns 0 when either answer is absent or cannot be decoded into the
    question's answer shape.
    """
    predicted = decode_answer(question, predicted)
    actual = decode_answer(question, actual)
    if predicted is None or actual is None:
        return 0

    rule = _RULES.get(type(question), _score_nothing)
    return rule(question, predicted, actual)
