"""Answer shapes and the storage codec.

Predicted and actual answers share one shape per question type.  Scalars
stay plain Python values, rankings and selections are lists, and the
composite shapes below are small frozen dataclasses.  Stored answers are
strings: JSON documents for composite types, plain text otherwise.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from src.question_catalog.questions import COMPOSITE_TYPES, Question

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeammateBattleAnswer:
    winner: Optional[str]
    diff: Optional[float] = None

    def to_json(self) -> Dict:
        return {"winner": self.winner, "diff": self.diff}


@dataclass(frozen=True)
class DriverChoiceAnswer:
    """A yes/no choice, optionally naming the driver it applies to."""

    choice: Optional[str]
    driver: Optional[str] = None

    def to_json(self) -> Dict:
        return {"choice": self.choice, "driver": self.driver}


@dataclass(frozen=True)
class ValueWithDriverAnswer:
    value: Optional[Union[str, int, float]]
    driver: Optional[str] = None

    def to_json(self) -> Dict:
        return {"value": self.value, "driver": self.driver}


@dataclass(frozen=True)
class RaceCountsAnswer:
    """Per-race event counts (e.g. DNFs), the actual for limited selections."""

    counts: Dict[str, float] = field(default_factory=dict)

    def to_json(self) -> Dict:
        return {"dnf_by_race": dict(self.counts)}


_COMPOSITE_CLASSES = (
    TeammateBattleAnswer,
    DriverChoiceAnswer,
    ValueWithDriverAnswer,
    RaceCountsAnswer,
)

# Typed answer classes accepted as-is for each composite question type
_TYPED_SHAPES = {
    "multi_select_limited": RaceCountsAnswer,
    "teammate_battle": TeammateBattleAnswer,
    "boolean_with_optional_driver": DriverChoiceAnswer,
    "numeric_with_driver": ValueWithDriverAnswer,
    "single_choice_with_driver": ValueWithDriverAnswer,
}


def to_number(value) -> Optional[float]:
    """Parse *value* as a finite number, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return value if math.isfinite(value) else None
        number = float(str(value).strip())
    except (ValueError, OverflowError):
        # Out-of-range integers cannot be compared as floats
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def answer_to_json(value) -> Any:
    """Convert an answer to a JSON-compatible value."""
    if isinstance(value, _COMPOSITE_CLASSES):
        return value.to_json()
    if isinstance(value, (list, tuple)):
        return [answer_to_json(v) for v in value]
    return value


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------

def encode_answer(question: Question, value) -> Optional[str]:
    """Serialize an answer for storage.

    Returns:
        ``None`` for an absent answer, otherwise the stored string.
    """
    if value is None or value == "":
        return None
    if question.type in COMPOSITE_TYPES:
        return json.dumps(answer_to_json(value))
    if question.type == "numeric":
        number = to_number(value)
        return None if number is None else str(number)
    return str(value)


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------

def _decode_composite(question_type: str, data):
    """Map a JSON-shaped value onto the answer shape of *question_type*."""
    if isinstance(data, _COMPOSITE_CLASSES):
        return data if isinstance(data, _TYPED_SHAPES.get(question_type, ())) else None

    if question_type in ("ranking", "multi_select"):
        return list(data) if isinstance(data, (list, tuple)) else None

    if question_type == "multi_select_limited":
        # Predictions are race lists, actuals are per-race counts
        if isinstance(data, (list, tuple)):
            return list(data)
        if isinstance(data, dict) and isinstance(data.get("dnf_by_race", {}), dict):
            counts = {
                str(race): to_number(count) or 0
                for race, count in (data.get("dnf_by_race") or {}).items()
            }
            return RaceCountsAnswer(counts=counts)
        return None

    if not isinstance(data, dict):
        return None

    if question_type == "teammate_battle":
        return TeammateBattleAnswer(
            winner=data.get("winner"), diff=to_number(data.get("diff"))
        )
    if question_type == "boolean_with_optional_driver":
        return DriverChoiceAnswer(choice=data.get("choice"), driver=data.get("driver"))
    if question_type in ("numeric_with_driver", "single_choice_with_driver"):
        return ValueWithDriverAnswer(value=data.get("value"), driver=data.get("driver"))
    return None


def decode_answer(question: Question, raw):
    """Turn a stored or in-memory answer into its typed shape.

    Accepts the stored string, an already JSON-decoded value, or a value
    that is already typed.  Anything that cannot be read as the
    question's shape decodes to ``None`` so it scores as absent.
    """
    if raw is None or raw == "":
        return None

    if question.type in COMPOSITE_TYPES:
        data = raw
        if isinstance(raw, str):
            try:
                data = json.loads(raw)
            except (ValueError, RecursionError):
                logger.debug("Undecodable answer for %s: %r", question.id, raw)
                return None
        if data is None:
            return None
        decoded = _decode_composite(question.type, data)
        if decoded is None:
            logger.debug("Answer for %s has the wrong shape: %r", question.id, raw)
        return decoded

    if question.type == "numeric":
        return to_number(raw)

    return raw
