"""Question definitions - one immutable dataclass per question type.

Every catalog record is turned into exactly one variant.  Point parameters
are validated when the record is loaded, so a malformed catalog fails
before any answer is scored.  Records whose ``type`` is not recognised
become :class:`UnknownQuestion`, which always scores 0.
"""

import dataclasses
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from src.question_catalog.config import (
    DEFAULT_LIMITED_SELECT_COUNT,
    DEFAULT_RANKING_COUNT,
    VALID_OPTIONS_SOURCES,
)
from src.question_catalog.roster import Roster

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when a question catalog entry is malformed."""


# ------------------------------------------------------------------
# Field parsing helpers
# ------------------------------------------------------------------

def _is_number(value) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _parse_number(value, question_id: str, field_name: str, default=0):
    if value is None:
        return default
    if not _is_number(value):
        raise CatalogError(
            f'Question "{question_id}": {field_name} must be a finite number '
            f"(got {value!r})."
        )
    return value


def _parse_points_number(value, question_id: str):
    if value is None:
        return 0
    if isinstance(value, dict) or not _is_number(value):
        raise CatalogError(
            f'Question "{question_id}": this question expects points as a number.'
        )
    return value


def _parse_points_mapping(value, question_id: str) -> Dict[str, float]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CatalogError(
            f'Question "{question_id}": this question expects points as a JSON object.'
        )
    parsed = {}
    for key, points in value.items():
        parsed[str(key)] = _parse_number(points, question_id, f"points[{key!r}]")
    return parsed


def _parse_count(value, question_id: str, default: int) -> int:
    if value is None or value == "":
        return default
    # int() would silently truncate 2.7 and accept True
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise CatalogError(
            f'Question "{question_id}": count must be an integer (got {value!r}).'
        )
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise CatalogError(
            f'Question "{question_id}": count must be an integer (got {value!r}).'
        )
    if count < 1:
        raise CatalogError(f'Question "{question_id}": count must be at least 1.')
    return count


def _parse_options(value, question_id: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise CatalogError(f'Question "{question_id}": options must be a list.')
    options = tuple(str(v) for v in value)
    seen = set()
    for option in options:
        if option in seen:
            raise CatalogError(
                f'Question "{question_id}": duplicate option {option!r}.'
            )
        seen.add(option)
    return options


def _optional_str(value) -> Optional[str]:
    return None if value is None else str(value)


# ------------------------------------------------------------------
# Question variants
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Question:
    """Fields shared by every question variant."""

    id: str
    prompt: str = ""
    options: Tuple[str, ...] = ()
    options_source: Optional[str] = None

    type: ClassVar[str] = ""
    # "number", "mapping" or "any" - the JSON shape ``points`` must have
    points_shape: ClassVar[str] = "number"

    @classmethod
    def _fields_from_record(cls, record: Dict, question_id: str) -> Dict:
        return {}

    def resolve_options(self, roster: Roster, races: List[str]) -> List[str]:
        """Static options followed by source-derived ones, de-duplicated."""
        values = list(self.options)
        if self.options_source:
            values.extend(roster.entities_for(self.options_source, races))
        seen = set()
        out = []
        for raw in values:
            value = str(raw)
            if not value or value in seen:
                continue
            seen.add(value)
            out.append(value)
        return out


@dataclass(frozen=True)
class RankingQuestion(Question):
    """Ordered top-N pick; each correctly placed slot earns its label's points."""

    count: int = DEFAULT_RANKING_COUNT
    points: Dict[str, float] = field(default_factory=dict)

    type: ClassVar[str] = "ranking"
    points_shape: ClassVar[str] = "mapping"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {
            "count": _parse_count(record.get("count"), question_id, DEFAULT_RANKING_COUNT),
            "points": _parse_points_mapping(record.get("points"), question_id),
        }


@dataclass(frozen=True)
class SingleChoiceQuestion(Question):
    points: float = 0
    special_case: Optional[str] = None
    bonus_value: Optional[str] = None
    bonus_points: float = 0

    type: ClassVar[str] = "single_choice"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {
            "points": _parse_points_number(record.get("points"), question_id),
            "special_case": _optional_str(record.get("special_case")),
            "bonus_value": _optional_str(record.get("bonus_value")),
            "bonus_points": _parse_number(
                record.get("bonus_points"), question_id, "bonus_points"
            ),
        }


@dataclass(frozen=True)
class TextQuestion(SingleChoiceQuestion):
    type: ClassVar[str] = "text"


@dataclass(frozen=True)
class FreeTextQuestion(Question):
    """Long-form answer collected for display only; never scored."""

    points: float = 0

    type: ClassVar[str] = "textarea"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {"points": _parse_points_number(record.get("points"), question_id)}


@dataclass(frozen=True)
class BooleanQuestion(Question):
    points: float = 0

    type: ClassVar[str] = "boolean"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {"points": _parse_points_number(record.get("points"), question_id)}


@dataclass(frozen=True)
class NumericQuestion(Question):
    points: float = 0

    type: ClassVar[str] = "numeric"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {"points": _parse_points_number(record.get("points"), question_id)}


@dataclass(frozen=True)
class MultiSelectQuestion(Question):
    points: float = 0
    penalty: Optional[float] = None
    minimum: float = 0

    type: ClassVar[str] = "multi_select"

    @property
    def effective_penalty(self) -> float:
        return self.points if self.penalty is None else self.penalty

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {
            "points": _parse_points_number(record.get("points"), question_id),
            "penalty": _parse_number(
                record.get("penalty"), question_id, "penalty", default=None
            ),
            "minimum": _parse_number(record.get("minimum"), question_id, "minimum"),
        }


@dataclass(frozen=True)
class MultiSelectLimitedQuestion(Question):
    """Pick a few races; each pick earns ``points`` per counted event there."""

    count: int = DEFAULT_LIMITED_SELECT_COUNT
    points: float = 0

    type: ClassVar[str] = "multi_select_limited"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {
            "count": _parse_count(
                record.get("count"), question_id, DEFAULT_LIMITED_SELECT_COUNT
            ),
            "points": _parse_points_number(record.get("points"), question_id),
        }


@dataclass(frozen=True)
class TeammateBattleQuestion(Question):
    """Head-to-head between the first two options, with a points margin."""

    points: float = 0
    tie_bonus: float = 0

    type: ClassVar[str] = "teammate_battle"

    @property
    def pair(self) -> Tuple[str, ...]:
        return self.options[:2]

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {
            "points": _parse_points_number(record.get("points"), question_id),
            "tie_bonus": _parse_number(record.get("tie_bonus"), question_id, "tie_bonus"),
        }


@dataclass(frozen=True)
class BooleanWithDriverQuestion(Question):
    points: float = 0
    bonus_points: float = 0

    type: ClassVar[str] = "boolean_with_optional_driver"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {
            "points": _parse_points_number(record.get("points"), question_id),
            "bonus_points": _parse_number(
                record.get("bonus_points"), question_id, "bonus_points"
            ),
        }


@dataclass(frozen=True)
class NumericWithDriverQuestion(Question):
    """A value plus a driver, scored independently via ``{position, driver}``."""

    points: Dict[str, float] = field(default_factory=dict)

    type: ClassVar[str] = "numeric_with_driver"
    points_shape: ClassVar[str] = "mapping"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {"points": _parse_points_mapping(record.get("points"), question_id)}


@dataclass(frozen=True)
class SingleChoiceWithDriverQuestion(NumericWithDriverQuestion):
    position_nearby_points: Dict[int, float] = field(default_factory=dict)

    type: ClassVar[str] = "single_choice_with_driver"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        fields = super()._fields_from_record(record, question_id)
        raw = record.get("position_nearby_points")
        nearby: Dict[int, float] = {}
        if raw is not None:
            if not isinstance(raw, dict):
                raise CatalogError(
                    f'Question "{question_id}": position_nearby_points must be a JSON object.'
                )
            for key, points in raw.items():
                try:
                    distance = int(key)
                except (TypeError, ValueError):
                    raise CatalogError(
                        f'Question "{question_id}": position_nearby_points key '
                        f"{key!r} is not an integer distance."
                    )
                nearby[distance] = _parse_number(
                    points, question_id, f"position_nearby_points[{key!r}]"
                )
        fields["position_nearby_points"] = nearby
        return fields


@dataclass(frozen=True)
class UnknownQuestion(Question):
    """Catalog entry with a type this engine does not know; scores 0."""

    raw_type: str = ""
    points: Any = None

    type: ClassVar[str] = "unknown"
    points_shape: ClassVar[str] = "any"

    @classmethod
    def _fields_from_record(cls, record, question_id):
        return {"raw_type": str(record.get("type")), "points": record.get("points")}


QUESTION_TYPES = {
    cls.type: cls
    for cls in (
        RankingQuestion,
        SingleChoiceQuestion,
        TextQuestion,
        FreeTextQuestion,
        BooleanQuestion,
        MultiSelectQuestion,
        MultiSelectLimitedQuestion,
        TeammateBattleQuestion,
        BooleanWithDriverQuestion,
        NumericWithDriverQuestion,
        SingleChoiceWithDriverQuestion,
        NumericQuestion,
    )
}

# Answers for these types are stored as JSON documents
COMPOSITE_TYPES = {
    "ranking",
    "multi_select",
    "multi_select_limited",
    "teammate_battle",
    "boolean_with_optional_driver",
    "numeric_with_driver",
    "single_choice_with_driver",
}


# ------------------------------------------------------------------
# Construction
# ------------------------------------------------------------------

def question_from_dict(record: Dict) -> Question:
    """Build the question variant described by a catalog record.

    Raises:
        CatalogError: If the record is malformed.
    """
    if not isinstance(record, dict):
        raise CatalogError(f"Question record must be an object (got {record!r}).")

    question_id = record.get("id")
    if not question_id or not isinstance(question_id, str):
        raise CatalogError(f"Question record has no string id: {record!r}")

    options_source = record.get("options_source")
    if options_source is not None and options_source not in VALID_OPTIONS_SOURCES:
        raise CatalogError(
            f'Question "{question_id}": unknown options_source {options_source!r}. '
            f"Must be one of: {sorted(VALID_OPTIONS_SOURCES)}"
        )

    question_type = record.get("type") or "text"
    cls = QUESTION_TYPES.get(question_type)
    if cls is None:
        logger.warning(
            "Question %s has unknown type %r; it will always score 0",
            question_id, question_type,
        )
        cls = UnknownQuestion

    common = {
        "id": question_id,
        "prompt": str(record.get("prompt") or ""),
        "options": _parse_options(record.get("options"), question_id),
        "options_source": options_source,
    }
    return cls(**common, **cls._fields_from_record(record, question_id))


def load_catalog(data) -> List[Question]:
    """Build every question of a catalog.

    Args:
        data: Either a list of question records or a dict with a
            ``questions`` list.

    Returns:
        Questions in catalog order.

    Raises:
        CatalogError: If any record is malformed or ids repeat.
    """
    records = data.get("questions") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise CatalogError("Question catalog must be a list of question records.")

    questions = []
    seen_ids = set()
    for record in records:
        question = question_from_dict(record)
        if question.id in seen_ids:
            raise CatalogError(f'Duplicate question id "{question.id}".')
        seen_ids.add(question.id)
        questions.append(question)

    logger.info("Loaded question catalog with %d questions", len(questions))
    return questions


def apply_points_override(question: Question, raw: str) -> Question:
    """Return a copy of *question* with ``points`` replaced from JSON text.

    The override must have the same shape (number or object) as the
    question's own points.

    Raises:
        CatalogError: If the text is not JSON or has the wrong shape.
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        raise CatalogError(
            f'Question "{question.id}": points override must be valid JSON '
            '(for example: 10 or {"1st":50,"2nd":25}).'
        )

    if not _is_number(parsed) and not isinstance(parsed, dict):
        raise CatalogError(
            f'Question "{question.id}": points override must be a number or JSON object.'
        )

    if question.points_shape == "mapping":
        points = _parse_points_mapping(parsed, question.id)
    elif question.points_shape == "number":
        points = _parse_points_number(parsed, question.id)
    else:
        points = parsed

    return dataclasses.replace(question, points=points)
