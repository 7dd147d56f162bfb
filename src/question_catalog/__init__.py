from src.question_catalog.answers import (
    DriverChoiceAnswer,
    RaceCountsAnswer,
    TeammateBattleAnswer,
    ValueWithDriverAnswer,
    decode_answer,
    encode_answer,
)
from src.question_catalog.loader import load_season_inputs
from src.question_catalog.questions import (
    CatalogError,
    Question,
    UnknownQuestion,
    apply_points_override,
    load_catalog,
    question_from_dict,
)
from src.question_catalog.roster import Roster

__all__ = [
    "CatalogError",
    "DriverChoiceAnswer",
    "Question",
    "RaceCountsAnswer",
    "Roster",
    "TeammateBattleAnswer",
    "UnknownQuestion",
    "ValueWithDriverAnswer",
    "apply_points_override",
    "decode_answer",
    "encode_answer",
    "load_catalog",
    "load_season_inputs",
    "question_from_dict",
]
