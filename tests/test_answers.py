"""Tests for the stored-answer codec."""

import json

import pytest

from src.question_catalog.answers import (
    DriverChoiceAnswer,
    RaceCountsAnswer,
    TeammateBattleAnswer,
    ValueWithDriverAnswer,
    decode_answer,
    encode_answer,
    to_number,
)
from src.question_catalog.questions import question_from_dict
from src.scoring.scorer import score


# ── Helpers ──────────────────────────────────────────────────────────

def _make_question(question_type, **fields):
    record = {"id": f"{question_type}_q", "type": question_type}
    record.update(fields)
    return question_from_dict(record)


# ── Numbers ──────────────────────────────────────────────────────────

class TestToNumber:
    def test_integral_strings_become_ints(self):
        assert to_number("7") == 7
        assert isinstance(to_number("7.0"), int)

    def test_fractional_and_padded(self):
        assert to_number(" 2.5 ") == 2.5

    def test_rejects_non_numbers(self):
        for value in (None, "", "abc", True, float("nan"), "inf"):
            assert to_number(value) is None, value


# ── Round trips ──────────────────────────────────────────────────────

class TestRoundTrip:
    """decode(encode(v)) gives v back and scores the same."""

    CASES = [
        ("ranking", {"points": {"1st": 5, "2nd": 3}}, ["A", "B", "C"]),
        ("multi_select", {"points": 2}, ["X", "Y"]),
        ("multi_select_limited", {"points": 1}, ["Monaco", "Baku"]),
        (
            "multi_select_limited",
            {"points": 1},
            RaceCountsAnswer(counts={"Monaco": 3, "Baku": 1}),
        ),
        ("teammate_battle", {"points": 30}, TeammateBattleAnswer(winner="A", diff=12)),
        ("teammate_battle", {"points": 30}, TeammateBattleAnswer(winner="tie", diff=0)),
        (
            "boolean_with_optional_driver",
            {"points": 5},
            DriverChoiceAnswer(choice="yes", driver="D1"),
        ),
        (
            "boolean_with_optional_driver",
            {"points": 5},
            DriverChoiceAnswer(choice="no", driver=None),
        ),
        (
            "numeric_with_driver",
            {"points": {"position": 5, "driver": 3}},
            ValueWithDriverAnswer(value=4, driver="D2"),
        ),
        (
            "single_choice_with_driver",
            {"points": {"position": 5, "driver": 3}},
            ValueWithDriverAnswer(value="Pitlane", driver="D3"),
        ),
    ]

    @pytest.mark.parametrize("question_type,fields,value", CASES)
    def test_composite_round_trip(self, question_type, fields, value):
        question = _make_question(question_type, **fields)
        stored = encode_answer(question, value)
        assert isinstance(stored, str)
        json.loads(stored)

        decoded = decode_answer(question, stored)
        assert decoded == value
        assert score(question, decoded, value) == score(question, value, value)

    def test_numeric_round_trip(self):
        question = _make_question("numeric", points=10)
        assert encode_answer(question, 7) == "7"
        assert decode_answer(question, "7") == 7

    def test_scalar_stored_as_text(self):
        question = _make_question("single_choice", points=10)
        assert encode_answer(question, "Ferrari") == "Ferrari"
        assert decode_answer(question, "Ferrari") == "Ferrari"


# ── Absent and malformed values ──────────────────────────────────────

class TestAbsentAndMalformed:
    def test_empty_values_encode_to_none(self):
        question = _make_question("ranking", points={})
        assert encode_answer(question, None) is None
        assert encode_answer(question, "") is None

    def test_empty_values_decode_to_none(self):
        question = _make_question("teammate_battle", points=30)
        assert decode_answer(question, None) is None
        assert decode_answer(question, "") is None
        assert decode_answer(question, "null") is None

    def test_invalid_json_decodes_to_none(self):
        question = _make_question("teammate_battle", points=30)
        assert decode_answer(question, "{not json") is None

    def test_wrong_shape_decodes_to_none(self):
        question = _make_question("teammate_battle", points=30)
        assert decode_answer(question, '["A", "B"]') is None
        assert decode_answer(question, DriverChoiceAnswer(choice="yes")) is None

    def test_ranking_rejects_object(self):
        question = _make_question("ranking", points={})
        assert decode_answer(question, '{"first": "A"}') is None

    def test_non_numeric_text_for_numeric_question(self):
        question = _make_question("numeric", points=10)
        assert encode_answer(question, "lots") is None
        assert decode_answer(question, "lots") is None

    def test_race_counts_from_stored_json(self):
        question = _make_question("multi_select_limited", points=1)
        decoded = decode_answer(question, '{"dnf_by_race": {"Monaco": "2", "Baku": null}}')
        assert decoded == RaceCountsAnswer(counts={"Monaco": 2, "Baku": 0})


# ── Oversized input ──────────────────────────────────────────────────

class TestOversizedInput:
    def test_huge_integer_is_not_a_number(self):
        assert to_number(10 ** 400) is None
        assert to_number(-(10 ** 400)) is None
        assert to_number("1e400") is None

    def test_deeply_nested_ranking_scores_zero(self):
        question = _make_question("ranking", count=1, points={"1st": 10})
        nested = "[" * 100000 + "]" * 100000
        assert decode_answer(question, nested) is None
        assert score(question, nested, '["Lando Norris"]') == 0
        assert score(question, '["Lando Norris"]', nested) == 0

    def test_huge_teammate_battle_diff_scores_zero(self):
        question = _make_question(
            "teammate_battle", points=30, options=["Lando Norris", "Oscar Piastri"]
        )
        actual = json.dumps({"winner": "Lando Norris", "diff": 4})
        predicted = '{"winner": "Lando Norris", "diff": ' + "9" * 400 + "}"
        assert decode_answer(question, predicted).diff is None
        assert score(question, predicted, actual) == 0

    def test_huge_numeric_answer_scores_zero(self):
        question = _make_question("numeric", points=10)
        assert score(question, 10 ** 400, 10 ** 400) == 0
        assert encode_answer(question, 10 ** 400) is None
