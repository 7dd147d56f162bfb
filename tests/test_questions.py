"""Tests for question construction, catalog validation and points overrides."""

import logging

import pytest

from src.question_catalog.questions import (
    BooleanQuestion,
    CatalogError,
    FreeTextQuestion,
    MultiSelectQuestion,
    NumericWithDriverQuestion,
    RankingQuestion,
    SingleChoiceWithDriverQuestion,
    TeammateBattleQuestion,
    TextQuestion,
    UnknownQuestion,
    apply_points_override,
    load_catalog,
    question_from_dict,
)
from src.question_catalog.roster import Roster


# ── Helpers ──────────────────────────────────────────────────────────

def _make_record(**overrides):
    record = {"id": "q1", "type": "single_choice", "options": ["A", "B"], "points": 10}
    record.update(overrides)
    return record


# ── Variant selection ────────────────────────────────────────────────

class TestQuestionFromDict:
    def test_each_type_builds_its_variant(self):
        cases = {
            "ranking": RankingQuestion,
            "boolean": BooleanQuestion,
            "textarea": FreeTextQuestion,
            "multi_select": MultiSelectQuestion,
            "teammate_battle": TeammateBattleQuestion,
            "numeric_with_driver": NumericWithDriverQuestion,
            "single_choice_with_driver": SingleChoiceWithDriverQuestion,
        }
        for question_type, cls in cases.items():
            points = {"1st": 5} if cls in (RankingQuestion, NumericWithDriverQuestion,
                                            SingleChoiceWithDriverQuestion) else 5
            question = question_from_dict(_make_record(type=question_type, points=points))
            assert type(question) is cls, question_type
            assert question.type == question_type

    def test_missing_type_defaults_to_text(self):
        question = question_from_dict(_make_record(type=None))
        assert isinstance(question, TextQuestion)

    def test_unknown_type_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            question = question_from_dict(_make_record(type="slider", points=[1, 2]))
        assert isinstance(question, UnknownQuestion)
        assert question.raw_type == "slider"
        assert "slider" in caplog.text

    def test_ranking_defaults(self):
        question = question_from_dict({"id": "r", "type": "ranking"})
        assert question.count == 3
        assert question.points == {}

    def test_multi_select_penalty_defaults_to_points(self):
        question = question_from_dict(_make_record(type="multi_select", points=4))
        assert question.penalty is None
        assert question.effective_penalty == 4
        assert question.minimum == 0

    def test_nearby_points_keys_become_ints(self):
        question = question_from_dict(_make_record(
            type="single_choice_with_driver",
            points={"position": 10, "driver": 5},
            position_nearby_points={"1": 5, "2": 2},
        ))
        assert question.position_nearby_points == {1: 5, 2: 2}

    def test_teammate_pair_is_first_two_options(self):
        question = question_from_dict(_make_record(
            type="teammate_battle", options=["A", "B", "C"], points=20
        ))
        assert question.pair == ("A", "B")


# ── Validation ───────────────────────────────────────────────────────

class TestValidation:
    def test_duplicate_options_rejected(self):
        with pytest.raises(CatalogError, match="duplicate option"):
            question_from_dict(_make_record(options=["A", "A"]))

    def test_unknown_options_source_rejected(self):
        with pytest.raises(CatalogError, match="options_source"):
            question_from_dict(_make_record(options_source="circuits"))

    def test_mapping_points_for_scalar_type_rejected(self):
        with pytest.raises(CatalogError, match="as a number"):
            question_from_dict(_make_record(points={"1st": 5}))

    def test_scalar_points_for_mapping_type_rejected(self):
        with pytest.raises(CatalogError, match="as a JSON object"):
            question_from_dict(_make_record(type="ranking", points=5))

    def test_missing_id_rejected(self):
        with pytest.raises(CatalogError):
            question_from_dict({"type": "boolean"})

    def test_bad_count_rejected(self):
        with pytest.raises(CatalogError, match="count"):
            question_from_dict({"id": "r", "type": "ranking", "count": 0})

    def test_fractional_count_rejected(self):
        with pytest.raises(CatalogError, match="count must be an integer"):
            question_from_dict({"id": "r", "type": "ranking", "count": 2.7})

    def test_boolean_count_rejected(self):
        with pytest.raises(CatalogError, match="count must be an integer"):
            question_from_dict({"id": "r", "type": "ranking", "count": True})

    def test_integral_count_forms_accepted(self):
        assert question_from_dict({"id": "r", "type": "ranking", "count": "2"}).count == 2
        assert question_from_dict({"id": "r", "type": "ranking", "count": 3.0}).count == 3

    def test_huge_points_rejected(self):
        with pytest.raises(CatalogError, match="as a number"):
            question_from_dict(_make_record(type="numeric", points=10 ** 400))
        with pytest.raises(CatalogError, match="finite number"):
            question_from_dict(_make_record(
                type="boolean_with_optional_driver", points=5, bonus_points=10 ** 400
            ))

    def test_bad_nearby_key_rejected(self):
        with pytest.raises(CatalogError, match="integer distance"):
            question_from_dict(_make_record(
                type="single_choice_with_driver",
                points={"position": 1},
                position_nearby_points={"near": 2},
            ))


# ── Catalog loading ──────────────────────────────────────────────────

class TestLoadCatalog:
    def test_accepts_list_and_wrapped_dict(self):
        records = [_make_record(id="a"), _make_record(id="b")]
        assert [q.id for q in load_catalog(records)] == ["a", "b"]
        assert [q.id for q in load_catalog({"questions": records})] == ["a", "b"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate question id"):
            load_catalog([_make_record(id="a"), _make_record(id="a")])

    def test_non_list_rejected(self):
        with pytest.raises(CatalogError):
            load_catalog({"questions": "nope"})


# ── Options ──────────────────────────────────────────────────────────

class TestResolveOptions:
    def test_static_then_source_without_duplicates(self):
        roster = Roster(drivers=("X", "Y"), teams=("T1",))
        question = question_from_dict(_make_record(options=["Y", "Z"], options_source="drivers"))
        assert question.resolve_options(roster, []) == ["Y", "Z", "X"]

    def test_races_source(self):
        question = question_from_dict(_make_record(options=None, options_source="races"))
        assert question.resolve_options(Roster(), ["R1", "R2"]) == ["R1", "R2"]


# ── Points overrides ─────────────────────────────────────────────────

class TestPointsOverride:
    def test_number_override(self):
        question = question_from_dict(_make_record())
        updated = apply_points_override(question, "25")
        assert updated.points == 25
        assert question.points == 10

    def test_mapping_override(self):
        question = question_from_dict(_make_record(type="ranking", points={"1st": 5}))
        updated = apply_points_override(question, '{"1st": 50, "2nd": 25}')
        assert updated.points == {"1st": 50, "2nd": 25}

    def test_invalid_json_rejected(self):
        question = question_from_dict(_make_record())
        with pytest.raises(CatalogError, match="valid JSON"):
            apply_points_override(question, "{oops")

    def test_wrong_shape_rejected(self):
        question = question_from_dict(_make_record())
        with pytest.raises(CatalogError, match="as a number"):
            apply_points_override(question, '{"1st": 5}')

    def test_non_number_non_object_rejected(self):
        question = question_from_dict(_make_record())
        with pytest.raises(CatalogError):
            apply_points_override(question, '"ten"')
