"""Tests for synthetic predictions."""

from src.question_catalog.answers import (
    DriverChoiceAnswer,
    TeammateBattleAnswer,
    ValueWithDriverAnswer,
)
from src.question_catalog.questions import load_catalog
from src.simulation_engine.models import PredictionProfile
from src.simulation_engine.predictor import PredictorGenerator, draw_profile
from src.simulation_engine.random_source import RandomSource
from src.simulation_engine.skill_model import build_skill_model


# ── Helpers ──────────────────────────────────────────────────────────

def _make_predictor(roster, races, seed=5):
    return PredictorGenerator(build_skill_model(roster), roster, races, RandomSource(seed))


EXPERT = PredictionProfile(knowledge=0.96, boldness=0.3)


# ── Profiles ─────────────────────────────────────────────────────────

class TestDrawProfile:
    def test_profiles_stay_in_bounds(self):
        rng = RandomSource(2)
        for _ in range(500):
            profile = draw_profile(rng)
            assert 0.2 <= profile.knowledge <= 0.96
            assert 0.05 <= profile.boldness <= 0.95


# ── Bespoke questions ────────────────────────────────────────────────

class TestBespokePredictions:
    def test_ranking_picks_distinct_drivers(self, small_catalog, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        question = small_catalog[0]
        for _ in range(20):
            picks = predictor.predict(question, EXPERT)
            assert len(picks) == 3
            assert len(set(picks)) == 3
            assert set(picks) <= set(small_roster.drivers)

    def test_experts_favour_the_strongest_team(self, small_catalog, small_roster, small_races):
        # McLaren's base strength outweighs Verstappen's skill edge
        predictor = _make_predictor(small_roster, small_races)
        question = small_catalog[0]
        leaders = [predictor.predict(question, EXPERT)[0] for _ in range(200)]
        mclaren = leaders.count("Lando Norris") + leaders.count("Oscar Piastri")
        assert mclaren > 100
        assert leaders.count("Sergio Perez") < mclaren

    def test_boolean_answers(self, small_catalog, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        question = small_catalog[2]
        answers = {predictor.predict(question, EXPERT) for _ in range(100)}
        assert answers <= {"yes", "no"}

    def test_race_ban_shape(self, small_catalog, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        question = small_catalog[4]
        for _ in range(50):
            answer = predictor.predict(question, EXPERT)
            assert isinstance(answer, DriverChoiceAnswer)
            if answer.choice == "no":
                assert answer.driver is None

    def test_limited_select_uses_question_count(self, small_catalog, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        picks = predictor.predict(small_catalog[5], EXPERT)
        assert len(picks) == 2
        assert set(picks) <= set(small_races)

    def test_numeric_in_range(self, small_catalog, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        for _ in range(50):
            assert 0 <= predictor.predict(small_catalog[6], EXPERT) <= 10

    def test_teammate_battle(self, small_catalog, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        for _ in range(50):
            answer = predictor.predict(small_catalog[7], EXPERT)
            assert isinstance(answer, TeammateBattleAnswer)
            assert answer.winner in ("Lando Norris", "Oscar Piastri", "tie")
            assert answer.diff >= 0

    def test_any_teammate_battle_uses_the_pair(self, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        battle, lone = load_catalog([
            {
                "id": "teammate_battle_red_bull",
                "type": "teammate_battle",
                "options": ["Max Verstappen", "Sergio Perez"],
                "points": 25,
            },
            {"id": "teammate_battle_solo", "type": "teammate_battle", "options": ["Max Verstappen"]},
        ])
        for _ in range(50):
            answer = predictor.predict(battle, EXPERT)
            assert isinstance(answer, TeammateBattleAnswer)
            assert answer.winner in ("Max Verstappen", "Sergio Perez", "tie")
        assert predictor.predict(lone, EXPERT) is None

    def test_full_catalog_answers(self, season_inputs):
        questions, roster, races = season_inputs
        predictor = _make_predictor(roster, races)
        by_id = {q.id: q for q in questions}

        grid = predictor.predict(by_id["lowest_grid_win_position"], EXPERT)
        assert isinstance(grid, ValueWithDriverAnswer)
        assert grid.value in by_id["lowest_grid_win_position"].options

        no_podium = predictor.predict(by_id["most_points_no_podium"], EXPERT)
        assert no_podium in roster.teams or no_podium == "All teams scored a podium"

        assert predictor.predict(by_id["destructors_team"], EXPERT) in roster.teams


# ── Generic fallbacks ────────────────────────────────────────────────

class TestGenericPredictions:
    def _catalog(self):
        return load_catalog([
            {"id": "pick_team", "type": "single_choice", "options_source": "teams", "points": 1},
            {"id": "order", "type": "ranking", "options_source": "drivers", "count": 2},
            {"id": "some", "type": "multi_select", "options_source": "drivers", "points": 1},
            {"id": "laps", "type": "numeric", "points": 1},
            {
                "id": "grid",
                "type": "numeric_with_driver",
                "points": {"position": 1, "driver": 1},
            },
            {"id": "guess", "type": "text"},
            {"id": "note", "type": "textarea"},
            {"id": "mystery", "type": "slider", "points": 1},
            {"id": "empty_choice", "type": "single_choice", "points": 1},
        ])

    def test_fallback_shapes(self, small_roster, small_races):
        predictor = _make_predictor(small_roster, small_races)
        answers = {q.id: predictor.predict(q, EXPERT) for q in self._catalog()}

        assert answers["pick_team"] in small_roster.teams
        assert len(answers["order"]) == 2
        assert 1 <= len(answers["some"]) <= 4
        assert 0 <= answers["laps"] <= 30
        assert isinstance(answers["grid"], ValueWithDriverAnswer)
        assert answers["guess"].startswith("Simulated answer")
        assert answers["mystery"] is None
        assert answers["empty_choice"] is None
