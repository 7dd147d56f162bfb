"""Shared fixtures for the scoring and balance-simulation test suite."""

from pathlib import Path

import pytest

from src.question_catalog.loader import load_season_inputs
from src.question_catalog.questions import load_catalog
from src.question_catalog.roster import Roster

DATA_DIR = Path(__file__).parent.parent / "data"


# ------------------------------------------------------------------
# Lightweight factories – cheap to construct, no I/O
# ------------------------------------------------------------------

@pytest.fixture
def small_roster():
    """Four drivers in two teams, all present in the built-in priors."""
    return Roster(
        drivers=("Max Verstappen", "Sergio Perez", "Lando Norris", "Oscar Piastri"),
        teams=("Red Bull Racing", "McLaren"),
    )


@pytest.fixture
def small_races():
    return ["Monaco Grand Prix", "British Grand Prix", "Italian Grand Prix", "Singapore Grand Prix"]


@pytest.fixture
def small_catalog():
    """One question of most scoring shapes, sized for the small roster."""
    return load_catalog([
        {
            "id": "drivers_championship_top_3",
            "type": "ranking",
            "options_source": "drivers",
            "count": 3,
            "points": {"1st": 15, "2nd": 10, "3rd": 8},
        },
        {
            "id": "drivers_championship_last",
            "type": "single_choice",
            "options_source": "drivers",
            "points": 10,
        },
        {"id": "all_teams_score_points", "type": "boolean", "points": 5},
        {
            "id": "all_podium_finishers",
            "type": "multi_select",
            "options_source": "drivers",
            "points": 2,
            "penalty": 1,
        },
        {
            "id": "race_ban",
            "type": "boolean_with_optional_driver",
            "points": 5,
            "bonus_points": 10,
        },
        {
            "id": "select_three_races_dnfs",
            "type": "multi_select_limited",
            "options_source": "races",
            "count": 2,
            "points": 1,
        },
        {"id": "races_before_title_decided", "type": "numeric", "points": 10},
        {
            "id": "teammate_battle_mclaren",
            "type": "teammate_battle",
            "options": ["Lando Norris", "Oscar Piastri"],
            "points": 25,
            "tie_bonus": 25,
        },
        {"id": "season_comment", "type": "textarea"},
    ])


# ------------------------------------------------------------------
# Data-reading fixtures – the shipped season files
# ------------------------------------------------------------------

@pytest.fixture(scope="module")
def season_inputs():
    """``(questions, roster, races)`` from the ``data/`` directory."""
    return load_season_inputs(DATA_DIR)
