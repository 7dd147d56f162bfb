"""Skill model builder.

Combines static priors (team strength, driver team, driver skill) with the
current roster into expected-performance scores.  Entities missing from
the priors get defaults, so any roster produces a model.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from src.question_catalog.roster import Roster
from src.simulation_engine.config import (
    DEFAULT_DRIVER_SKILL,
    DEFAULT_TEAM_STRENGTH,
    DRIVER_SKILL,
    DRIVER_TEAM,
    SKILL_WEIGHT,
    TEAM_BASE_STRENGTH,
)
from src.simulation_engine.models import SkillModel

logger = logging.getLogger(__name__)


def build_skill_model(
    roster: Roster,
    team_strength: Optional[Mapping[str, float]] = None,
    driver_teams: Optional[Mapping[str, str]] = None,
    driver_skill: Optional[Mapping[str, float]] = None,
) -> SkillModel:
    """Build the read-only :class:`SkillModel` for *roster*.

    Args:
        roster: Drivers and teams of the season.
        team_strength: Team -> base strength. Defaults to the built-in table.
        driver_teams: Driver -> team. Defaults to the built-in table.
        driver_skill: Driver -> skill rating. Defaults to the built-in table.

    Drivers without a team go to the first roster team (or ``""`` when the
    roster has no teams); unknown teams get strength 62 and unknown
    drivers skill 75.
    """
    team_base: Dict[str, float] = dict(
        TEAM_BASE_STRENGTH if team_strength is None else team_strength
    )
    driver_team: Dict[str, str] = dict(DRIVER_TEAM if driver_teams is None else driver_teams)
    skill: Dict[str, float] = dict(DRIVER_SKILL if driver_skill is None else driver_skill)

    fallback_team = roster.teams[0] if roster.teams else ""
    for team in roster.teams:
        team_base.setdefault(team, DEFAULT_TEAM_STRENGTH)
    for driver in roster.drivers:
        if driver not in driver_team:
            logger.debug("Driver %s has no team prior; assigning %r", driver, fallback_team)
            driver_team[driver] = fallback_team
        skill.setdefault(driver, DEFAULT_DRIVER_SKILL)

    team_drivers: Dict[str, List[str]] = {team: [] for team in roster.teams}
    for driver in roster.drivers:
        team_drivers.setdefault(driver_team[driver], []).append(driver)

    expected_driver = {
        driver: team_base.get(driver_team[driver], DEFAULT_TEAM_STRENGTH)
        + skill[driver] * SKILL_WEIGHT
        for driver in roster.drivers
    }
    expected_team = {
        team: sum(expected_driver[d] for d in team_drivers.get(team, []))
        for team in roster.teams
    }

    logger.debug(
        "Built skill model for %d drivers, %d teams",
        len(roster.drivers), len(roster.teams),
    )

    return SkillModel(
        team_base=MappingProxyType(team_base),
        driver_team=MappingProxyType(driver_team),
        driver_skill=MappingProxyType(skill),
        team_drivers=MappingProxyType(
            {team: tuple(drivers) for team, drivers in team_drivers.items()}
        ),
        expected_driver=MappingProxyType(expected_driver),
        expected_team=MappingProxyType(expected_team),
    )
