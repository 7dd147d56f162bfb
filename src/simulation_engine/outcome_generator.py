"""Synthetic outcome generator - one plausible "actual season" per call.

A season starts from one noisy performance score per driver; team scores,
championship orders, DNFs, damage, podiums and most special questions are
derived from those scores so the answers stay consistent with each other.
The rest are settled by fixed probability thresholds.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from src.question_catalog.answers import (
    DriverChoiceAnswer,
    RaceCountsAnswer,
    TeammateBattleAnswer,
    ValueWithDriverAnswer,
)
from src.question_catalog.config import NO, TIE, YES
from src.question_catalog.questions import Question, TeammateBattleQuestion
from src.question_catalog.roster import Roster
from src.simulation_engine.config import (
    ALL_PODIUM_LABEL,
    ALPINE_RIVALS,
    ALPINE_TEAM,
    DEFAULT_DRIVER_SKILL,
    DRIVER_SEASON_NOISE,
    FERRARI_TEAM,
    PITLANE_LABEL,
    PODIUM_SET_SIZE_RANGE,
)
from src.simulation_engine.models import SeasonActuals, SkillModel
from src.simulation_engine.random_source import RandomSource
from src.simulation_engine.utils import clamp, rank_by_score, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class SeasonDraw:
    """Quantities drawn once per season and shared by the derivations."""

    driver_score: Dict[str, float]
    driver_order: List[str]
    team_score: Dict[str, float]
    team_order: List[str]
    dnf_by_driver: Dict[str, int]
    damage_by_driver: Dict[str, float]
    dotd_by_driver: Dict[str, float]
    podium: List[str]
    dnf_by_race: Dict[str, int]
    title_lead: float


def _top(values, scores, ascending=False) -> Optional[str]:
    return rank_by_score(values, scores, 1, ascending)[0] if values else None


def _yes_no(flag: bool) -> str:
    return YES if flag else NO


class OutcomeGenerator:
    """Draw :class:`SeasonActuals` from a skill model.

    Args:
        model: Skill model of the run.
        roster: Drivers and teams.
        races: Race calendar.
        rng: The run's random source.
    """

    def __init__(
        self,
        model: SkillModel,
        roster: Roster,
        races: List[str],
        rng: RandomSource,
    ):
        self.model = model
        self.drivers = list(roster.drivers)
        self.teams = list(roster.teams)
        self.races = list(races or [])
        self.rng = rng

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, questions: List[Question]) -> SeasonActuals:
        """Produce one season's actual answers for *questions*.

        Questions without a derivation are left out and score as absent.
        """
        draw = self.draw_season()
        values = {}
        for question in questions:
            derive = self._DERIVATIONS.get(question.id)
            if derive is not None:
                values[question.id] = derive(self, draw)
            elif isinstance(question, TeammateBattleQuestion):
                values[question.id] = self._teammate_battle(draw, question)
        return SeasonActuals(values)

    def draw_season(self) -> SeasonDraw:
        """Draw the per-season quantities every derivation reads."""
        rng = self.rng
        model = self.model
        skill = model.driver_skill

        driver_score = {
            d: model.expected_driver.get(d, 0) + rng.gaussian(0, DRIVER_SEASON_NOISE)
            for d in self.drivers
        }
        driver_order = rank_by_score(self.drivers, driver_score, len(self.drivers))
        team_score = {
            t: sum(driver_score.get(d, 0) for d in model.team_drivers.get(t, ()))
            for t in self.teams
        }
        team_order = rank_by_score(self.teams, team_score, len(self.teams))

        dnf_by_driver = {
            d: max(
                0,
                round_half_up(
                    (100 - skill.get(d, DEFAULT_DRIVER_SKILL)) / 7.5 + rng.gaussian(0, 2.4)
                ),
            )
            for d in self.drivers
        }
        damage_by_driver = {
            d: dnf_by_driver[d] * (0.9 + (100 - skill.get(d, DEFAULT_DRIVER_SKILL)) / 60)
            + max(0, rng.gaussian(0, 1.4))
            for d in self.drivers
        }
        dotd_by_driver = {
            d: model.expected_driver.get(d, 0) * 0.03 + rng.gaussian(0, 0.8)
            for d in self.drivers
        }

        low, high = PODIUM_SET_SIZE_RANGE
        podium_count = clamp(
            round_half_up(8 + rng.uniform() * 6), low, min(high, len(self.drivers))
        )
        podium = rank_by_score(self.drivers, driver_score, podium_count)

        dnf_by_race = {
            race: clamp(round_half_up(2.2 + rng.gaussian(0, 1.4)), 0, 8)
            for race in self.races
        }

        top_two = driver_order[:2]
        title_lead = 0.0
        if len(top_two) == 2:
            title_lead = abs(driver_score[top_two[0]] - driver_score[top_two[1]])

        return SeasonDraw(
            driver_score=driver_score,
            driver_order=driver_order,
            team_score=team_score,
            team_order=team_order,
            dnf_by_driver=dnf_by_driver,
            damage_by_driver=damage_by_driver,
            dotd_by_driver=dotd_by_driver,
            podium=podium,
            dnf_by_race=dnf_by_race,
            title_lead=title_lead,
        )

    # ------------------------------------------------------------------
    # Derivations
    # ------------------------------------------------------------------

    def _drivers_top_3(self, draw):
        return draw.driver_order[:3]

    def _drivers_last(self, draw):
        return draw.driver_order[-1] if draw.driver_order else None

    def _constructors_top_3(self, draw):
        return draw.team_order[:3]

    def _constructors_last(self, draw):
        return draw.team_order[-1] if draw.team_order else None

    def _all_teams_score(self, draw):
        return _yes_no(all(v > 0 for v in draw.team_score.values()))

    def _driver_of_the_day(self, draw):
        return _top(self.drivers, draw.dotd_by_driver)

    def _most_dnfs(self, draw):
        return _top(self.drivers, draw.dnf_by_driver)

    def _destructors_team(self, draw):
        team_damage = {
            t: sum(draw.damage_by_driver.get(d, 0) for d in self.model.team_drivers.get(t, ()))
            for t in self.teams
        }
        return _top(self.teams, team_damage)

    def _destructors_driver(self, draw):
        return _top(self.drivers, draw.damage_by_driver)

    def _podium_finishers(self, draw):
        return list(draw.podium)

    def _alpine_vs_rivals(self, draw):
        alpine = draw.team_score.get(ALPINE_TEAM, 0)
        rivals = sum(draw.team_score.get(t, 0) for t in ALPINE_RIVALS)
        return "More" if alpine > rivals else "Less"

    def _most_points_no_podium(self, draw):
        podium_teams = {self.model.driver_team.get(d) for d in draw.podium}
        without_podium = [t for t in self.teams if t not in podium_teams]
        if not without_podium:
            return ALL_PODIUM_LABEL
        return _top(without_podium, draw.team_score)

    def _race_ban(self, draw):
        if not self.rng.chance(0.22):
            return DriverChoiceAnswer(choice=NO, driver=None)
        risk = {
            d: draw.dnf_by_driver[d]
            + (100 - self.model.driver_skill.get(d, DEFAULT_DRIVER_SKILL)) / 10
            for d in self.drivers
        }
        return DriverChoiceAnswer(choice=YES, driver=_top(self.drivers, risk))

    def _lowest_grid_win(self, draw):
        lowest_grid = clamp(round_half_up(2.8 + self.rng.gaussian(0, 2.2)), 1, 22)
        value = PITLANE_LABEL if self.rng.chance(0.02) else str(lowest_grid)
        driver = draw.driver_order[0] if draw.driver_order else None
        return ValueWithDriverAnswer(value=value, driver=driver)

    def _race_dnfs(self, draw):
        return RaceCountsAnswer(counts=dict(draw.dnf_by_race))

    def _closest_teammates(self, draw):
        closeness = {}
        for team in self.teams:
            pair = self.model.team_drivers.get(team, ())
            if len(pair) < 2:
                closeness[team] = -999
                continue
            skill = self.model.driver_skill
            diff = abs(
                skill.get(pair[0], DEFAULT_DRIVER_SKILL) - skill.get(pair[1], DEFAULT_DRIVER_SKILL)
            )
            closeness[team] = -diff + self.rng.gaussian(0, 0.8)
        return _top(self.teams, closeness)

    def _races_before_title(self, draw):
        return clamp(round_half_up(draw.title_lead / 6 + self.rng.gaussian(0, 1.8)), 0, 10)

    def _first_winner_champion(self, draw):
        return _yes_no(self.rng.chance(0.24))

    def _mercedes_engines_top5(self, draw):
        return _yes_no(self.rng.chance(0.5))

    def _ferrari_podium(self, draw):
        ferrari = self.model.team_drivers.get(FERRARI_TEAM, ())
        return _yes_no(
            len(ferrari) >= 2 and ferrari[0] in draw.podium and ferrari[1] in draw.podium
        )

    def _sprint_champion_same(self, draw):
        return _yes_no(self.rng.chance(clamp(0.42 + draw.title_lead / 80, 0.2, 0.9)))

    def _engine_switch(self, draw):
        return _yes_no(self.rng.chance(0.46))

    def _teammate_battle(self, draw, question: TeammateBattleQuestion):
        if len(question.pair) < 2:
            return None
        left, right = question.pair
        left_score = draw.driver_score.get(left, 0)
        right_score = draw.driver_score.get(right, 0)
        if left_score == right_score:
            return TeammateBattleAnswer(winner=TIE, diff=0)
        return TeammateBattleAnswer(
            winner=left if left_score > right_score else right,
            diff=round_half_up(abs(left_score - right_score) * 3),
        )

    _DERIVATIONS: Dict[str, Callable] = {
        "drivers_championship_top_3": _drivers_top_3,
        "drivers_championship_last": _drivers_last,
        "constructors_championship_top_3": _constructors_top_3,
        "constructors_championship_last": _constructors_last,
        "all_teams_score_points": _all_teams_score,
        "most_driver_of_the_day": _driver_of_the_day,
        "most_dnfs_driver": _most_dnfs,
        "destructors_team": _destructors_team,
        "destructors_driver": _destructors_driver,
        "all_podium_finishers": _podium_finishers,
        "alpine_vs_cadillac_audi": _alpine_vs_rivals,
        "most_points_no_podium": _most_points_no_podium,
        "race_ban": _race_ban,
        "lowest_grid_win_position": _lowest_grid_win,
        "select_three_races_dnfs": _race_dnfs,
        "closest_qualifying_teammates": _closest_teammates,
        "races_before_title_decided": _races_before_title,
        "mini_q1_first_race_winner_champion": _first_winner_champion,
        "mini_q2_mercedes_engines_top5": _mercedes_engines_top5,
        "mini_q3_ferrari_podium": _ferrari_podium,
        "mini_q4_sprint_champion_same": _sprint_champion_same,
        "mini_q5_team_engine_switch_2027_2028": _engine_switch,
    }
