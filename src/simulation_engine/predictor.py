"""Synthetic predictor generator - one player's forecast per question.

Forecasts track the skill model more closely the higher the player's
``knowledge``; ``boldness`` nudges the player toward unlikely picks.
Questions tied to a real-world quantity have a bespoke derivation; any
other question falls back to a random draw for its type.
"""

import logging
import re
from typing import Callable, Dict, List, Optional

from src.question_catalog.answers import (
    DriverChoiceAnswer,
    TeammateBattleAnswer,
    ValueWithDriverAnswer,
)
from src.question_catalog.config import NO, TIE, YES
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
)
from src.question_catalog.roster import Roster
from src.simulation_engine.config import (
    ALL_PODIUM_LABEL,
    ALPINE_RIVALS,
    ALPINE_TEAM,
    BOLDNESS_DISTRIBUTION,
    DEFAULT_DRIVER_SKILL,
    HIGH_DNF_RACE_PATTERN,
    KNOWLEDGE_DISTRIBUTION,
    PITLANE_LABEL,
)
from src.simulation_engine.models import PredictionProfile, SkillModel
from src.simulation_engine.random_source import RandomSource
from src.simulation_engine.utils import clamp, rank_by_score, round_half_up

logger = logging.getLogger(__name__)

_HIGH_DNF_RACE = re.compile(HIGH_DNF_RACE_PATTERN, re.IGNORECASE)


def draw_profile(rng: RandomSource) -> PredictionProfile:
    """Draw a fresh player profile around the configured means."""
    k_mean, k_std, k_low, k_high = KNOWLEDGE_DISTRIBUTION
    b_mean, b_std, b_low, b_high = BOLDNESS_DISTRIBUTION
    return PredictionProfile(
        knowledge=clamp(k_mean + rng.gaussian(0, k_std), k_low, k_high),
        boldness=clamp(b_mean + rng.gaussian(0, b_std), b_low, b_high),
    )


def _top(values, scores, ascending=False) -> Optional[str]:
    return rank_by_score(values, scores, 1, ascending)[0] if values else None


def _mini(prior_yes: float) -> Callable:
    """Yes/no pick leaning toward *prior_yes*."""

    def predict(generator, question, profile, noise):
        return generator._pick_boolean(prior_yes, profile)

    return predict


class PredictorGenerator:
    """Produce synthetic predicted answers.

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
        self.roster = roster
        self.drivers = list(roster.drivers)
        self.teams = list(roster.teams)
        self.races = list(races or [])
        self.rng = rng

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def predict(self, question: Question, profile: PredictionProfile):
        """One predicted answer for *question* by a player with *profile*.

        Returns ``None`` when the question offers nothing to pick from.
        """
        noise = 22 * (1 - profile.knowledge) + 2
        bespoke = self._BESPOKE.get(question.id)
        if bespoke is not None:
            return bespoke(self, question, profile, noise)
        if isinstance(question, TeammateBattleQuestion):
            return self._teammate_battle(question, profile, noise)
        return self._generic(question)

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _pick_boolean(self, prior_yes: float, profile: PredictionProfile) -> str:
        pull = 0.55 + profile.knowledge * 0.85
        p = clamp(0.5 + (prior_yes - 0.5) * pull + self.rng.gaussian(0, 0.06), 0.02, 0.98)
        return YES if self.rng.chance(p) else NO

    def _noisy(self, values, base: Dict[str, float], std: float) -> Dict[str, float]:
        return {v: base.get(v, 0) + self.rng.gaussian(0, std) for v in values}

    def _skill(self, driver: str) -> float:
        return self.model.driver_skill.get(driver, DEFAULT_DRIVER_SKILL)

    def _risky_driver(self, noise: float) -> Optional[str]:
        risk = {d: (100 - self._skill(d)) + self.rng.gaussian(0, noise * 0.7) for d in self.drivers}
        return _top(self.drivers, risk)

    # ------------------------------------------------------------------
    # Bespoke derivations
    # ------------------------------------------------------------------

    def _drivers_top_3(self, question, profile, noise):
        scores = self._noisy(self.drivers, self.model.expected_driver, noise)
        return rank_by_score(self.drivers, scores, 3)

    def _drivers_last(self, question, profile, noise):
        scores = self._noisy(self.drivers, self.model.expected_driver, noise)
        return _top(self.drivers, scores, ascending=True)

    def _constructors_top_3(self, question, profile, noise):
        scores = self._noisy(self.teams, self.model.expected_team, noise * 0.8)
        return rank_by_score(self.teams, scores, 3)

    def _constructors_last(self, question, profile, noise):
        scores = self._noisy(self.teams, self.model.expected_team, noise * 0.8)
        return _top(self.teams, scores, ascending=True)

    def _all_teams_score(self, question, profile, noise):
        return self._pick_boolean(0.44, profile)

    def _driver_of_the_day(self, question, profile, noise):
        scores = self._noisy(self.drivers, self.model.expected_driver, noise * 0.55)
        return _top(self.drivers, scores)

    def _risky_driver_pick(self, question, profile, noise):
        return self._risky_driver(noise)

    def _destructors_team(self, question, profile, noise):
        """Weighted roll favouring weak teams with weak drivers."""
        ordered = rank_by_score(self.teams, self.model.expected_team, len(self.teams), ascending=True)
        rank_index = {team: i for i, team in enumerate(ordered)}
        last_index = max(1, len(ordered) - 1)
        volatility = 0.08 + (1 - profile.knowledge) * 0.22 + profile.boldness * 0.1

        weights = []
        for team in self.teams:
            rank_risk = 1 - rank_index.get(team, 0) / last_index
            team_drivers = self.model.team_drivers.get(team, ())
            avg_skill = (
                sum(self._skill(d) for d in team_drivers) / len(team_drivers)
                if team_drivers
                else DEFAULT_DRIVER_SKILL
            )
            driver_risk = clamp((100 - avg_skill) / 28, 0.05, 1.2)
            risk = clamp(
                0.62 * rank_risk + 0.38 * driver_risk + self.rng.gaussian(0, volatility),
                0.01,
                1.5,
            )
            weights.append((team, max(0.01, risk ** 0.9)))

        if not weights:
            return None
        roll = self.rng.uniform() * sum(w for _, w in weights)
        for team, weight in weights:
            roll -= weight
            if roll <= 0:
                return team
        return weights[-1][0]

    def _podium_finishers(self, question, profile, noise):
        scores = self._noisy(self.drivers, self.model.expected_driver, noise * 0.55)
        count = clamp(
            round_half_up(7 + profile.knowledge * 5 + self.rng.gaussian(0, 1.8)),
            4,
            min(16, len(self.drivers)),
        )
        return rank_by_score(self.drivers, scores, count)

    def _alpine_vs_rivals(self, question, profile, noise):
        expected = self.model.expected_team
        alpine = expected.get(ALPINE_TEAM, 0)
        rivals = sum(expected.get(t, 0) for t in ALPINE_RIVALS)
        prior = 0.6 if alpine > rivals else 0.12
        p_more = clamp(prior + (profile.boldness - 0.5) * 0.08, 0.02, 0.95)
        return "More" if self.rng.chance(p_more) else "Less"

    def _most_points_no_podium(self, question, profile, noise):
        options = question.resolve_options(self.roster, self.races)
        all_podium_label = next(
            (o for o in options if ALL_PODIUM_LABEL.lower() in o.lower()),
            ALL_PODIUM_LABEL,
        )
        ordered = rank_by_score(self.teams, self.model.expected_team, len(self.teams))
        rank_index = {team: i for i, team in enumerate(ordered)}
        last_index = max(1, len(ordered) - 1)

        scores = {}
        for team in self.teams:
            podium_chance = clamp(0.88 - (rank_index.get(team, 0) / last_index) * 0.78, 0.1, 0.88)
            potential = self.model.expected_team.get(team, 0) * (1 - podium_chance)
            scores[team] = potential + self.rng.gaussian(0, noise * 0.45)

        likely = _top(self.teams, scores) or all_podium_label
        if self.rng.chance(0.03):
            return all_podium_label
        return likely

    def _race_ban(self, question, profile, noise):
        if self._pick_boolean(0.22, profile) != YES:
            return DriverChoiceAnswer(choice=NO, driver=None)
        return DriverChoiceAnswer(choice=YES, driver=self._risky_driver(noise))

    def _lowest_grid_win(self, question, profile, noise):
        numeric = []
        for option in question.resolve_options(self.roster, self.races):
            if option.lower() == PITLANE_LABEL.lower():
                continue
            try:
                numeric.append(float(option))
            except ValueError:
                continue
        low = min(numeric) if numeric else 1
        high = max(numeric) if numeric else 22

        mean = 3.3 + (1 - profile.knowledge) * 2.2 + self.rng.gaussian(0, 1.7)
        position = int(clamp(round_half_up(mean), low, high))
        value = PITLANE_LABEL if self.rng.chance(0.02) else str(position)
        scores = self._noisy(self.drivers, self.model.expected_driver, noise * 0.65)
        return ValueWithDriverAnswer(value=value, driver=_top(self.drivers, scores))

    def _race_dnfs(self, question, profile, noise):
        scores = {
            race: (3 if _HIGH_DNF_RACE.search(race) else 1)
            + self.rng.gaussian(0, (1 - profile.knowledge) * 1.2)
            for race in self.races
        }
        count = getattr(question, "count", 3)
        return rank_by_score(self.races, scores, max(1, count))

    def _closest_teammates(self, question, profile, noise):
        scores = {}
        for team in self.teams:
            pair = self.model.team_drivers.get(team, ())
            if len(pair) < 2:
                scores[team] = -999
                continue
            diff = abs(self._skill(pair[0]) - self._skill(pair[1]))
            scores[team] = -diff + self.rng.gaussian(0, noise * 0.2)
        return _top(self.teams, scores)

    def _races_before_title(self, question, profile, noise):
        expected = self.model.expected_driver
        top_two = rank_by_score(self.drivers, expected, 2)
        lead = abs(expected.get(top_two[0], 0) - expected.get(top_two[-1], 0)) if top_two else 0
        return clamp(
            round_half_up(lead / 4.2 + self.rng.gaussian(0, 1.7 + (1 - profile.knowledge))),
            0,
            10,
        )

    _BESPOKE: Dict[str, Callable] = {
        "drivers_championship_top_3": _drivers_top_3,
        "drivers_championship_last": _drivers_last,
        "constructors_championship_top_3": _constructors_top_3,
        "constructors_championship_last": _constructors_last,
        "all_teams_score_points": _all_teams_score,
        "most_driver_of_the_day": _driver_of_the_day,
        "most_dnfs_driver": _risky_driver_pick,
        "destructors_driver": _risky_driver_pick,
        "destructors_team": _destructors_team,
        "all_podium_finishers": _podium_finishers,
        "alpine_vs_cadillac_audi": _alpine_vs_rivals,
        "most_points_no_podium": _most_points_no_podium,
        "race_ban": _race_ban,
        "lowest_grid_win_position": _lowest_grid_win,
        "select_three_races_dnfs": _race_dnfs,
        "closest_qualifying_teammates": _closest_teammates,
        "races_before_title_decided": _races_before_title,
        "mini_q1_first_race_winner_champion": _mini(0.24),
        "mini_q2_mercedes_engines_top5": _mini(0.48),
        "mini_q3_ferrari_podium": _mini(0.66),
        "mini_q4_sprint_champion_same": _mini(0.56),
        "mini_q5_team_engine_switch_2027_2028": _mini(0.52),
    }

    # ------------------------------------------------------------------
    # Teammate battles and generic fallbacks
    # ------------------------------------------------------------------

    def _teammate_battle(self, question: TeammateBattleQuestion, profile, noise):
        if len(question.pair) < 2:
            return None
        left, right = question.pair
        spread = max(0.35, noise * 0.12)
        left_score = self.model.expected_driver.get(left, 0) + self.rng.gaussian(0, spread)
        right_score = self.model.expected_driver.get(right, 0) + self.rng.gaussian(0, spread)
        gap = abs(left_score - right_score)
        tie_window = clamp(0.35 + (1 - profile.knowledge) * 0.55, 0.35, 0.9)
        if gap < tie_window:
            tie_chance = clamp(0.72 - gap / (tie_window * 1.5), 0.12, 0.72)
        else:
            tie_chance = 0.06

        if self.rng.chance(tie_chance):
            return TeammateBattleAnswer(winner=TIE, diff=0)
        winner = left if left_score > right_score else right
        diff = max(0, round_half_up(gap * 3 + self.rng.gaussian(0, noise * 0.45)))
        return TeammateBattleAnswer(winner=winner, diff=diff)

    def _generic(self, question: Question):
        """Random answer for a question without a skill signal."""
        rng = self.rng
        options = question.resolve_options(self.roster, self.races)

        if isinstance(question, RankingQuestion):
            return rng.sample(options, question.count) if options else None
        if isinstance(question, MultiSelectQuestion):
            if not options:
                return None
            return rng.sample(options, rng.randint(1, max(1, min(6, len(options)))))
        if isinstance(question, MultiSelectLimitedQuestion):
            return rng.sample(self.races, question.count) if self.races else None
        if isinstance(question, BooleanWithDriverQuestion):
            if rng.chance(0.5):
                return DriverChoiceAnswer(choice=YES, driver=rng.choice(self.drivers))
            return DriverChoiceAnswer(choice=NO, driver=None)
        if isinstance(question, SingleChoiceWithDriverQuestion):
            return ValueWithDriverAnswer(value=rng.choice(options), driver=rng.choice(self.drivers))
        if isinstance(question, NumericWithDriverQuestion):
            return ValueWithDriverAnswer(value=rng.randint(0, 30), driver=rng.choice(self.drivers))
        if isinstance(question, BooleanQuestion):
            return YES if rng.chance(0.5) else NO
        if isinstance(question, NumericQuestion):
            return rng.randint(0, 30)
        if isinstance(question, (TextQuestion, FreeTextQuestion)):
            return rng.choice(options) or f"Simulated answer {rng.randint(1, 999)}"
        if isinstance(question, SingleChoiceQuestion):
            return rng.choice(options)

        logger.debug("No prediction rule for %s (%s)", question.id, question.type)
        return None
