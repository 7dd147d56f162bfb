from src.simulation_engine.aggregator import (
    MonteCarloAggregator,
    SimulationError,
    analyze_actuals,
    impact_label,
    simulate,
)
from src.simulation_engine.models import (
    BalanceReport,
    BalanceRow,
    PredictionProfile,
    SeasonActuals,
    SkillModel,
)
from src.simulation_engine.outcome_generator import OutcomeGenerator
from src.simulation_engine.predictor import PredictorGenerator, draw_profile
from src.simulation_engine.random_source import RandomSource
from src.simulation_engine.skill_model import build_skill_model

__all__ = [
    "BalanceReport",
    "BalanceRow",
    "MonteCarloAggregator",
    "OutcomeGenerator",
    "PredictionProfile",
    "PredictorGenerator",
    "RandomSource",
    "SeasonActuals",
    "SimulationError",
    "SkillModel",
    "analyze_actuals",
    "build_skill_model",
    "draw_profile",
    "impact_label",
    "simulate",
]
