"""
Crypto strategy bots: indicator synthesis, signal scoring, sizing and the
per-strategy cycle engine.
"""

from .bot_engine import BotSimulationEngine, BotState
from .decision_maker import Decision, DecisionMaker
from .indicators import IndicatorSnapshot, IndicatorSynthesizer
from .position_book import OpenPosition, PositionBook
from .profiles import STRATEGY_PROFILES, StrategyProfile, load_strategy_profiles
from .signal_evaluator import Signal, SignalEvaluator

__all__ = [
    'BotSimulationEngine',
    'BotState',
    'Decision',
    'DecisionMaker',
    'IndicatorSnapshot',
    'IndicatorSynthesizer',
    'OpenPosition',
    'PositionBook',
    'STRATEGY_PROFILES',
    'StrategyProfile',
    'load_strategy_profiles',
    'Signal',
    'SignalEvaluator',
]
