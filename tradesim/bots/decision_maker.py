"""Decision maker: gates a signal and sizes the order."""
from dataclasses import dataclass

from ..core.random_source import RandomSource
from .position_book import MAX_OPEN_POSITIONS
from .profiles import MIN_CONFIDENCE, StrategyProfile
from .signal_evaluator import Signal


@dataclass(frozen=True)
class Decision:
    execute: bool
    position_size: float = 0.0  # % of allocated capital
    leverage: int = 0
    risk_reward: float = 0.0
    reason: str = ''

    def to_dict(self):
        return {
            'execute': self.execute, 'positionSize': self.position_size,
            'leverage': self.leverage, 'riskReward': self.risk_reward, 'reason': self.reason,
        }


class DecisionMaker:
    """Position-count and confidence gates, then uniform sizing from the profile.

    A rejection is not retried; the engine logs it as a SKIP decision.
    """

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def decide(self, profile: StrategyProfile, signal: Signal, state) -> Decision:
        if len(state.open_positions) >= MAX_OPEN_POSITIONS:
            return Decision(execute=False, reason=f'Max positions reached ({MAX_OPEN_POSITIONS})')

        min_confidence = MIN_CONFIDENCE[profile.risk_tolerance]
        if signal.confidence < min_confidence:
            return Decision(
                execute=False,
                reason=f'Confidence too low ({signal.confidence * 100:.0f}% < {min_confidence * 100:.0f}%)',
            )

        return Decision(
            execute=True,
            position_size=self.rng.uniform(profile.position_size_min, profile.position_size_max),
            leverage=self.rng.integer(profile.leverage_min, profile.leverage_max),
            risk_reward=self.rng.uniform(1.2, 3.5),
        )
