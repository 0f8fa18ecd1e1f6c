"""Signal evaluator: bull/bear evidence scoring over an indicator snapshot."""
from dataclasses import dataclass, field
from typing import List

from ..core.random_source import RandomSource
from .indicators import DEATH, GOLDEN, IndicatorSnapshot
from .profiles import SIGNAL_THRESHOLDS, StrategyProfile

LONG = 'LONG'
SHORT = 'SHORT'
HOLD = 'HOLD'

MAX_CONFIDENCE = 0.95
CONFIDENCE_SCALE = 6.0


@dataclass(frozen=True)
class Signal:
    """A directional call. confidence is 0 for HOLD."""
    direction: str
    confidence: float
    reason: str

    def to_dict(self):
        return {'direction': self.direction, 'confidence': self.confidence, 'reason': self.reason}


@dataclass
class Score:
    bull: float = 0.0
    bear: float = 0.0
    reasons: List[str] = field(default_factory=list)

    @property
    def net(self) -> float:
        return self.bull - self.bear

    @property
    def confidence(self) -> float:
        return min(abs(self.net) / CONFIDENCE_SCALE, MAX_CONFIDENCE)


def score_snapshot(snapshot: IndicatorSnapshot) -> Score:
    """Accumulate independent bull/bear evidence from each indicator."""
    score = Score()

    rsi = snapshot.rsi
    if rsi < 30:
        score.bull += 2
        score.reasons.append('RSI oversold')
    elif rsi < 40:
        score.bull += 1
        score.reasons.append('RSI low')
    elif rsi > 70:
        score.bear += 2
        score.reasons.append('RSI overbought')
    elif rsi > 60:
        score.bear += 1
        score.reasons.append('RSI high')

    histogram = snapshot.macd.histogram
    if histogram > 0.3:
        score.bull += 1.5
        score.reasons.append('MACD bullish')
    elif histogram < -0.3:
        score.bear += 1.5
        score.reasons.append('MACD bearish')

    ema = snapshot.ema
    if ema.crossover == GOLDEN:
        score.bull += 2.5
        score.reasons.append('Golden cross')
    elif ema.crossover == DEATH:
        score.bear += 2.5
        score.reasons.append('Death cross')
    elif ema.short > ema.long:
        score.bull += 0.5
    else:
        score.bear += 0.5

    position = snapshot.bollinger.position
    if position < 15:
        score.bull += 1
        score.reasons.append('BB support')
    elif position > 85:
        score.bear += 1
        score.reasons.append('BB resistance')

    # Volume confirms whichever side leads; a tie counts for the bears
    if snapshot.volume.ratio > 1.5:
        if score.bull > score.bear:
            score.bull += 1
        else:
            score.bear += 1
        score.reasons.append('Volume confirms')

    return score


class SignalEvaluator:
    """Turns a snapshot into LONG/SHORT/HOLD for a given strategy.

    The trade-frequency gate models the bot choosing not to act this cycle;
    it rejects regardless of the score.
    """

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def evaluate(self, profile: StrategyProfile, snapshot: IndicatorSnapshot) -> Signal:
        score = score_snapshot(snapshot)
        threshold = SIGNAL_THRESHOLDS[profile.risk_tolerance]

        if self.rng.random() > profile.trade_frequency:
            return Signal(HOLD, 0.0, 'Cycle skip')

        reason = ', '.join(score.reasons[:3])
        if score.net > threshold:
            return Signal(LONG, score.confidence, reason)
        if score.net < -threshold:
            return Signal(SHORT, score.confidence, reason)
        return Signal(HOLD, 0.0, 'No clear signal')
