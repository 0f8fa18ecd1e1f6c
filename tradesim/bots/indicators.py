"""
Indicator Synthesizer

Derives a technical-indicator snapshot from the previous snapshot and the
new price. Nothing here is computed from real candles: each reading evolves
from its previous value so consecutive snapshots stay correlated.

- RSI mean-reverts toward the strategy's bias, clamped to [8, 95]
- MACD histogram decays, takes noise and a push from RSI extremity, ±2
- EMA short/long smooth toward price at 0.1 / 0.05; the crossover tag is
  edge-triggered (set only on the cycle the ordering flips)
- Bollinger band is centred on price with a sampled half width
- Volume ratio is drawn independently
"""

from dataclasses import asdict, dataclass
from typing import Dict, Optional

from ..core.random_source import RandomSource
from ..utils.helpers import clamp
from .profiles import StrategyProfile


RSI_MIN = 8.0
RSI_MAX = 95.0
HISTOGRAM_LIMIT = 2.0
EMA_FAST_ALPHA = 0.1
EMA_SLOW_ALPHA = 0.05

GOLDEN = 'golden'
DEATH = 'death'
NO_CROSS = 'none'


@dataclass(frozen=True)
class MacdReading:
    value: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class EmaReading:
    short: float
    long: float
    crossover: str


@dataclass(frozen=True)
class BollingerBand:
    upper: float
    middle: float
    lower: float
    width: float  # half width as a fraction of price
    position: float  # price location inside the band, 0-100


@dataclass(frozen=True)
class VolumeReading:
    current: float
    average: float
    ratio: float


@dataclass(frozen=True)
class IndicatorSnapshot:
    rsi: float
    macd: MacdReading
    ema: EmaReading
    bollinger: BollingerBand
    volume: VolumeReading

    def to_dict(self) -> Dict:
        return asdict(self)


def detect_crossover(prev_short: float, prev_long: float, short: float, long: float) -> str:
    """
    Classify an EMA update as a crossover event.

    Args:
        prev_short: Fast EMA before the update
        prev_long: Slow EMA before the update
        short: Fast EMA after the update
        long: Slow EMA after the update

    Returns:
        'golden' when fast crosses above slow, 'death' when it crosses
        below, 'none' otherwise (including when the ordering is unchanged)
    """
    if prev_short <= prev_long and short > long:
        return GOLDEN
    if prev_short >= prev_long and short < long:
        return DEATH
    return NO_CROSS


class IndicatorSynthesizer:
    """Evolves an IndicatorSnapshot one cycle at a time."""

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def synthesize(
        self,
        profile: StrategyProfile,
        price: float,
        previous: Optional[IndicatorSnapshot] = None,
    ) -> IndicatorSnapshot:
        """
        Produce the next snapshot.

        Args:
            profile: Strategy whose RSI bias anchors the mean reversion
            price: Newly advanced price
            previous: Last snapshot for this entity (None on the first cycle)

        Returns:
            New IndicatorSnapshot
        """
        rsi = self._next_rsi(profile, previous)
        macd = self._next_macd(rsi, previous)
        ema = self._next_ema(price, previous)
        bollinger = self._band(price)
        volume = self._volume()
        return IndicatorSnapshot(rsi=rsi, macd=macd, ema=ema, bollinger=bollinger, volume=volume)

    def _next_rsi(self, profile: StrategyProfile, previous: Optional[IndicatorSnapshot]) -> float:
        prev_rsi = previous.rsi if previous is not None else profile.rsi_bias
        drift = self.rng.uniform(-8, 8)
        reversion = (profile.rsi_bias - prev_rsi) * 0.15
        return clamp(prev_rsi + drift + reversion, RSI_MIN, RSI_MAX)

    def _next_macd(self, rsi: float, previous: Optional[IndicatorSnapshot]) -> MacdReading:
        bias = 0.3 if rsi > 65 else -0.3 if rsi < 35 else 0.0
        prev_hist = previous.macd.histogram if previous is not None else 0.0
        histogram = clamp(prev_hist * 0.7 + self.rng.uniform(-0.5, 0.5) + bias, -HISTOGRAM_LIMIT, HISTOGRAM_LIMIT)
        value = histogram * self.rng.uniform(0.8, 1.5)
        return MacdReading(value=value, signal=value - histogram, histogram=histogram)

    def _next_ema(self, price: float, previous: Optional[IndicatorSnapshot]) -> EmaReading:
        prev_short = previous.ema.short if previous is not None else price
        prev_long = previous.ema.long if previous is not None else price
        short = prev_short * (1 - EMA_FAST_ALPHA) + price * EMA_FAST_ALPHA
        long = prev_long * (1 - EMA_SLOW_ALPHA) + price * EMA_SLOW_ALPHA
        return EmaReading(short=short, long=long, crossover=detect_crossover(prev_short, prev_long, short, long))

    def _band(self, price: float) -> BollingerBand:
        half_width = price * self.rng.uniform(0.01, 0.04)
        upper = price + half_width
        lower = price - half_width
        position = (price - lower) / (upper - lower) * 100
        return BollingerBand(upper=upper, middle=price, lower=lower, width=half_width / price, position=position)

    def _volume(self) -> VolumeReading:
        ratio = self.rng.uniform(0.3, 2.5)
        current = self.rng.uniform(100000, 5000000)
        return VolumeReading(current=current, average=current / ratio, ratio=ratio)
