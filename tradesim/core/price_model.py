"""Shared last-price table advanced by a bounded multiplicative random walk."""
from typing import Callable, Dict, Optional

from .random_source import RandomSource


class PriceTable:
    """Last known price per instrument.

    The only price state shared across entities. Every `advance` is a single
    read-modify-write with no suspension in between.
    """

    def __init__(
        self,
        base_prices: Dict[str, float],
        volatility: Callable[[str], float],
        rng: RandomSource,
        jitter: float = 0.0,
        fallback_price: Optional[float] = None,
    ):
        """
        Args:
            base_prices: Registry price per instrument
            volatility: Drift bound v per instrument; each step is U(-v, v)
            rng: Random source
            jitter: Initial prices are base * (1 + U(-jitter, jitter))
            fallback_price: Price used for instruments not in the registry
        """
        self.base_prices = dict(base_prices)
        self.volatility = volatility
        self.rng = rng
        self.fallback_price = fallback_price
        self._prices: Dict[str, float] = {
            instrument: base * (1 + rng.uniform(-jitter, jitter))
            for instrument, base in self.base_prices.items()
        }

    def get(self, instrument: str) -> float:
        price = self._prices.get(instrument) or self.base_prices.get(instrument) or self.fallback_price
        if price is None:
            raise KeyError(f"No price for {instrument}")
        return price

    def advance(self, instrument: str) -> float:
        """Apply one drift step to `instrument`, store and return the new price."""
        v = self.volatility(instrument)
        price = self.get(instrument) * (1 + self.rng.uniform(-v, v))
        self._prices[instrument] = price
        return price

    def snapshot(self) -> Dict[str, float]:
        return dict(self._prices)

    def clear(self) -> None:
        self._prices.clear()

    def __contains__(self, instrument: str) -> bool:
        return instrument in self._prices or instrument in self.base_prices
