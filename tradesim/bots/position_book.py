"""
Position Book

Per-entity open positions and the smoothed win rate.

Holds at most MAX_OPEN_POSITIONS; opening beyond the cap evicts the oldest.
A close (eviction excluded) feeds the win rate:

    win_rate = win_rate * 0.95 + (0.05 if closed position won else 0)

clamped to [0.35, 0.75].
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from ..core.price_model import PriceTable
from ..core.random_source import RandomSource
from ..utils.helpers import clamp


MAX_OPEN_POSITIONS = 3
WIN_RATE_MIN = 0.35
WIN_RATE_MAX = 0.75
WIN_RATE_DECAY = 0.95
EARLY_CLOSE_PROBABILITY = 0.3


@dataclass
class OpenPosition:
    """A simulated leveraged position on a crypto pair."""
    id: str
    pair: str
    side: str  # 'LONG' or 'SHORT'
    entry_price: float
    current_price: float
    size: float  # % of allocated capital
    leverage: int
    pnl: float = 0.0
    pnl_percent: float = 0.0

    @property
    def instrument(self) -> str:
        return self.pair

    @property
    def is_winner(self) -> bool:
        return self.pnl_percent > 0

    def mark(self, price: float) -> float:
        """Re-price the position. Returns the new P&L."""
        self.current_price = price
        if self.side == 'LONG':
            diff = (price - self.entry_price) / self.entry_price
        else:
            diff = (self.entry_price - price) / self.entry_price
        self.pnl_percent = diff * self.leverage * 100
        self.pnl = diff * self.leverage * self.size
        return self.pnl


def smoothed_win_rate(win_rate: float, won: bool) -> float:
    """Exponentially smoothed win rate after one close, clamped to its band."""
    updated = win_rate * WIN_RATE_DECAY + (1 - WIN_RATE_DECAY if won else 0.0)
    return clamp(updated, WIN_RATE_MIN, WIN_RATE_MAX)


P = TypeVar('P')


class PositionBook(Generic[P]):
    """Capped, oldest-first list of open positions plus the entity's win rate."""

    def __init__(self, win_rate: float = 0.5, max_positions: int = MAX_OPEN_POSITIONS):
        self.positions: List[P] = []
        self.win_rate = win_rate
        self.max_positions = max_positions

    def open(self, position: P) -> Optional[P]:
        """Add a position; returns the evicted oldest one if the cap was hit."""
        self.positions.append(position)
        if len(self.positions) > self.max_positions:
            return self.positions.pop(0)
        return None

    def mark_to_market(self, prices: PriceTable, advance: bool = True) -> float:
        """
        Re-price every open position.

        Args:
            prices: Shared price table
            advance: Step the random walk for each instrument (True) or read
                     the last price (False)

        Returns:
            Sum of the positions' P&L after marking
        """
        total = 0.0
        for position in self.positions:
            price = prices.advance(position.instrument) if advance else prices.get(position.instrument)
            total += position.mark(price)
        return total

    def close_oldest(self) -> P:
        closed = self.positions.pop(0)
        self.win_rate = smoothed_win_rate(self.win_rate, closed.is_winner)
        return closed

    def maybe_close(self, rng: RandomSource, min_open: int = 2,
                    probability: float = EARLY_CLOSE_PROBABILITY) -> Optional[P]:
        """Close the oldest position with `probability` when at least `min_open` are open."""
        if len(self.positions) >= min_open and rng.chance(probability):
            return self.close_oldest()
        return None

    def exposure(self) -> float:
        return sum(p.size * p.leverage for p in self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)
