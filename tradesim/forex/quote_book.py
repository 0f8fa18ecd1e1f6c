"""FX quote book: mid price plus bid/ask per stablecoin pair."""
from dataclasses import dataclass
from typing import Dict, Iterable

from ..core.price_model import PriceTable
from ..core.random_source import RandomSource
from .pairs import FOREX_CURRENCY_PAIRS, CurrencyPair, pair_volatility

INITIAL_PRICE_JITTER = 0.003
SPREAD_NOISE_PIPS = 0.3


@dataclass
class PairState:
    pair: CurrencyPair
    current_price: float
    bid_price: float
    ask_price: float
    last_spread: float  # pips

    def to_dict(self) -> Dict:
        return {
            'pairId': self.pair.id,
            'symbol': self.pair.symbol,
            'currentPrice': self.current_price,
            'bidPrice': self.bid_price,
            'askPrice': self.ask_price,
            'lastSpread': self.last_spread,
        }


class ForexQuoteBook(PriceTable):
    """PriceTable over the FX pairs that also keeps a live bid/ask.

    Each advance re-draws the half spread as
    (spread_pips + U(-0.3, 0.3)) * pip_size / 2 around the new mid.
    """

    def __init__(self, rng: RandomSource, pairs: Iterable[CurrencyPair] = FOREX_CURRENCY_PAIRS):
        pairs = list(pairs)
        super().__init__(
            {p.id: p.base_price for p in pairs},
            pair_volatility,
            rng,
            jitter=INITIAL_PRICE_JITTER,
        )
        self.states: Dict[str, PairState] = {}
        for pair in pairs:
            price = self.get(pair.id)
            half_spread = pair.spread_pips * pair.pip_size / 2
            self.states[pair.id] = PairState(
                pair=pair,
                current_price=price,
                bid_price=price - half_spread,
                ask_price=price + half_spread,
                last_spread=pair.spread_pips,
            )

    def advance(self, instrument: str) -> float:
        price = super().advance(instrument)
        state = self.states[instrument]
        pair = state.pair
        half_spread = (pair.spread_pips + self.rng.uniform(-SPREAD_NOISE_PIPS, SPREAD_NOISE_PIPS)) * pair.pip_size / 2
        state.current_price = price
        state.bid_price = price - half_spread
        state.ask_price = price + half_spread
        state.last_spread = half_spread * 2 / pair.pip_size
        return price

    def pair(self, pair_id: str) -> CurrencyPair:
        return self.states[pair_id].pair

    def clear(self) -> None:
        super().clear()
        self.states.clear()
