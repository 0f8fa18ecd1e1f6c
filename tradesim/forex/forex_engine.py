"""
StableFX engine: RFQ -> QUOTE -> MATCH -> SETTLE -> PvP cycles on USDC pairs

Each FX agent runs its own cycle every U(8000, 14000) ms. A firing requests a
quote on one pair, matches it against a liquidity provider (85% of the
time), settles it payment-versus-payment on a settlement network, and then
may log pool hedging, clearing, position marks, a P&L summary or market
news.

Settlement-class entries (SETTLE, HEDGE, CLEAR) are handed to the
CrossEngineBridge as they are emitted; whatever the injected ledger factory
returns is published on the pool-transaction bus.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from ..core.engine_base import SimulationEngine
from ..core.event_bus import EventBus
from ..core.log_entry import CycleTimeline, ForexLogCategory, Importance, LogEntry, ScheduledEntry
from ..core.random_source import RandomSource
from ..core.scheduler import VirtualScheduler
from ..core.settings import EngineSettings
from ..bots.position_book import PositionBook
from ..bots.profiles import chain_label
from ..utils.helpers import format_pips, format_rate, format_signed, to_base36
from .bridge import CrossEngineBridge, LedgerTransactionFactory
from .pairs import (
    DEFAULT_SETTLEMENT_NETWORKS,
    FOREX_AGENT,
    FOREX_CURRENCY_PAIRS,
    FX_NEWS,
    LOT_UNITS,
    ForexAgentProfile,
    normalize_networks,
    normalize_pair_ids,
)
from .quote_book import ForexQuoteBook, PairState


BOOT_MESSAGES = (
    ('Initializing StableFX Engine v2.1.0...', 0),
    ('Connecting to Circle StableFX RFQ network...', 500),
    ('Loading USDC stablecoin pair feeds (6 pairs)...', 1200),
    ('Calibrating PvP settlement engine...', 2000),
    ('Initializing clearing pool ($12.5M)...', 2800),
    ('Initializing hedging pool ($7.5M)...', 3400),
    ('Initializing insurance pool ($5.0M)...', 4000),
    ('Risk management module online (max exposure: 25%)', 4500),
    ('=== StableFX Engine ready. Starting RFQ cycles ===', 5000),
)

POSITION_PROBABILITY = 0.4


@dataclass
class ForexPosition:
    """A settled FX trade kept open for marking."""
    id: str
    pair_id: str
    side: str  # 'BUY' or 'SELL'
    lots: float
    pips: float
    entry_price: float
    current_price: float
    pnl: float
    open_time: int
    pip_size: float

    @property
    def instrument(self) -> str:
        return self.pair_id

    @property
    def is_winner(self) -> bool:
        return self.pnl > 0

    def mark(self, price: float) -> float:
        direction = 1 if self.side == 'BUY' else -1
        self.current_price = price
        self.pips = (price - self.entry_price) / self.pip_size * direction
        self.pnl = self.pips * self.pip_size * self.lots * LOT_UNITS
        return self.pnl

    def to_dict(self) -> Dict:
        return {
            'id': self.id, 'pairId': self.pair_id, 'side': self.side, 'lots': self.lots,
            'pips': self.pips, 'entryPrice': self.entry_price, 'currentPrice': self.current_price,
            'pnl': self.pnl, 'openTime': self.open_time,
        }


@dataclass
class ForexAgentState:
    entity_id: str
    name: str
    current_pair: str
    current_price: float
    book: PositionBook = field(default_factory=PositionBook)
    is_running: bool = True
    total_pnl: float = 0.0
    total_trades: int = 0
    total_pips: float = 0.0
    total_lots: float = 0.0
    last_signal: str = 'HOLD'
    last_signal_confidence: float = 0.0

    @property
    def open_positions(self) -> List[ForexPosition]:
        return self.book.positions

    @property
    def win_rate(self) -> float:
        return self.book.win_rate


class ForexSimulationEngine(SimulationEngine):
    """RFQ/PvP simulation for one or more FX agents on a virtual clock."""

    name = 'forex'
    log_id_prefix = 'fxlog'
    system_category = ForexLogCategory.SYSTEM
    boot_messages = BOOT_MESSAGES

    def __init__(
        self,
        profiles: Optional[Sequence[ForexAgentProfile]] = None,
        settings: Optional[EngineSettings] = None,
        scheduler: Optional[VirtualScheduler] = None,
        rng: Optional[RandomSource] = None,
        ledger_factory: Optional[LedgerTransactionFactory] = None,
    ):
        super().__init__(profiles or [FOREX_AGENT], settings, scheduler, rng)
        self.quotes = ForexQuoteBook(self.rng)
        self._pool_bus: EventBus = EventBus(f"{self.name}.pool")
        self.bridge = CrossEngineBridge(ledger_factory, self.rng, self._pool_bus.publish)

        self._user_pairs: List[str] = []
        self._user_networks: List[str] = []
        self._trade_counter = 0

    # ── Public API ──────────────────────────────────────────────────────────

    def on_pool_transaction(self, callback: Callable[[object], None]) -> Callable[[], None]:
        return self._pool_bus.subscribe(callback)

    def get_entity_state(self, entity_id: str) -> Optional[ForexAgentState]:
        return self._states.get(entity_id)

    def get_stats(self) -> Dict[str, float]:
        """Session totals summed over every agent."""
        states = list(self._states.values())
        return {
            'totalPnl': sum(s.total_pnl for s in states),
            'totalTrades': sum(s.total_trades for s in states),
            'totalPips': sum(s.total_pips for s in states),
            'totalLots': sum(s.total_lots for s in states),
            'positions': sum(len(s.open_positions) for s in states),
        }

    def get_pair_states(self) -> Dict[str, PairState]:
        return dict(self.quotes.states)

    def destroy(self) -> None:
        super().destroy()
        self._pool_bus.clear()
        self.quotes = ForexQuoteBook(self.rng)
        self._user_pairs = []
        self._user_networks = []

    # ── Hooks ───────────────────────────────────────────────────────────────

    def _publish(self, entry: LogEntry) -> None:
        super()._publish(entry)
        self.bridge.handle(entry)

    def _apply_filters(self, instruments: Optional[Iterable[str]], venues: Optional[Iterable[str]]) -> None:
        self._user_pairs = normalize_pair_ids(list(instruments or []))
        self._user_networks = normalize_networks(list(venues or []))

    def _init_entity_state(self, entity_id: str) -> None:
        state = self._states.get(entity_id)
        if state is not None and state.is_running:
            return
        profile = self._profiles[entity_id]
        pair_id = self.rng.choice(self._active_pairs(profile))
        self._states[entity_id] = ForexAgentState(
            entity_id=entity_id,
            name=profile.name,
            current_pair=pair_id,
            current_price=self.quotes.get(pair_id),
            book=PositionBook(win_rate=profile.win_rate),
        )

    def _compose(self, entity_id: str) -> List[ScheduledEntry]:
        profile: ForexAgentProfile = self._profiles[entity_id]
        state: ForexAgentState = self._states[entity_id]
        rng = self.rng
        timeline = CycleTimeline(rng, self.settings.speed)

        pair_id = rng.choice(self._active_pairs(profile))
        pair = self.quotes.pair(pair_id)
        price = self.quotes.advance(pair_id)
        state.current_pair = pair_id
        state.current_price = price

        # RFQ
        side = 'BUY' if rng.random() > 0.5 else 'SELL'
        lots = round(rng.uniform(profile.lots_min, profile.lots_max), 2)
        notional = lots * LOT_UNITS
        rfq_id = self._next_trade_id()
        state.last_signal = side
        state.last_signal_confidence = profile.match_rate

        timeline.push(
            ForexLogCategory.RFQ,
            f'RFQ {rfq_id} | {pair.symbol} {side} {lots:.2f} lots (${notional / 1000:.0f}K) | '
            f'Mid: {format_rate(price, pair.pip_size)}',
            Importance.MEDIUM,
            data={'rfqId': rfq_id, 'pairId': pair_id, 'side': side, 'lots': lots, 'price': price},
        )
        timeline.pause(400, 800)

        # QUOTE, always against the client
        quote_spread = rng.uniform(0.5, 2.0) * pair.pip_size
        quote_price = price + quote_spread if side == 'BUY' else price - quote_spread
        quote_pips = abs(quote_price - price) / pair.pip_size
        timeline.push(
            ForexLogCategory.QUOTE,
            f'QUOTE {rfq_id} | {pair.symbol} @ {format_rate(quote_price, pair.pip_size)} | '
            f'Spread: {quote_pips:.1f} pips | Valid: 3s',
            Importance.MEDIUM,
            data={'rfqId': rfq_id, 'pairId': pair_id, 'quotePrice': quote_price, 'spread': quote_pips},
        )
        timeline.pause(500, 1000)

        if rng.chance(profile.match_rate):
            self._compose_settlement(timeline, state, pair, side, lots, price, quote_price, rfq_id)
        else:
            timeline.push(
                ForexLogCategory.MATCH,
                f'MATCH FAILED {rfq_id} | {pair.symbol} | No counterparty at requested price | Requoting...',
                data={'rfqId': rfq_id, 'pairId': pair_id, 'matched': False},
            )

        if rng.chance(0.2):
            timeline.pause(400, 800)
            hedge_pair = rng.choice(FOREX_CURRENCY_PAIRS)
            hedge_lots = round(rng.uniform(0.5, 5.0), 2)
            direction = 'LONG' if rng.random() > 0.5 else 'SHORT'
            timeline.push(
                ForexLogCategory.HEDGE,
                f'HEDGE | {hedge_pair.symbol} {direction} {hedge_lots:.2f} lots | Pool delta neutralization | '
                f'Exposure: {rng.uniform(5, 20):.1f}%',
                Importance.MEDIUM,
                data={'pair': hedge_pair.id, 'direction': direction, 'lots': hedge_lots},
            )

        if rng.chance(0.15):
            timeline.pause(300, 600)
            volume = rng.integer(50000, 500000)
            pairs_settled = rng.integer(2, 6)
            timeline.push(
                ForexLogCategory.CLEAR,
                f'CLEAR | Netting cycle complete | Volume: ${volume / 1000:.0f}K | '
                f'Pairs settled: {pairs_settled} | Pool util: {rng.uniform(60, 85):.1f}%',
                data={'volume': volume, 'pairsSettled': pairs_settled},
            )

        if state.open_positions and rng.chance(0.25):
            timeline.pause(300, 600)
            self._compose_positions(timeline, state)

        if rng.chance(0.3):
            timeline.pause(300, 600)
            timeline.push(
                ForexLogCategory.PNL,
                f'PNL | Session: ${format_signed(state.total_pnl)} | Trades: {state.total_trades} | '
                f'Pips: {format_signed(state.total_pips, 1)} | Lots: {state.total_lots:.2f}',
                Importance.MEDIUM,
                data={'totalPnl': state.total_pnl, 'totalTrades': state.total_trades, 'totalPips': state.total_pips},
            )

        if rng.chance(0.1):
            timeline.pause(300, 600)
            timeline.push(ForexLogCategory.SYSTEM, f'[Market] {rng.choice(FX_NEWS)}', Importance.MEDIUM)

        return timeline.entries

    # ── Cycle sections ──────────────────────────────────────────────────────

    def _compose_settlement(self, timeline, state, pair, side, lots, mid, quote_price, rfq_id) -> None:
        rng = self.rng
        direction = 1 if side == 'BUY' else -1

        match_price = quote_price * (1 + rng.uniform(-0.00005, 0.00005))
        counterparty = f'LP-{rng.integer(1, 8)}'
        timeline.push(
            ForexLogCategory.MATCH,
            f'MATCH {rfq_id} | {pair.symbol} {side} @ {format_rate(match_price, pair.pip_size)} | '
            f'{lots:.2f} lots | Counterparty: {counterparty}',
            Importance.HIGH,
            data={'rfqId': rfq_id, 'pairId': pair.id, 'matchPrice': match_price, 'counterparty': counterparty},
        )
        timeline.pause(1000, 2500)

        settle_price = match_price * (1 + rng.uniform(-0.00002, 0.00002))
        pips = (settle_price - mid) / pair.pip_size * direction
        pnl = pips * pair.pip_size * lots * LOT_UNITS
        timeline.push(
            ForexLogCategory.SETTLE,
            f'SETTLE {rfq_id} | PvP confirmed | {pair.symbol} @ {format_rate(settle_price, pair.pip_size)} | '
            f'P&L: {format_pips(pips)} (${format_signed(pnl)})',
            Importance.HIGH,
            data={'rfqId': rfq_id, 'pairId': pair.id, 'settlePrice': settle_price, 'pips': pips, 'pnl': pnl, 'pvp': True},
        )
        timeline.pause(300, 600)

        network = rng.choice(self._user_networks or DEFAULT_SETTLEMENT_NETWORKS)
        gas = rng.integer(10, 50)
        notional = lots * LOT_UNITS
        timeline.push(
            ForexLogCategory.PVP,
            f'PvP {rfq_id} | Atomic settlement confirmed on {chain_label(network)} | '
            f'USDC transferred: ${notional:,.0f} | Gas: ~$0.{gas}',
            Importance.MEDIUM,
            data={'rfqId': rfq_id, 'pairId': pair.id, 'settled': True, 'gasWei': gas, 'network': network},
        )

        state.total_trades += 1
        state.total_pnl += pnl
        state.total_pips += pips
        state.total_lots += lots

        if rng.chance(POSITION_PROBABILITY):
            evicted = state.book.open(ForexPosition(
                id=rfq_id,
                pair_id=pair.id,
                side=side,
                lots=lots,
                pips=pips,
                entry_price=match_price,
                current_price=settle_price,
                pnl=pnl,
                open_time=self.scheduler.wall_time_ms(),
                pip_size=pair.pip_size,
            ))
            if evicted is not None:
                logger.debug(f"{state.entity_id}: evicted {evicted.id} at the position cap")

    def _compose_positions(self, timeline: CycleTimeline, state: ForexAgentState) -> None:
        state.book.mark_to_market(self.quotes, advance=False)
        updates = [
            f'{self.quotes.pair(p.pair_id).symbol} {p.side}: {format_pips(p.pips)}'
            for p in state.open_positions
        ]
        timeline.push(
            ForexLogCategory.POSITION,
            f"POSITION | {' | '.join(updates)} | Open: {len(state.open_positions)}",
            data={'positions': len(state.open_positions)},
        )

        closed = state.book.maybe_close(self.rng, min_open=3)
        if closed is not None:
            state.total_pnl += closed.pnl * self.rng.uniform(0.01, 0.03)

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _active_pairs(self, profile: ForexAgentProfile) -> Sequence[str]:
        return self._user_pairs or profile.supported_pairs

    def _next_trade_id(self) -> str:
        self._trade_counter += 1
        return f'FXT_{to_base36(self.scheduler.wall_time_ms())}_{to_base36(self._trade_counter)}'
