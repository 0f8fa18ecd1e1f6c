"""Bot simulation engine: independent trading cycles per strategy personality.

Each running strategy fires every U(scan_interval_min, scan_interval_max) ms.
A firing picks a pair, advances its price, evolves the indicators, and
composes the console lines for that cycle:

    SCAN -> THINKING x1-3 -> INDICATOR -> [NEWS] -> [ANALYSIS]
         -> (non-HOLD) STRATEGY -> SIGNAL -> DECISION -> [ORDER -> FILLED]
         -> [PNL] -> [RISK]

Lines are emitted at increasing offsets from the firing so the console
reads like a bot thinking in real time.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from ..core.engine_base import SimulationEngine
from ..core.log_entry import BotLogCategory, CycleTimeline, Importance, ScheduledEntry
from ..core.price_model import PriceTable
from ..core.random_source import RandomSource
from ..core.scheduler import VirtualScheduler
from ..core.settings import EngineSettings
from ..utils.helpers import format_price, to_base36
from . import narration
from .decision_maker import DecisionMaker
from .indicators import IndicatorSnapshot, IndicatorSynthesizer
from .position_book import OpenPosition, PositionBook
from .profiles import (
    DEFAULT_CHAINS,
    FALLBACK_PRICE,
    NEWS_HEADLINES,
    PAIR_PRICES,
    STRATEGY_PROFILES,
    StrategyProfile,
    chain_label,
    normalize_chains,
    normalize_pairs,
    pair_volatility,
)
from .signal_evaluator import HOLD, LONG, SignalEvaluator

INITIAL_PRICE_JITTER = 0.02
HIGH_EXPOSURE = 80

BOOT_MESSAGES = (
    ('Initializing ONE Trading Engine v3.2.1...', 0),
    ('Loading market data feeds...', 500),
    ('Connecting to exchange WebSocket streams...', 1200),
    ('Calibrating indicator engines (RSI, MACD, EMA, Bollinger)...', 2000),
    ('Loading strategy personalities: balanced-01, conservative-01, aggressive-01', 2800),
    ('Risk management module initialized (max drawdown: 15%)', 3600),
    ('Portfolio allocation engine ready', 4200),
    ('=== All systems online. Starting trading cycles ===', 5000),
)


@dataclass
class BotState:
    """Mutable per-strategy state; touched only inside that strategy's cycle."""
    entity_id: str
    name: str
    current_pair: str
    current_price: float
    indicators: IndicatorSnapshot
    book: PositionBook = field(default_factory=PositionBook)
    is_running: bool = True
    total_pnl: float = 0.0
    total_trades: int = 0
    last_signal: str = HOLD
    last_signal_confidence: float = 0.0

    @property
    def open_positions(self) -> List[OpenPosition]:
        return self.book.positions

    @property
    def win_rate(self) -> float:
        return self.book.win_rate


class BotSimulationEngine(SimulationEngine):
    """Runs the strategy personalities on a shared virtual clock."""

    name = 'bots'
    log_id_prefix = 'log'
    system_category = BotLogCategory.SYSTEM
    boot_messages = BOOT_MESSAGES

    def __init__(
        self,
        profiles: Optional[Sequence[StrategyProfile]] = None,
        settings: Optional[EngineSettings] = None,
        scheduler: Optional[VirtualScheduler] = None,
        rng: Optional[RandomSource] = None,
    ):
        super().__init__(profiles or STRATEGY_PROFILES, settings, scheduler, rng)
        self.prices = PriceTable(
            PAIR_PRICES, pair_volatility, self.rng,
            jitter=INITIAL_PRICE_JITTER, fallback_price=FALLBACK_PRICE,
        )
        self.synthesizer = IndicatorSynthesizer(self.rng)
        self.evaluator = SignalEvaluator(self.rng)
        self.decision_maker = DecisionMaker(self.rng)

        self._user_pairs: List[str] = []
        self._user_chains: List[str] = []
        self._order_counter = 0

    def get_entity_state(self, entity_id: str) -> Optional[BotState]:
        return self._states.get(entity_id)

    def destroy(self) -> None:
        super().destroy()
        self.prices.clear()
        self._user_pairs = []
        self._user_chains = []

    # ── Hooks ───────────────────────────────────────────────────────────────

    def _apply_filters(self, instruments: Optional[Iterable[str]], venues: Optional[Iterable[str]]) -> None:
        # Every start() replaces both filters; omitted ones fall back to defaults
        self._user_pairs = normalize_pairs(list(instruments or []))
        self._user_chains = normalize_chains(list(venues or []))

    def _init_entity_state(self, entity_id: str) -> None:
        state = self._states.get(entity_id)
        if state is not None and state.is_running:
            return
        profile = self._profiles[entity_id]
        pair = self.rng.choice(self._active_pairs(profile))
        price = self.prices.get(pair)
        self._states[entity_id] = BotState(
            entity_id=entity_id,
            name=profile.name,
            current_pair=pair,
            current_price=price,
            indicators=self.synthesizer.synthesize(profile, price),
            total_pnl=self.rng.uniform(-50, 200),
            total_trades=self.rng.integer(5, 25),
            book=PositionBook(win_rate=self.rng.uniform(0.48, 0.68)),
        )

    def _compose(self, entity_id: str) -> List[ScheduledEntry]:
        profile: StrategyProfile = self._profiles[entity_id]
        state: BotState = self._states[entity_id]
        rng = self.rng

        pair = rng.choice(self._active_pairs(profile))
        price = self.prices.advance(pair)
        indicators = self.synthesizer.synthesize(profile, price, state.indicators)
        state.current_pair = pair
        state.current_price = price
        state.indicators = indicators

        timeline = CycleTimeline(rng, self.settings.speed)
        chain = rng.choice(self._user_chains or DEFAULT_CHAINS)
        label = chain_label(chain)

        timeline.push(
            BotLogCategory.SCAN,
            f'Scanning {pair} on {label} | Price: ${format_price(price)}',
            data={'pair': pair, 'chain': chain, 'chainLabel': label},
        )
        timeline.pause(800, 1500)

        for thought in narration.thinking_lines(rng, profile, pair, price):
            timeline.push(BotLogCategory.THINKING, thought)
            timeline.pause(600, 1200)

        timeline.push(
            BotLogCategory.INDICATOR,
            narration.indicator_summary(profile, indicators),
            data={'indicators': indicators.to_dict()},
        )
        timeline.pause(800, 1500)

        if rng.chance(0.12):
            sentiment = 'Bullish' if rng.random() > 0.4 else 'Bearish'
            timeline.push(BotLogCategory.NEWS, f'[{sentiment}] {rng.choice(NEWS_HEADLINES)}', Importance.MEDIUM)
            timeline.pause(1000, 1800)

        if rng.chance(0.4):
            timeline.push(BotLogCategory.ANALYSIS, narration.market_analysis(indicators, pair), Importance.MEDIUM)
            timeline.pause(1000, 2000)

        signal = self.evaluator.evaluate(profile, indicators)
        state.last_signal = signal.direction
        state.last_signal_confidence = signal.confidence

        if signal.direction != HOLD:
            self._compose_trade(timeline, profile, state, signal, pair, price, chain, label)

        if state.open_positions and rng.chance(0.5):
            timeline.pause(1500, 2500)
            self._compose_pnl(timeline, state)

        if rng.chance(0.2):
            timeline.pause(1000, 2000)
            exposure = state.book.exposure()
            drawdown = rng.uniform(2, 12)
            timeline.push(
                BotLogCategory.RISK,
                f'Portfolio exposure: {exposure:.1f}% | Max drawdown: {drawdown:.1f}% | '
                f'Open positions: {len(state.open_positions)} | Win rate: {state.win_rate * 100:.1f}%',
                Importance.HIGH if exposure > HIGH_EXPOSURE else Importance.LOW,
            )

        return timeline.entries

    # ── Cycle sections ──────────────────────────────────────────────────────

    def _compose_trade(self, timeline, profile, state, signal, pair, price, chain, label) -> None:
        rng = self.rng
        context = narration.strategy_context(profile, signal, state.indicators)
        timeline.push(
            BotLogCategory.STRATEGY, context, Importance.HIGH,
            data={
                'strategy': profile.name,
                'riskTolerance': profile.risk_tolerance,
                'primaryIndicators': list(profile.primary_indicators),
                'signal': signal.direction,
                'confidence': signal.confidence,
            },
        )
        timeline.pause(1500, 2500)

        timeline.push(
            BotLogCategory.SIGNAL,
            f'{signal.direction} signal detected | Confidence: {signal.confidence * 100:.1f}% | {signal.reason}',
            Importance.HIGH,
            data={'signal': signal.to_dict()},
        )
        timeline.pause(1200, 2000)

        decision = self.decision_maker.decide(profile, signal, state)
        if not decision.execute:
            timeline.push(BotLogCategory.DECISION, f'SKIP - {decision.reason}', Importance.MEDIUM)
            return

        timeline.push(
            BotLogCategory.DECISION,
            f'Execute {signal.direction} | Size: {decision.position_size:.1f}% | '
            f'Leverage: {decision.leverage}x | Risk/Reward: 1:{decision.risk_reward:.1f}',
            Importance.HIGH,
            data={
                'strategyName': profile.name,
                'strategyId': profile.id,
                'riskTolerance': profile.risk_tolerance,
                'signalReason': signal.reason,
                'confidence': signal.confidence,
            },
        )
        timeline.pause(1000, 1800)

        order_id = self._next_order_id()
        offset = rng.uniform(0.0001, 0.0005)
        order_price = price * (1 - offset) if signal.direction == LONG else price * (1 + offset)
        timeline.push(
            BotLogCategory.ORDER,
            f'Submitting {signal.direction} order | {pair} @ ${format_price(order_price)} on {label} | ID: {order_id}',
            Importance.HIGH,
            data={
                'orderId': order_id,
                'pair': pair,
                'side': signal.direction,
                'price': order_price,
                'leverage': decision.leverage,
                'chain': chain,
                'chainLabel': label,
                'strategyName': profile.name,
                'strategyContext': context,
                'signalReason': signal.reason,
            },
        )
        timeline.pause(2000, 4000)

        fill_price = order_price * (1 + rng.uniform(-0.0003, 0.0003))
        slippage = abs(fill_price - order_price) / order_price * 100
        timeline.push(
            BotLogCategory.FILLED,
            f'Order FILLED | {pair} {signal.direction} @ ${format_price(fill_price)} on {label} | '
            f'Slippage: {slippage:.4f}% | ID: {order_id}',
            Importance.HIGH,
            data={
                'orderId': order_id,
                'fillPrice': fill_price,
                'slippage': slippage,
                'chain': chain,
                'chainLabel': label,
                'strategyName': profile.name,
                'executedBy': profile.id,
            },
        )

        evicted = state.book.open(OpenPosition(
            id=order_id,
            pair=pair,
            side=signal.direction,
            entry_price=fill_price,
            current_price=price,
            size=decision.position_size,
            leverage=decision.leverage,
        ))
        if evicted is not None:
            logger.debug(f"{state.entity_id}: evicted {evicted.id} at the position cap")
        state.total_trades += 1

    def _compose_pnl(self, timeline: CycleTimeline, state: BotState) -> None:
        positions_pnl = state.book.mark_to_market(self.prices)
        parts = [
            f"{p.pair} {p.side}: {'+' if p.pnl_percent >= 0 else ''}{p.pnl_percent:.2f}%"
            for p in state.open_positions
        ]
        state.total_pnl += positions_pnl * self.rng.uniform(0.01, 0.05)

        closed = state.book.maybe_close(self.rng)
        if closed is not None:
            parts.append(f"CLOSED {closed.pair}: {'+' if closed.pnl_percent >= 0 else ''}{closed.pnl_percent:.2f}%")

        timeline.push(
            BotLogCategory.PNL,
            ' | '.join(parts),
            Importance.MEDIUM,
            data={'totalPnl': state.total_pnl, 'positions': len(state.open_positions)},
        )

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _active_pairs(self, profile: StrategyProfile) -> Sequence[str]:
        return self._user_pairs or profile.preferred_pairs

    def _next_order_id(self) -> str:
        self._order_counter += 1
        return f'ORD_{to_base36(self.scheduler.wall_time_ms())}_{self._order_counter}'
