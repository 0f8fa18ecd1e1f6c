"""Strategy personalities and the static market registry for the bot engine."""
from dataclasses import dataclass, fields, replace
from typing import Dict, List, Optional, Tuple

from loguru import logger


RISK_TOLERANCES = ('low', 'medium', 'high')

# Net-score threshold a signal must exceed, and the minimum confidence a
# decision needs, per risk tolerance
SIGNAL_THRESHOLDS = {'low': 2.5, 'medium': 2.0, 'high': 1.5}
MIN_CONFIDENCE = {'low': 0.6, 'medium': 0.45, 'high': 0.3}
RISK_LABELS = {'low': 'conservative', 'medium': 'balanced', 'high': 'aggressive'}


@dataclass(frozen=True)
class StrategyProfile:
    """A bot's fixed behavioural parameters. Intervals are in ms."""
    id: str
    name: str
    short_name: str
    color: str
    scan_interval_min: float
    scan_interval_max: float
    trade_frequency: float
    position_size_min: float
    position_size_max: float
    leverage_min: int
    leverage_max: int
    primary_indicators: Tuple[str, ...]
    risk_tolerance: str
    preferred_pairs: Tuple[str, ...]
    rsi_bias: float

    def __post_init__(self):
        if self.risk_tolerance not in RISK_TOLERANCES:
            raise ValueError(f"Unknown risk tolerance: {self.risk_tolerance}. Use: {list(RISK_TOLERANCES)}")
        if not 0 <= self.trade_frequency <= 1:
            raise ValueError(f"{self.id}: trade_frequency must be in [0, 1]")
        for low, high, label in (
            (self.scan_interval_min, self.scan_interval_max, 'scan_interval'),
            (self.position_size_min, self.position_size_max, 'position_size'),
            (self.leverage_min, self.leverage_max, 'leverage'),
        ):
            if low > high:
                raise ValueError(f"{self.id}: {label} min {low} > max {high}")
        if not self.preferred_pairs:
            raise ValueError(f"{self.id}: preferred_pairs is empty")


STRATEGY_PROFILES: List[StrategyProfile] = [
    StrategyProfile(
        id='balanced-01',
        name='Balanced Alpha',
        short_name='BAL',
        color='#3B82F6',
        scan_interval_min=25000,
        scan_interval_max=40000,
        trade_frequency=0.4,
        position_size_min=15,
        position_size_max=35,
        leverage_min=3,
        leverage_max=10,
        primary_indicators=('RSI', 'MACD'),
        risk_tolerance='medium',
        preferred_pairs=('BTC/USDT', 'ETH/USDT', 'SOL/USDT'),
        rsi_bias=50,
    ),
    StrategyProfile(
        id='conservative-01',
        name='Conservative Shield',
        short_name='CON',
        color='#10B981',
        scan_interval_min=35000,
        scan_interval_max=55000,
        trade_frequency=0.25,
        position_size_min=10,
        position_size_max=20,
        leverage_min=2,
        leverage_max=5,
        primary_indicators=('Bollinger', 'Volume'),
        risk_tolerance='low',
        preferred_pairs=('BTC/USDT', 'ETH/USDT'),
        rsi_bias=45,
    ),
    StrategyProfile(
        id='aggressive-01',
        name='Aggressive Momentum',
        short_name='AGG',
        color='#EF4444',
        scan_interval_min=18000,
        scan_interval_max=30000,
        trade_frequency=0.5,
        position_size_min=25,
        position_size_max=50,
        leverage_min=5,
        leverage_max=20,
        primary_indicators=('RSI', 'MACD', 'EMA', 'Volume'),
        risk_tolerance='high',
        preferred_pairs=('BTC/USDT', 'ETH/USDT', 'SOL/USDT', 'DOGE/USDT', 'AVAX/USDT'),
        rsi_bias=55,
    ),
]

PAIR_PRICES: Dict[str, float] = {
    'BTC/USDT': 67500,
    'ETH/USDT': 3450,
    'BNB/USDT': 605,
    'SOL/USDT': 178,
    'XRP/USDT': 0.62,
    'DOGE/USDT': 0.165,
    'ADA/USDT': 0.45,
    'AVAX/USDT': 38.5,
    'ARB/USDT': 1.18,
    'MATIC/USDT': 0.72,
    'LINK/USDT': 14.5,
    'UNI/USDT': 7.8,
    'AAVE/USDT': 92,
    'OP/USDT': 2.45,
    'APT/USDT': 8.9,
    'INJ/USDT': 24.5,
    'TIA/USDT': 11.2,
    'SUI/USDT': 1.65,
    'DOT/USDT': 7.2,
    'ATOM/USDT': 9.8,
    'FIL/USDT': 5.6,
    'LTC/USDT': 72,
    'NEAR/USDT': 5.1,
    'FTM/USDT': 0.42,
}

FALLBACK_PRICE = 50000.0

CHAIN_INFO: Dict[str, Dict[str, str]] = {
    'ethereum': {'name': 'Ethereum', 'short_name': 'ETH'},
    'arbitrum': {'name': 'Arbitrum', 'short_name': 'ARB'},
    'bsc': {'name': 'BSC', 'short_name': 'BSC'},
    'base': {'name': 'Base', 'short_name': 'BASE'},
    'polygon': {'name': 'Polygon', 'short_name': 'POLY'},
    'optimism': {'name': 'Optimism', 'short_name': 'OP'},
    'avalanche': {'name': 'Avalanche', 'short_name': 'AVAX'},
    'linea': {'name': 'Linea', 'short_name': 'LINEA'},
    'zksync': {'name': 'zkSync', 'short_name': 'ZK'},
    'scroll': {'name': 'Scroll', 'short_name': 'SCRL'},
}

DEFAULT_CHAINS = ('ethereum', 'arbitrum', 'bsc')

NEWS_HEADLINES = [
    'Fed signals potential rate pause, crypto markets react positively',
    'Major institutional investor increases BTC allocation by 15%',
    'On-chain data shows whale accumulation pattern forming',
    'DeFi TVL reaches new monthly high across major protocols',
    'Exchange outflows surge as holders move to cold storage',
    'Options market signals increased volatility expected this week',
    'Mining difficulty adjustment approaching, hash rate stable',
    'Regulatory clarity in EU boosts market sentiment',
    'Stablecoin supply expanding, potential bullish indicator',
    'Social sentiment score shifts to extreme greed zone',
    'Cross-chain bridge volume hits record daily high',
    'Layer 2 adoption metrics show 40% MoM growth',
]


def pair_volatility(pair: str) -> float:
    """Per-cycle drift bound for a crypto pair."""
    if 'DOGE' in pair:
        return 0.005
    if 'BTC' in pair:
        return 0.002
    return 0.003


def normalize_pairs(pairs: Optional[List[str]]) -> List[str]:
    """'BTC' -> 'BTC/USDT'; unknown pairs are dropped."""
    normalized = []
    for pair in pairs or []:
        symbol = pair if '/' in pair else f"{pair}/USDT"
        if symbol in PAIR_PRICES:
            normalized.append(symbol)
        else:
            logger.warning(f"Unknown pair {pair}, ignored")
    return normalized


def normalize_chains(chains: Optional[List[str]]) -> List[str]:
    return [c for c in chains or [] if c in CHAIN_INFO]


def chain_label(chain_id: str) -> str:
    info = CHAIN_INFO.get(chain_id)
    return info['short_name'] if info else chain_id


def apply_overrides(profile, overrides: Dict):
    """Return `profile` with `overrides` applied; unknown keys raise ValueError."""
    if not overrides:
        return profile
    known = {f.name for f in fields(profile)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"{profile.id}: unknown profile fields {sorted(unknown)}")
    values = {
        k: tuple(v) if isinstance(v, list) else v
        for k, v in overrides.items()
    }
    logger.debug(f"Overriding {profile.id}: {values}")
    return replace(profile, **values)


def load_strategy_profiles(config=None) -> List[StrategyProfile]:
    """Built-in personalities with any per-id overrides from strategies.yaml."""
    if config is None:
        return list(STRATEGY_PROFILES)
    return [apply_overrides(p, config.get_strategy_config(p.id)) for p in STRATEGY_PROFILES]
