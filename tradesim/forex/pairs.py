"""Stablecoin FX pairs, the FX agent profile and settlement networks."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from ..bots.profiles import CHAIN_INFO, apply_overrides


@dataclass(frozen=True)
class CurrencyPair:
    """A USDC-quoted stablecoin pair."""
    id: str
    base: str
    quote: str
    symbol: str
    name: str
    base_price: float
    pip_size: float
    spread_pips: float


FOREX_CURRENCY_PAIRS: List[CurrencyPair] = [
    CurrencyPair('USDC_EURC', 'USDC', 'EURC', 'USDC/EURC', 'Euro', 0.9230, 0.0001, 1.2),
    CurrencyPair('USDC_GBPC', 'USDC', 'GBPC', 'USDC/GBPC', 'British Pound', 0.7890, 0.0001, 1.5),
    CurrencyPair('USDC_JPYC', 'USDC', 'JPYC', 'USDC/JPYC', 'Japanese Yen', 154.50, 0.01, 1.0),
    CurrencyPair('USDC_AUDC', 'USDC', 'AUDC', 'USDC/AUDC', 'Australian Dollar', 1.5380, 0.0001, 1.8),
    CurrencyPair('USDC_CADC', 'USDC', 'CADC', 'USDC/CADC', 'Canadian Dollar', 1.3640, 0.0001, 1.5),
    CurrencyPair('USDC_CHFC', 'USDC', 'CHFC', 'USDC/CHFC', 'Swiss Franc', 0.8750, 0.0001, 1.3),
]

PAIRS_BY_ID: Dict[str, CurrencyPair] = {p.id: p for p in FOREX_CURRENCY_PAIRS}

LOT_UNITS = 100000
DEFAULT_SETTLEMENT_NETWORKS = ('ethereum', 'base', 'arbitrum')

FX_NEWS = [
    'ECB signals potential rate adjustment, EUR pairs volatile',
    'BOJ maintains yield curve control, JPY weakens further',
    'Fed minutes reveal hawkish sentiment, USD strengthens',
    'UK CPI data beats expectations, GBP rallies',
    'RBA holds rates steady, AUD consolidates',
    'SNB intervenes in currency markets, CHF stabilizes',
    'Bank of Canada rate decision pending, CAD in focus',
    'Cross-border stablecoin settlement volume hits $2.1B daily',
    'Circle USDC reserves fully backed, attestation report released',
    'DeFi forex protocol TVL reaches new high at $890M',
    'On-chain FX liquidity deepens across major pairs',
    'Institutional adoption of on-chain forex accelerates',
]


@dataclass(frozen=True)
class ForexAgentProfile:
    """An RFQ/PvP trading agent. Intervals are in ms, win_rate is a fraction."""
    id: str = 'stablefx-01'
    name: str = 'StableFX Agent'
    short_name: str = 'SFX'
    color: str = '#0EA5E9'
    scan_interval_min: float = 8000
    scan_interval_max: float = 14000
    supported_pairs: Tuple[str, ...] = tuple(PAIRS_BY_ID)
    win_rate: float = 0.725
    lots_min: float = 0.1
    lots_max: float = 2.5
    match_rate: float = 0.85

    def __post_init__(self):
        if self.scan_interval_min > self.scan_interval_max:
            raise ValueError(f"{self.id}: scan_interval min > max")
        if self.lots_min > self.lots_max:
            raise ValueError(f"{self.id}: lots min > max")
        if not 0 <= self.match_rate <= 1:
            raise ValueError(f"{self.id}: match_rate must be in [0, 1]")
        unknown = [p for p in self.supported_pairs if p not in PAIRS_BY_ID]
        if unknown or not self.supported_pairs:
            raise ValueError(f"{self.id}: unsupported pairs {unknown or 'none given'}")


FOREX_AGENT = ForexAgentProfile()


def pair_volatility(pair_id: str) -> float:
    return 0.0008 if 'JPYC' in pair_id else 0.0004


def normalize_pair_ids(pairs: Optional[List[str]]) -> List[str]:
    """Accept 'USDC_EURC', 'USDC/EURC' or a bare quote like 'EURC'."""
    normalized = []
    for raw in pairs or []:
        key = raw.upper().replace('/', '_')
        if key not in PAIRS_BY_ID:
            key = f"USDC_{key}"
        if key in PAIRS_BY_ID:
            normalized.append(key)
        else:
            logger.warning(f"Unknown FX pair {raw}, ignored")
    return normalized


def normalize_networks(networks: Optional[List[str]]) -> List[str]:
    return [n for n in networks or [] if n in CHAIN_INFO]


def load_agent_profiles(config=None) -> List[ForexAgentProfile]:
    """The built-in agent with overrides from strategies.yaml applied."""
    if config is None:
        return [FOREX_AGENT]
    return [apply_overrides(FOREX_AGENT, config.get_strategy_config(FOREX_AGENT.id))]
