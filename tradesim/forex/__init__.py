"""
StableFX simulation: stablecoin FX pairs, RFQ/PvP cycles and the bridge to
the pool ledger.
"""

from .bridge import CrossEngineBridge, LedgerRequest, LedgerTransactionFactory, NullLedgerFactory
from .forex_engine import ForexAgentState, ForexPosition, ForexSimulationEngine
from .pairs import FOREX_AGENT, FOREX_CURRENCY_PAIRS, CurrencyPair, ForexAgentProfile, load_agent_profiles
from .quote_book import ForexQuoteBook, PairState

__all__ = [
    'CrossEngineBridge',
    'LedgerRequest',
    'LedgerTransactionFactory',
    'NullLedgerFactory',
    'ForexAgentState',
    'ForexPosition',
    'ForexSimulationEngine',
    'FOREX_AGENT',
    'FOREX_CURRENCY_PAIRS',
    'CurrencyPair',
    'ForexAgentProfile',
    'load_agent_profiles',
    'ForexQuoteBook',
    'PairState',
]
