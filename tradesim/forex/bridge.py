"""
Cross-engine bridge

Turns settlement-class FX log entries into pool ledger transactions:

    SETTLE (with pnl) -> clearing / fee_collection       |pnl| * U(0.001, 0.003)
    HEDGE             -> hedging / loss_absorption if pnl < 0, else
                         profit_distribution             |lots or 1| * U(50, 200)
    CLEAR             -> clearing / profit_distribution  (volume or 100000) * U(0.0001, 0.0005)

The ledger itself is injected. The default factory produces nothing, so
without a real ledger no pool transaction is ever published.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from ..core.log_entry import ForexLogCategory, LogEntry
from ..core.random_source import RandomSource


class LedgerTransactionFactory(ABC):
    """Boundary to the pool ledger."""

    @abstractmethod
    def generate_live_transaction(self, pool_id: str, tx_type: str, base_amount: Optional[float] = None):
        """Create a ledger transaction, or return None to publish nothing."""


class NullLedgerFactory(LedgerTransactionFactory):
    """Ledger stand-in for runs with no pool ledger attached."""

    def generate_live_transaction(self, pool_id: str, tx_type: str, base_amount: Optional[float] = None):
        return None


@dataclass(frozen=True)
class LedgerRequest:
    pool_id: str
    tx_type: str
    amount: float


class CrossEngineBridge:
    """Maps emitted FX entries onto ledger transactions and publishes them."""

    def __init__(
        self,
        factory: Optional[LedgerTransactionFactory],
        rng: RandomSource,
        publish: Callable[[object], None],
    ):
        self.factory = factory if factory is not None else NullLedgerFactory()
        self.rng = rng
        self.publish = publish

    def ledger_request(self, entry: LogEntry) -> Optional[LedgerRequest]:
        """The ledger call an entry triggers, or None if it triggers none."""
        data = entry.data or {}

        if entry.category == ForexLogCategory.SETTLE and data.get('pnl') is not None:
            return LedgerRequest('clearing', 'fee_collection', abs(data['pnl']) * self.rng.uniform(0.001, 0.003))

        if entry.category == ForexLogCategory.HEDGE:
            pnl = data.get('pnl')
            tx_type = 'loss_absorption' if pnl is not None and pnl < 0 else 'profit_distribution'
            return LedgerRequest('hedging', tx_type, abs(data.get('lots') or 1) * self.rng.uniform(50, 200))

        if entry.category == ForexLogCategory.CLEAR:
            volume = data.get('volume') or 100000
            return LedgerRequest('clearing', 'profit_distribution', volume * self.rng.uniform(0.0001, 0.0005))

        return None

    def handle(self, entry: LogEntry):
        """Run the factory for `entry` and publish whatever it returns."""
        request = self.ledger_request(entry)
        if request is None:
            return None

        tx = self.factory.generate_live_transaction(request.pool_id, request.tx_type, request.amount)
        if tx is None:
            return None

        logger.debug(f"Pool tx {request.tx_type} {request.amount:.2f} on {request.pool_id} from {entry.id}")
        self.publish(tx)
        return tx
