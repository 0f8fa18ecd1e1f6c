"""
Pool Ledger

Live transactions against the three StableFX liquidity pools (clearing,
hedging, insurance). Implements the LedgerTransactionFactory boundary the
FX engine's bridge calls on settlement-class events.

Amount sign follows the transaction type: inflows (deposit,
profit_distribution, fee_collection) are positive, outflows (withdrawal,
loss_absorption) negative. Balances chain per pool, so each transaction's
balance_after is the next one's balance_before.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from loguru import logger

from ..core.random_source import RandomSource
from ..forex.bridge import LedgerTransactionFactory


BASE_BLOCK_NUMBER = 19_500_000
BLOCK_TIME_MS = 12000

POOL_DEFAULTS: Dict[str, Dict] = {
    'clearing': {'allocation': 0.50, 'total_size': 12_500_000, 'color': '#3B82F6'},
    'hedging': {'allocation': 0.30, 'total_size': 7_500_000, 'color': '#F59E0B'},
    'insurance': {'allocation': 0.20, 'total_size': 5_000_000, 'color': '#10B981'},
}

POOL_PARAMS: Dict[str, Dict[str, float]] = {
    'clearing': {'avg_deposit_size': 25000, 'avg_withdrawal_size': 18000},
    'hedging': {'avg_deposit_size': 18000, 'avg_withdrawal_size': 12000},
    'insurance': {'avg_deposit_size': 12000, 'avg_withdrawal_size': 8000},
}

TX_TYPES = (
    'deposit', 'withdrawal', 'profit_distribution', 'loss_absorption',
    'inter_pool_transfer', 'fee_collection', 'reserve_rebalance',
)
OUTFLOW_TYPES = ('withdrawal', 'loss_absorption')


@dataclass(frozen=True)
class PoolLedgerTransaction:
    id: str
    pool_id: str
    type: str
    amount: float
    balance_before: float
    balance_after: float
    tx_hash: str
    block_number: int
    timestamp: int
    description: str

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'poolId': self.pool_id,
            'type': self.type,
            'amount': self.amount,
            'balanceBefore': self.balance_before,
            'balanceAfter': self.balance_after,
            'txHash': self.tx_hash,
            'blockNumber': self.block_number,
            'timestamp': self.timestamp,
            'description': self.description,
        }


def describe_transaction(tx_type: str, pool_id: str, amount: float) -> str:
    fmt = f"${abs(amount):,.0f}"
    descriptions = {
        'deposit': f"Deposit {fmt} to {pool_id} pool",
        'withdrawal': f"Withdrawal {fmt} from {pool_id} pool",
        'profit_distribution': f"Profit distribution {fmt} from {pool_id}",
        'loss_absorption': f"Loss absorbed {fmt} by {pool_id} pool",
        'inter_pool_transfer': f"Inter-pool transfer {fmt}",
        'fee_collection': f"Fee collected {fmt} in {pool_id}",
        'reserve_rebalance': f"Reserve rebalance {fmt} in {pool_id}",
    }
    return descriptions.get(tx_type, f"{tx_type} {fmt}")


class PoolLedger(LedgerTransactionFactory):
    """Running per-pool balances and the transactions that moved them."""

    def __init__(self, rng: RandomSource, clock: Callable[[], int]):
        """
        Args:
            rng: Random source for default amounts and tx hashes
            clock: Returns the current time in epoch ms
                   (usually VirtualScheduler.wall_time_ms)
        """
        self.rng = rng
        self.clock = clock
        self.balances: Dict[str, float] = {
            pool_id: float(pool['total_size']) for pool_id, pool in POOL_DEFAULTS.items()
        }
        self.transactions: List[PoolLedgerTransaction] = []
        self._counter = 0

    def generate_live_transaction(
        self,
        pool_id: str,
        tx_type: str,
        base_amount: Optional[float] = None,
    ) -> PoolLedgerTransaction:
        """
        Record one transaction against `pool_id`.

        Args:
            pool_id: 'clearing', 'hedging' or 'insurance'
            tx_type: One of TX_TYPES
            base_amount: Unsigned amount; drawn from the pool parameters when None

        Returns:
            The recorded PoolLedgerTransaction
        """
        if pool_id not in POOL_DEFAULTS:
            raise ValueError(f"Unknown pool: {pool_id}. Use: {list(POOL_DEFAULTS)}")
        if tx_type not in TX_TYPES:
            raise ValueError(f"Unknown transaction type: {tx_type}. Use: {list(TX_TYPES)}")

        amount = self._signed_amount(pool_id, tx_type, base_amount)
        now_ms = int(self.clock())
        balance_before = self.balances[pool_id]
        balance_after = balance_before + amount
        self.balances[pool_id] = balance_after

        self._counter += 1
        tx = PoolLedgerTransaction(
            id=f"ptx_{now_ms}_{self._counter}",
            pool_id=pool_id,
            type=tx_type,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            tx_hash='0x' + self.rng.hex_string(64),
            block_number=BASE_BLOCK_NUMBER + now_ms // BLOCK_TIME_MS,
            timestamp=now_ms,
            description=describe_transaction(tx_type, pool_id, amount),
        )
        self.transactions.append(tx)
        logger.debug(f"{tx.description} (balance {balance_after:,.2f})")
        return tx

    def _signed_amount(self, pool_id: str, tx_type: str, base_amount: Optional[float]) -> float:
        params = POOL_PARAMS[pool_id]
        if base_amount is None:
            if tx_type == 'deposit':
                size = params['avg_deposit_size']
                base_amount = self.rng.uniform(size * 0.5, size * 1.5)
            elif tx_type == 'withdrawal':
                size = params['avg_withdrawal_size']
                base_amount = self.rng.uniform(size * 0.5, size * 1.5)
            elif tx_type == 'profit_distribution':
                base_amount = self.rng.uniform(500, 5000)
            elif tx_type == 'fee_collection':
                base_amount = self.rng.uniform(100, 2000)
            elif tx_type == 'loss_absorption':
                base_amount = self.rng.uniform(200, 3000)
            else:
                return self.rng.uniform(-5000, 5000)

        if tx_type in OUTFLOW_TYPES:
            return -abs(base_amount)
        if tx_type in ('deposit', 'profit_distribution', 'fee_collection'):
            return abs(base_amount)
        return base_amount

    def balance(self, pool_id: str) -> float:
        return self.balances[pool_id]
