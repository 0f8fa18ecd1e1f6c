"""Liquidity pool ledger fed by the FX engine."""

from .ledger import POOL_DEFAULTS, PoolLedger, PoolLedgerTransaction

__all__ = ['POOL_DEFAULTS', 'PoolLedger', 'PoolLedgerTransaction']
