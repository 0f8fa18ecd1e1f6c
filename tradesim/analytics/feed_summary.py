"""
Feed Summary

Tabular views over a captured console feed and the pool ledger, for run
reports and notebooks.
"""

from typing import Dict, Iterable

import pandas as pd
from loguru import logger

from ..core.log_entry import LogEntry

ENTRY_COLUMNS = ['id', 'timestamp', 'entityId', 'entityLabel', 'category', 'message', 'importance']
TRANSACTION_COLUMNS = [
    'id', 'poolId', 'type', 'amount', 'balanceBefore', 'balanceAfter',
    'txHash', 'blockNumber', 'timestamp', 'description',
]


def entries_to_frame(entries: Iterable[LogEntry]) -> pd.DataFrame:
    """
    One row per log entry, indexed by UTC emission time.

    Args:
        entries: Captured LogEntry objects

    Returns:
        DataFrame with the wire-shape columns (data payload dropped)
    """
    rows = [{k: v for k, v in e.to_dict().items() if k != 'data'} for e in entries]
    df = pd.DataFrame(rows, columns=ENTRY_COLUMNS)
    df['time'] = pd.to_datetime(df['timestamp'], unit='ms', utc=True)
    return df.set_index('time')


def transactions_to_frame(transactions: Iterable) -> pd.DataFrame:
    rows = [tx.to_dict() for tx in transactions]
    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    df['time'] = pd.to_datetime(df['timestamp'], unit='ms', utc=True)
    return df.set_index('time')


def summarize_feed(entries: Iterable[LogEntry]) -> pd.DataFrame:
    """
    Entry counts per entity and category.

    Returns:
        entityLabel x category count table with a 'total' column,
        empty if there were no entries
    """
    df = entries_to_frame(entries)
    if df.empty:
        return pd.DataFrame()

    table = df.pivot_table(
        index='entityLabel',
        columns='category',
        values='id',
        aggfunc='count',
        fill_value=0,
    )
    table['total'] = table.sum(axis=1)
    logger.debug(f"Summarized {len(df)} entries over {len(table)} entities")
    return table


def summarize_pool_flows(transactions: Iterable) -> pd.DataFrame:
    """Net flow, transaction count and closing balance per pool."""
    df = transactions_to_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=['net_flow', 'tx_count', 'closing_balance'])

    grouped = df.sort_values('timestamp', kind='stable').groupby('poolId')
    return pd.DataFrame({
        'net_flow': grouped['amount'].sum(),
        'tx_count': grouped['id'].count(),
        'closing_balance': grouped['balanceAfter'].last(),
    })


def importance_breakdown(entries: Iterable[LogEntry]) -> Dict[str, int]:
    df = entries_to_frame(entries)
    return {str(k): int(v) for k, v in df['importance'].value_counts().items()}
