"""Pandas reports over captured feeds and pool transactions."""

from .feed_summary import (
    entries_to_frame,
    importance_breakdown,
    summarize_feed,
    summarize_pool_flows,
    transactions_to_frame,
)

__all__ = [
    'entries_to_frame',
    'importance_breakdown',
    'summarize_feed',
    'summarize_pool_flows',
    'transactions_to_frame',
]
