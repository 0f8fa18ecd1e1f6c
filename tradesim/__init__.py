"""Trading console simulation engines.

Packages:
- core: virtual-clock scheduler, event bus, log entries, random source
- bots: strategy-personality bot engine (scan → indicators → signal → trade)
- forex: StableFX RFQ/PvP engine and the pool-ledger bridge
- pools: live pool-ledger transaction factory
- analytics: pandas views over captured feeds
- utils: configuration, logging, formatting helpers
"""

__version__ = "0.1.0"
