"""Engine-independent building blocks.

Modules:
- scheduler: virtual-clock timer queue (the deferred-callback primitive)
- event_bus: listener registration and notification
- log_entry: log entry types, categories and the cycle timeline
- random_source: seeded, injectable randomness
- price_model: shared last-price table with bounded random walk
- settings: constructor-injected engine settings
- engine_base: lifecycle and per-entity cycle loop shared by both engines
"""
from .scheduler import VirtualScheduler, TimerHandle
from .event_bus import EventBus
from .log_entry import (
    LogEntry, EntryDraft, ScheduledEntry, CycleTimeline,
    Importance, BotLogCategory, ForexLogCategory,
    SYSTEM_ENTITY_ID, SYSTEM_ENTITY_LABEL,
)
from .random_source import RandomSource
from .price_model import PriceTable
from .settings import EngineSettings
from .engine_base import SimulationEngine

__all__ = [
    'VirtualScheduler', 'TimerHandle',
    'EventBus',
    'LogEntry', 'EntryDraft', 'ScheduledEntry', 'CycleTimeline',
    'Importance', 'BotLogCategory', 'ForexLogCategory',
    'SYSTEM_ENTITY_ID', 'SYSTEM_ENTITY_LABEL',
    'RandomSource',
    'PriceTable',
    'EngineSettings',
    'SimulationEngine',
]
