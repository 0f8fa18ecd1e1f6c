"""Log entry types shared by the bot and FX engines.

A LogEntry is the only externally visible artifact of a cycle. Its wire
shape (`to_dict`) is what console consumers read:

    {id, timestamp, entityId, entityLabel, category, message, data?, importance}
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .random_source import RandomSource


class Importance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BotLogCategory(str, Enum):
    SCAN = "SCAN"
    THINKING = "THINKING"
    INDICATOR = "INDICATOR"
    NEWS = "NEWS"
    ANALYSIS = "ANALYSIS"
    STRATEGY = "STRATEGY"
    SIGNAL = "SIGNAL"
    DECISION = "DECISION"
    ORDER = "ORDER"
    FILLED = "FILLED"
    PNL = "PNL"
    RISK = "RISK"
    SYSTEM = "SYSTEM"


class ForexLogCategory(str, Enum):
    RFQ = "RFQ"
    QUOTE = "QUOTE"
    MATCH = "MATCH"
    SETTLE = "SETTLE"
    PVP = "PVP"
    HEDGE = "HEDGE"
    CLEAR = "CLEAR"
    POSITION = "POSITION"
    PNL = "PNL"
    SYSTEM = "SYSTEM"


Category = Union[BotLogCategory, ForexLogCategory]

SYSTEM_ENTITY_ID = "system"
SYSTEM_ENTITY_LABEL = "SYSTEM"


@dataclass(frozen=True)
class LogEntry:
    """An emitted, immutable console line."""
    id: str
    timestamp: int
    entity_id: str
    entity_label: str
    category: Category
    message: str
    importance: Importance = Importance.LOW
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'timestamp': self.timestamp,
            'entityId': self.entity_id,
            'entityLabel': self.entity_label,
            'category': self.category.value,
            'message': self.message,
        }
        if self.data is not None:
            payload['data'] = self.data
        payload['importance'] = self.importance.value
        return payload


@dataclass(frozen=True)
class EntryDraft:
    """A composed entry before it is stamped with id and timestamp."""
    category: Category
    message: str
    importance: Importance = Importance.LOW
    data: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ScheduledEntry:
    """A draft and its offset (ms) from the start of the cycle firing."""
    delay: float
    draft: EntryDraft


class CycleTimeline:
    """Accumulates a cycle's entries at a running, non-decreasing offset.

    `pause(low, high)` moves the offset forward by a uniform draw scaled by
    `1 / speed`; `push` records an entry at the current offset.
    """

    def __init__(self, rng: RandomSource, speed: float = 1.0):
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self._rng = rng
        self._speed = speed
        self.delay = 0.0
        self.entries: List[ScheduledEntry] = []

    def pause(self, low: float, high: float) -> float:
        self.delay += self._rng.uniform(low, high) / self._speed
        return self.delay

    def push(
        self,
        category: Category,
        message: str,
        importance: Importance = Importance.LOW,
        data: Optional[Dict[str, Any]] = None,
    ) -> ScheduledEntry:
        scheduled = ScheduledEntry(
            delay=self.delay,
            draft=EntryDraft(category=category, message=message, importance=importance, data=data),
        )
        self.entries.append(scheduled)
        return scheduled

    def __len__(self) -> int:
        return len(self.entries)
