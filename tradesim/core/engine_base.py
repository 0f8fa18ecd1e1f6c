"""Shared engine shell: lifecycle, per-entity cycle timers, emission.

The bot and FX engines expose the same public shape. This base class owns
the parts that are identical: the running flag, the per-entity cycle timer
loop on the VirtualScheduler, the log bus, and stamping composed drafts
into LogEntry objects when their timers fire.

Per-entity state machine:

    idle --start()--> scheduled --timer--> firing --compose+dispatch--> scheduled
      any --stop(id)--> stopped

Cancellation is exact. stop() cancels the entity's cycle timer and every
entry timer still pending for it. The global running flag is checked again
at emission time as a second guard.

Ordering: entries of one firing are composed at non-decreasing offsets and
fire in that order. Across entities only each entity's own order holds;
there is no global real-time ordering between timelines.
"""
from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .event_bus import EventBus
from .log_entry import (
    Category,
    EntryDraft,
    Importance,
    LogEntry,
    ScheduledEntry,
    SYSTEM_ENTITY_ID,
    SYSTEM_ENTITY_LABEL,
)
from .random_source import RandomSource
from .scheduler import TimerHandle, VirtualScheduler
from .settings import EngineSettings


class SimulationEngine(ABC):
    """Base class for the per-entity simulation engines."""

    name = "engine"
    log_id_prefix = "log"
    system_category: Category = None
    boot_messages: Sequence[Tuple[str, int]] = ()

    def __init__(
        self,
        profiles: Sequence,
        settings: Optional[EngineSettings] = None,
        scheduler: Optional[VirtualScheduler] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.settings = settings if settings is not None else EngineSettings()
        self.scheduler = scheduler if scheduler is not None else VirtualScheduler()
        self.rng = rng if rng is not None else RandomSource(self.settings.seed)

        self._profiles = {p.id: p for p in profiles}
        self._states: Dict[str, object] = {}
        self._cycle_timers: Dict[str, TimerHandle] = {}
        self._log_bus: EventBus[LogEntry] = EventBus(f"{self.name}.log")
        self._running = False
        self._id_counter = 0

    # ── Public API ──────────────────────────────────────────────────────────

    def get_profiles(self) -> List:
        return list(self._profiles.values())

    def start(
        self,
        entity_ids: Optional[Iterable[str]] = None,
        instruments: Optional[Iterable[str]] = None,
        venues: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """Start cycles for the selected entities (all by default).

        Entities that already have a cycle armed are left untouched.
        Returns the ids that were actually started.
        """
        self._running = True
        self._apply_filters(instruments, venues)

        started = []
        for entity_id in self._select(entity_ids):
            if entity_id in self._cycle_timers:
                logger.debug(f"{self.name}: {entity_id} already running, start ignored")
                continue
            self._init_entity_state(entity_id)
            self._schedule_cycle(entity_id)
            started.append(entity_id)

        if started:
            logger.info(f"{self.name} started: {started}")
        return started

    def stop(self, entity_ids: Optional[Iterable[str]] = None) -> None:
        """Stop the given entities, or halt the whole engine when no ids are given."""
        if entity_ids is None:
            ids = list(dict.fromkeys(list(self._cycle_timers) + list(self._states)))
        else:
            ids = list(entity_ids)

        for entity_id in ids:
            self.scheduler.cancel(self._cycle_timers.pop(entity_id, None))
            cancelled = self.scheduler.cancel_owner(self._owner(entity_id))
            state = self._states.get(entity_id)
            if state is not None:
                state.is_running = False
            logger.debug(f"{self.name}: stopped {entity_id} ({cancelled} timers cancelled)")

        if entity_ids is None:
            self._running = False
            self.scheduler.cancel_owner(self._owner(SYSTEM_ENTITY_ID))
            logger.info(f"{self.name} stopped")

    def on_log(self, callback: Callable[[LogEntry], None]) -> Callable[[], None]:
        return self._log_bus.subscribe(callback)

    def get_entity_state(self, entity_id: str):
        return self._states.get(entity_id)

    def get_all_entity_states(self) -> Dict[str, object]:
        return dict(self._states)

    def is_running(self) -> bool:
        return self._running

    def is_entity_running(self, entity_id: str) -> bool:
        return entity_id in self._cycle_timers

    def emit_boot_sequence(self) -> None:
        """Fire the fixed SYSTEM boot lines at their fixed offsets."""
        for message, delay in self.boot_messages:
            self.scheduler.call_later(
                delay / self.settings.speed,
                partial(self._emit_system, message),
                owner=self._owner(SYSTEM_ENTITY_ID),
            )

    def destroy(self) -> None:
        self.stop()
        self._log_bus.clear()
        self._states.clear()

    def compose_cycle(self, entity_id: str) -> List[ScheduledEntry]:
        """Run one cycle body for `entity_id` and return its composed entries.

        Mutates the entity's state. Does not schedule anything.
        """
        if entity_id not in self._states:
            raise KeyError(f"Entity {entity_id} has no state; start it first")
        return self._compose(entity_id)

    # ── Subclass hooks ──────────────────────────────────────────────────────

    @abstractmethod
    def _apply_filters(self, instruments: Optional[Iterable[str]], venues: Optional[Iterable[str]]) -> None:
        """Replace the instrument and venue filters."""

    @abstractmethod
    def _init_entity_state(self, entity_id: str) -> None:
        """Seed fresh state for an entity about to start."""

    @abstractmethod
    def _compose(self, entity_id: str) -> List[ScheduledEntry]:
        """Cycle body: advance state and compose the ordered entries."""

    def _publish(self, entry: LogEntry) -> None:
        self._log_bus.publish(entry)

    # ── Scheduling ──────────────────────────────────────────────────────────

    def _select(self, entity_ids: Optional[Iterable[str]]) -> List[str]:
        if entity_ids is None:
            return list(self._profiles)
        selected = []
        for entity_id in entity_ids:
            if entity_id in self._profiles:
                selected.append(entity_id)
            else:
                logger.warning(f"{self.name}: unknown entity {entity_id}, skipped")
        return selected

    def _owner(self, entity_id: str) -> str:
        return f"{self.name}/{entity_id}"

    def _schedule_cycle(self, entity_id: str) -> None:
        if not self._running:
            return
        profile = self._profiles[entity_id]
        interval = self.rng.uniform(profile.scan_interval_min, profile.scan_interval_max)
        self._cycle_timers[entity_id] = self.scheduler.call_later(
            interval / self.settings.speed,
            partial(self._fire_cycle, entity_id),
            owner=self._owner(entity_id),
        )

    def _fire_cycle(self, entity_id: str) -> None:
        self._cycle_timers.pop(entity_id, None)
        if not self._running:
            return
        entries = self._compose(entity_id)
        logger.debug(f"{self.name}: {entity_id} fired, {len(entries)} entries composed")
        self._dispatch(entity_id, entries)
        self._schedule_cycle(entity_id)

    def _dispatch(self, entity_id: str, entries: Sequence[ScheduledEntry]) -> None:
        for scheduled in entries:
            self.scheduler.call_later(
                scheduled.delay,
                partial(self._emit_draft, entity_id, scheduled.draft),
                owner=self._owner(entity_id),
            )

    # ── Emission ────────────────────────────────────────────────────────────

    def _next_log_id(self) -> str:
        self._id_counter += 1
        return f"{self.log_id_prefix}_{self.scheduler.wall_time_ms()}_{self._id_counter}"

    def _emit_draft(self, entity_id: str, draft: EntryDraft) -> None:
        if not self._running:
            return
        self._publish(LogEntry(
            id=self._next_log_id(),
            timestamp=self.scheduler.wall_time_ms(),
            entity_id=entity_id,
            entity_label=self._profiles[entity_id].short_name,
            category=draft.category,
            message=draft.message,
            importance=draft.importance,
            data=draft.data,
        ))

    def _emit_system(self, message: str) -> None:
        self._publish(LogEntry(
            id=self._next_log_id(),
            timestamp=self.scheduler.wall_time_ms(),
            entity_id=SYSTEM_ENTITY_ID,
            entity_label=SYSTEM_ENTITY_LABEL,
            category=self.system_category,
            message=message,
            importance=Importance.MEDIUM,
        ))
