# tests/conftest.py
from __future__ import annotations

import pytest
from loguru import logger

from tradesim.bots import BotSimulationEngine
from tradesim.core import EngineSettings, RandomSource, VirtualScheduler
from tradesim.forex import ForexSimulationEngine

EPOCH_MS = 1_700_000_000_000


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


class FixedRandom(RandomSource):
    """RandomSource whose random() always returns `value`; other draws are seeded."""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler(epoch_ms=EPOCH_MS)


@pytest.fixture
def rng() -> RandomSource:
    return RandomSource(7)


@pytest.fixture
def bot_engine(scheduler) -> BotSimulationEngine:
    return BotSimulationEngine(settings=EngineSettings(seed=11), scheduler=scheduler)


@pytest.fixture
def fx_engine(scheduler) -> ForexSimulationEngine:
    return ForexSimulationEngine(settings=EngineSettings(seed=13), scheduler=scheduler)


@pytest.fixture
def capture():
    """Returns (entries, callback) for subscribing to a log or pool bus."""
    entries = []
    return entries, entries.append


@pytest.fixture
def fixed_random():
    return FixedRandom
