import pytest

from tradesim.bots import BotSimulationEngine
from tradesim.bots.position_book import MAX_OPEN_POSITIONS
from tradesim.core import BotLogCategory, EngineSettings, Importance, VirtualScheduler

from conftest import EPOCH_MS

TEN_MINUTES = 10 * 60 * 1000


def run_feed(seed, duration_ms=TEN_MINUTES):
    scheduler = VirtualScheduler(epoch_ms=EPOCH_MS)
    engine = BotSimulationEngine(settings=EngineSettings(seed=seed), scheduler=scheduler)
    entries = []
    engine.on_log(entries.append)
    engine.start()
    scheduler.advance(duration_ms)
    return engine, entries


def test_start_initializes_every_profile(bot_engine):
    started = bot_engine.start()

    assert started == ["balanced-01", "conservative-01", "aggressive-01"]
    assert bot_engine.is_running()
    for entity_id in started:
        state = bot_engine.get_entity_state(entity_id)
        assert state.is_running
        assert -50 <= state.total_pnl <= 200
        assert 5 <= state.total_trades <= 25
        assert 0.48 <= state.win_rate <= 0.68
        assert state.last_signal == "HOLD"


def test_nothing_fires_before_first_interval(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start()

    # shortest scan interval is the aggressive bot's 18s
    bot_engine.scheduler.advance(17_999)
    assert entries == []


def test_cycles_produce_scan_first(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start(["aggressive-01"])
    bot_engine.scheduler.advance(30_000)

    assert entries
    assert entries[0].category == BotLogCategory.SCAN
    assert entries[0].entity_id == "aggressive-01"
    assert entries[0].entity_label == "AGG"
    assert entries[0].id.startswith("log_")


def test_composed_delays_are_non_decreasing(bot_engine):
    bot_engine.start()
    for _ in range(200):
        for entity_id in bot_engine.get_all_entity_states():
            delays = [e.delay for e in bot_engine.compose_cycle(entity_id)]
            assert delays[0] == 0
            assert delays == sorted(delays)


def test_composition_order(bot_engine):
    bot_engine.start(["aggressive-01"])
    order = [
        BotLogCategory.SCAN, BotLogCategory.THINKING, BotLogCategory.INDICATOR,
        BotLogCategory.NEWS, BotLogCategory.ANALYSIS, BotLogCategory.STRATEGY,
        BotLogCategory.SIGNAL, BotLogCategory.DECISION, BotLogCategory.ORDER,
        BotLogCategory.FILLED, BotLogCategory.PNL, BotLogCategory.RISK,
    ]
    for _ in range(100):
        categories = [e.draft.category for e in bot_engine.compose_cycle("aggressive-01")]
        ranks = [order.index(c) for c in categories]
        assert ranks == sorted(ranks)
        assert 1 <= categories.count(BotLogCategory.THINKING) <= 3


def test_positions_never_exceed_cap():
    engine, entries = run_feed(seed=3, duration_ms=60 * 60 * 1000)
    for state in engine.get_all_entity_states().values():
        assert len(state.open_positions) <= MAX_OPEN_POSITIONS
        assert 0.35 <= state.win_rate <= 0.75
    filled = [e for e in entries if e.category == BotLogCategory.FILLED]
    assert filled, "an hour of the aggressive bot should fill at least one order"


def test_generated_readings_respect_bounds():
    _, entries = run_feed(seed=5, duration_ms=30 * 60 * 1000)
    for e in entries:
        if e.category == BotLogCategory.INDICATOR:
            assert 8 <= e.data["indicators"]["rsi"] <= 95
        if e.category == BotLogCategory.SIGNAL:
            assert 0 <= e.data["signal"]["confidence"] <= 0.95


def test_same_seed_same_feed():
    _, first = run_feed(seed=42)
    _, second = run_feed(seed=42)

    assert len(first) > 0
    assert [e.to_dict() for e in first] == [e.to_dict() for e in second]


def test_different_seed_different_feed():
    _, first = run_feed(seed=1)
    _, second = run_feed(seed=2)
    assert [e.message for e in first] != [e.message for e in second]


def test_stop_silences_pending_entries(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start()
    bot_engine.scheduler.advance(60_000)

    bot_engine.stop()
    seen = len(entries)
    bot_engine.scheduler.advance(TEN_MINUTES)

    assert len(entries) == seen
    assert not bot_engine.is_running()
    assert bot_engine.scheduler.pending() == 0


def test_stop_one_entity_keeps_others(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start()
    bot_engine.stop(["aggressive-01"])

    bot_engine.scheduler.advance(TEN_MINUTES)

    assert bot_engine.is_running()
    assert not bot_engine.is_entity_running("aggressive-01")
    assert not bot_engine.get_entity_state("aggressive-01").is_running
    assert {e.entity_id for e in entries} == {"balanced-01", "conservative-01"}


def test_double_start_keeps_one_timer_chain(bot_engine):
    assert len(bot_engine.start()) == 3
    assert bot_engine.start() == []

    pending = bot_engine.scheduler.pending("bots/balanced-01")
    assert pending == 1


def test_restart_after_stop(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start(["balanced-01"])
    bot_engine.stop()
    assert bot_engine.start(["balanced-01"]) == ["balanced-01"]

    bot_engine.scheduler.advance(TEN_MINUTES)
    assert entries


def test_unknown_entity_is_skipped(bot_engine):
    assert bot_engine.start(["nope", "balanced-01"]) == ["balanced-01"]


def test_instrument_filter_applies(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start(instruments=["DOGE"], venues=["base"])
    bot_engine.scheduler.advance(TEN_MINUTES)

    scans = [e for e in entries if e.category == BotLogCategory.SCAN]
    assert scans
    assert all(e.data["pair"] == "DOGE/USDT" for e in scans)
    assert all(e.data["chain"] == "base" for e in scans)


def test_restart_without_filters_resets_them(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start(instruments=["DOGE"], venues=["base"])
    bot_engine.stop()
    bot_engine.start()
    bot_engine.scheduler.advance(TEN_MINUTES)

    scans = [e for e in entries if e.category == BotLogCategory.SCAN]
    assert {e.data["pair"] for e in scans} - {"DOGE/USDT"}
    assert all(e.data["chain"] != "base" for e in scans)


def test_injected_empty_scheduler_is_used():
    scheduler = VirtualScheduler(epoch_ms=EPOCH_MS)
    engine = BotSimulationEngine(settings=EngineSettings(seed=1), scheduler=scheduler)
    assert engine.scheduler is scheduler

    engine.start()
    assert scheduler.pending() == 3
    assert scheduler.advance(TEN_MINUTES) > 0


def test_boot_sequence(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.emit_boot_sequence()
    bot_engine.scheduler.advance(5000)

    assert len(entries) == 8
    assert all(e.category == BotLogCategory.SYSTEM for e in entries)
    assert all(e.entity_id == "system" and e.importance == Importance.MEDIUM for e in entries)
    assert entries[-1].message == "=== All systems online. Starting trading cycles ==="
    assert entries[-1].timestamp == EPOCH_MS + 5000


def test_speed_compresses_schedule():
    scheduler = VirtualScheduler(epoch_ms=EPOCH_MS)
    engine = BotSimulationEngine(settings=EngineSettings(seed=1, speed=10.0), scheduler=scheduler)
    entries = []
    engine.on_log(entries.append)
    engine.start(["aggressive-01"])

    # 30s at 10x covers at least one 18-30s interval
    scheduler.advance(3_000)
    assert entries


def test_destroy_drops_listeners_and_state(bot_engine, capture):
    entries, callback = capture
    bot_engine.on_log(callback)
    bot_engine.start()
    bot_engine.destroy()

    assert bot_engine.get_all_entity_states() == {}
    assert not bot_engine.is_running()
    with pytest.raises(KeyError):
        bot_engine.compose_cycle("balanced-01")
