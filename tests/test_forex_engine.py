from tradesim.bots import BotSimulationEngine
from tradesim.core import EngineSettings, ForexLogCategory, RandomSource, VirtualScheduler
from tradesim.forex import ForexSimulationEngine, NullLedgerFactory
from tradesim.forex.pairs import FOREX_CURRENCY_PAIRS, normalize_pair_ids
from tradesim.pools import PoolLedger
from tradesim.utils.helpers import format_pips

from conftest import EPOCH_MS

ONE_HOUR = 60 * 60 * 1000


def run_fx(seed, duration_ms=ONE_HOUR, with_ledger=False):
    scheduler = VirtualScheduler(epoch_ms=EPOCH_MS)
    ledger = PoolLedger(RandomSource(seed + 100), scheduler.wall_time_ms) if with_ledger else None
    engine = ForexSimulationEngine(
        settings=EngineSettings(seed=seed), scheduler=scheduler, ledger_factory=ledger,
    )
    entries, txs = [], []
    engine.on_log(entries.append)
    engine.on_pool_transaction(txs.append)
    engine.start()
    scheduler.advance(duration_ms)
    return engine, entries, txs


def test_quote_book_starts_near_base_prices(fx_engine):
    for pair in FOREX_CURRENCY_PAIRS:
        state = fx_engine.get_pair_states()[pair.id]
        assert abs(state.current_price / pair.base_price - 1) <= 0.003
        assert state.bid_price < state.current_price < state.ask_price
        assert state.last_spread == pair.spread_pips


def test_cycle_starts_with_rfq_then_quote(fx_engine):
    fx_engine.start()
    for _ in range(50):
        categories = [e.draft.category for e in fx_engine.compose_cycle("stablefx-01")]
        assert categories[:3] == [ForexLogCategory.RFQ, ForexLogCategory.QUOTE, ForexLogCategory.MATCH]


def test_composed_delays_are_non_decreasing(fx_engine):
    fx_engine.start()
    for _ in range(200):
        delays = [e.delay for e in fx_engine.compose_cycle("stablefx-01")]
        assert delays == sorted(delays)


def test_quote_is_against_the_client(fx_engine):
    fx_engine.start()
    for _ in range(50):
        entries = fx_engine.compose_cycle("stablefx-01")
        rfq, quote = entries[0].draft.data, entries[1].draft.data
        if rfq["side"] == "BUY":
            assert quote["quotePrice"] > rfq["price"]
        else:
            assert quote["quotePrice"] < rfq["price"]
        assert 0.5 - 1e-6 <= quote["spread"] <= 2.0 + 1e-6


def test_settlement_chain_and_stats():
    engine, entries, _ = run_fx(seed=21)
    categories = [e.category for e in entries]
    assert ForexLogCategory.SETTLE in categories
    assert ForexLogCategory.PVP in categories

    settles = [e for e in entries if e.category == ForexLogCategory.SETTLE]
    state = engine.get_entity_state("stablefx-01")
    assert state.total_trades >= len(settles)
    assert engine.get_stats()["totalTrades"] == state.total_trades
    assert len(state.open_positions) <= 3
    assert 0.35 <= state.win_rate <= 0.75

    for e in entries:
        assert e.entity_label == "SFX"
        assert e.id.startswith("fxlog_")


def test_failed_match_is_low_importance(fx_engine):
    fx_engine.start()
    failed = []
    for _ in range(200):
        for e in fx_engine.compose_cycle("stablefx-01"):
            if e.draft.message.startswith("MATCH FAILED"):
                failed.append(e)
    assert failed
    assert all(e.draft.importance.value == "low" for e in failed)


def test_same_seed_same_feed():
    _, first, _ = run_fx(seed=8)
    _, second, _ = run_fx(seed=8)
    assert [e.to_dict() for e in first] == [e.to_dict() for e in second]


def test_default_factory_publishes_nothing():
    engine, entries, txs = run_fx(seed=4)
    assert any(e.category == ForexLogCategory.SETTLE for e in entries)
    assert isinstance(engine.bridge.factory, NullLedgerFactory)
    assert txs == []


def test_ledger_receives_settlement_fees():
    _, entries, txs = run_fx(seed=4, with_ledger=True)
    settles = [e for e in entries if e.category == ForexLogCategory.SETTLE]
    fees = [t for t in txs if t.type == "fee_collection"]

    assert len(fees) == len(settles)
    assert all(t.pool_id == "clearing" and t.amount >= 0 for t in fees)


def test_stop_cancels_pool_transactions():
    scheduler = VirtualScheduler(epoch_ms=EPOCH_MS)
    ledger = PoolLedger(RandomSource(1), scheduler.wall_time_ms)
    engine = ForexSimulationEngine(settings=EngineSettings(seed=1), scheduler=scheduler, ledger_factory=ledger)
    txs = []
    engine.on_pool_transaction(txs.append)
    engine.start()

    # first cycle fires within 14s; stop before any settlement can be emitted
    scheduler.advance(8_000)
    engine.stop()
    scheduler.advance(ONE_HOUR)

    assert txs == []
    assert ledger.transactions == []


def test_pair_filter(fx_engine, capture):
    entries, callback = capture
    fx_engine.on_log(callback)
    fx_engine.start(instruments=["JPYC"], venues=["base"])
    fx_engine.scheduler.advance(ONE_HOUR)

    rfqs = [e for e in entries if e.category == ForexLogCategory.RFQ]
    assert rfqs
    assert all(e.data["pairId"] == "USDC_JPYC" for e in rfqs)
    pvps = [e for e in entries if e.category == ForexLogCategory.PVP]
    assert all(e.data["network"] == "base" for e in pvps)


def test_normalize_pair_ids():
    assert normalize_pair_ids(["USDC/EURC", "gbpc", "USDC_JPYC", "XYZ"]) == [
        "USDC_EURC", "USDC_GBPC", "USDC_JPYC",
    ]


def test_boot_sequence(fx_engine, capture):
    entries, callback = capture
    fx_engine.on_log(callback)
    fx_engine.emit_boot_sequence()
    fx_engine.scheduler.advance(5000)

    assert len(entries) == 9
    assert entries[0].message == "Initializing StableFX Engine v2.1.0..."
    assert all(e.category == ForexLogCategory.SYSTEM for e in entries)


def test_destroy_resets_engine(fx_engine):
    fx_engine.start()
    fx_engine.destroy()

    assert not fx_engine.is_running()
    assert fx_engine.get_stats()["totalTrades"] == 0
    assert len(fx_engine.get_pair_states()) == len(FOREX_CURRENCY_PAIRS)


def test_engines_share_an_injected_clock():
    scheduler = VirtualScheduler(epoch_ms=EPOCH_MS)
    bots = BotSimulationEngine(settings=EngineSettings(seed=3), scheduler=scheduler)
    fx = ForexSimulationEngine(settings=EngineSettings(seed=4), scheduler=scheduler)
    assert bots.scheduler is scheduler
    assert fx.scheduler is scheduler

    entries = []
    bots.on_log(entries.append)
    fx.on_log(entries.append)
    bots.start()
    fx.start()
    scheduler.advance(2 * 60 * 1000)

    assert {e.entity_label for e in entries} >= {"SFX", "AGG"}
    timestamps = [e.timestamp for e in entries]
    assert timestamps == sorted(timestamps)


def test_restart_without_filters_uses_all_pairs(fx_engine, capture):
    entries, callback = capture
    fx_engine.on_log(callback)
    fx_engine.start(instruments=["JPYC"], venues=["base"])
    fx_engine.stop()
    fx_engine.start()
    fx_engine.scheduler.advance(ONE_HOUR)

    rfq_pairs = {e.data["pairId"] for e in entries if e.category == ForexLogCategory.RFQ}
    assert len(rfq_pairs) > 1
    networks = {e.data["network"] for e in entries if e.category == ForexLogCategory.PVP}
    assert networks - {"base"}


def test_settle_message_reports_pips():
    _, entries, _ = run_fx(seed=21)
    settle = next(e for e in entries if e.category == ForexLogCategory.SETTLE)
    assert f"P&L: {format_pips(settle.data['pips'])} ($" in settle.message
