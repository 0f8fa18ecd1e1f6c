#!/usr/bin/env python3
"""Entry point for the trading console simulation.

Usage:
    # Five virtual minutes of the bot feed, as fast as possible
    python scripts/run_console.py

    # Both engines, reproducible, with the boot sequence
    python scripts/run_console.py --engine both --seed 42 --boot

    # Watch the FX feed in real time for two minutes
    python scripts/run_console.py --engine fx --minutes 2 --realtime

    # Restrict the bots to a few pairs and chains
    python scripts/run_console.py --pairs BTC ETH --venues arbitrum base

    # List strategy personalities and FX agents
    python scripts/run_console.py --list-profiles
"""
import sys
import argparse
from pathlib import Path

# Setup paths
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from tradesim.analytics import summarize_feed, summarize_pool_flows
from tradesim.bots import BotSimulationEngine, load_strategy_profiles
from tradesim.core import EngineSettings, LogEntry, RandomSource, VirtualScheduler
from tradesim.forex import ForexSimulationEngine, load_agent_profiles
from tradesim.pools import PoolLedger
from tradesim.utils.config import get_config
from tradesim.utils.helpers import format_clock
from tradesim.utils.logger import setup_logger


def list_profiles(config):
    print("\nStrategy personalities:")
    print(f"{'Id':<17} {'Label':<6} {'Risk':<8} {'Scan (s)':<10} {'Leverage':<10} {'Indicators'}")
    print("-" * 80)
    for p in load_strategy_profiles(config):
        scan = f"{p.scan_interval_min / 1000:.0f}-{p.scan_interval_max / 1000:.0f}"
        lev = f"{p.leverage_min}-{p.leverage_max}x"
        print(f"{p.id:<17} {p.short_name:<6} {p.risk_tolerance:<8} {scan:<10} {lev:<10} {', '.join(p.primary_indicators)}")

    print("\nFX agents:")
    for a in load_agent_profiles(config):
        print(f"{a.id:<17} {a.short_name:<6} pairs: {', '.join(a.supported_pairs)}")


def print_entry(entry: LogEntry):
    print(f"{format_clock(entry.timestamp)} [{entry.entity_label:<6}] {entry.category.value:<9} {entry.message}")


def print_pool_tx(tx):
    print(f"{format_clock(tx.timestamp)} [POOL  ] {tx.type:<9} {tx.description} | block {tx.block_number}")


def main():
    parser = argparse.ArgumentParser(description='Trading Console Simulation')
    parser.add_argument('--engine', type=str, default='bot',
                       choices=['bot', 'fx', 'both'],
                       help='Which engine to run (default: bot)')
    parser.add_argument('--seed', type=int, default=None,
                       help='Random seed (default: engine.seed / SIM_SEED)')
    parser.add_argument('--speed', type=float, default=None,
                       help='Time compression (default: engine.speed / SIM_SPEED)')
    parser.add_argument('--minutes', type=float, default=5.0,
                       help='Minutes of simulated time to run (default: 5)')
    parser.add_argument('--realtime', action='store_true',
                       help='Pace the feed against the wall clock')
    parser.add_argument('--boot', action='store_true',
                       help='Emit the boot sequence before the first cycle')
    parser.add_argument('--pairs', nargs='*', default=None,
                       help='Instrument filter (default: from config)')
    parser.add_argument('--venues', nargs='*', default=None,
                       help='Chain / settlement network filter (default: from config)')
    parser.add_argument('--list-profiles', action='store_true',
                       help='List strategy personalities and FX agents')
    parser.add_argument('--no-summary', action='store_true',
                       help='Skip the end-of-run summary tables')

    args = parser.parse_args()

    config = get_config()

    if args.list_profiles:
        list_profiles(config)
        return

    setup_logger(config)

    base = EngineSettings.from_config(config)
    settings = EngineSettings(
        seed=args.seed if args.seed is not None else base.seed,
        speed=args.speed if args.speed is not None else base.speed,
    )
    seed = settings.seed

    logger.info("=" * 60)
    logger.info("TRADING CONSOLE SIMULATION")
    logger.info("=" * 60)
    logger.info(f"Engine: {args.engine}")
    logger.info(f"Seed: {seed}")
    logger.info(f"Speed: {settings.speed}x")
    logger.info(f"Duration: {args.minutes} min ({'realtime' if args.realtime else 'virtual'})")

    scheduler = VirtualScheduler()
    entries = []
    transactions = []
    engines = []

    def capture(entry: LogEntry):
        entries.append(entry)
        print_entry(entry)

    def capture_tx(tx):
        transactions.append(tx)
        print_pool_tx(tx)

    if args.engine in ('bot', 'both'):
        bots = BotSimulationEngine(
            profiles=load_strategy_profiles(config),
            settings=settings,
            scheduler=scheduler,
            rng=RandomSource(seed),
        )
        bots.on_log(capture)
        engines.append((bots, config.instruments, config.venues))

    if args.engine in ('fx', 'both'):
        ledger = PoolLedger(
            RandomSource(None if seed is None else seed + 2),
            scheduler.wall_time_ms,
        )
        fx = ForexSimulationEngine(
            profiles=load_agent_profiles(config),
            settings=settings,
            scheduler=scheduler,
            rng=RandomSource(None if seed is None else seed + 1),
            ledger_factory=ledger,
        )
        fx.on_log(capture)
        fx.on_pool_transaction(capture_tx)
        engines.append((fx, config.forex_pairs, config.forex_venues))

    for engine, pairs, venues in engines:
        if args.boot or config.boot_sequence:
            engine.emit_boot_sequence()
        engine.start(
            instruments=args.pairs if args.pairs is not None else pairs,
            venues=args.venues if args.venues is not None else venues,
        )

    duration_ms = args.minutes * 60 * 1000
    if args.realtime:
        print("Press Ctrl+C to stop\n")
        scheduler.run_realtime(duration_ms / 1000)
    else:
        scheduler.run_until(duration_ms)

    for engine, _, _ in engines:
        engine.stop()

    logger.info(f"Run complete: {len(entries)} entries, {len(transactions)} pool transactions")

    if args.no_summary:
        return

    print("\nEntries per entity:")
    print(summarize_feed(entries).to_string())

    for engine, _, _ in engines:
        if isinstance(engine, ForexSimulationEngine):
            print("\nFX session:")
            for k, v in engine.get_stats().items():
                print(f"  {k}: {v:,.2f}")
            if transactions:
                print("\nPool flows:")
                print(summarize_pool_flows(transactions).to_string())
        else:
            print("\nBot states:")
            for entity_id, state in engine.get_all_entity_states().items():
                print(f"  {entity_id:<17} pnl: {state.total_pnl:>9.2f}  trades: {state.total_trades:<4} "
                      f"win rate: {state.win_rate * 100:.1f}%  open: {len(state.open_positions)}")


if __name__ == '__main__':
    main()
