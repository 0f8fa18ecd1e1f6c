import pytest

from tradesim.bots.indicators import (
    GOLDEN,
    NO_CROSS,
    BollingerBand,
    EmaReading,
    IndicatorSnapshot,
    MacdReading,
    VolumeReading,
)
from tradesim.bots.profiles import STRATEGY_PROFILES
from tradesim.bots.signal_evaluator import HOLD, LONG, SHORT, SignalEvaluator, score_snapshot

BALANCED, CONSERVATIVE, AGGRESSIVE = STRATEGY_PROFILES


def make_snapshot(rsi=50.0, histogram=0.0, crossover=NO_CROSS, short=100.0, long=100.0,
                  bb_position=50.0, volume_ratio=1.0):
    return IndicatorSnapshot(
        rsi=rsi,
        macd=MacdReading(value=histogram, signal=0.0, histogram=histogram),
        ema=EmaReading(short=short, long=long, crossover=crossover),
        bollinger=BollingerBand(upper=102, middle=100, lower=98, width=0.02, position=bb_position),
        volume=VolumeReading(current=1e6, average=1e6 / volume_ratio, ratio=volume_ratio),
    )


def test_oversold_golden_cross_goes_long_for_aggressive(fixed_random):
    snapshot = make_snapshot(rsi=20, histogram=0.5, crossover=GOLDEN, short=101, long=100)
    signal = SignalEvaluator(fixed_random(0.01)).evaluate(AGGRESSIVE, snapshot)

    assert signal.direction == LONG
    assert signal.confidence >= 0.7
    assert signal.reason == "RSI oversold, MACD bullish, Golden cross"


def test_trade_frequency_gate_skips_cycle(fixed_random):
    snapshot = make_snapshot(rsi=20, histogram=0.5, crossover=GOLDEN)
    # random() above trade_frequency (0.5) means the bot sits this cycle out
    signal = SignalEvaluator(fixed_random(0.9)).evaluate(AGGRESSIVE, snapshot)

    assert signal.direction == HOLD
    assert signal.confidence == 0
    assert signal.reason == "Cycle skip"


def test_bearish_setup_goes_short(fixed_random):
    snapshot = make_snapshot(rsi=80, histogram=-0.6, short=99, long=100, bb_position=90, volume_ratio=2.0)
    signal = SignalEvaluator(fixed_random(0.0)).evaluate(CONSERVATIVE, snapshot)

    assert signal.direction == SHORT
    # bear = 2 + 1.5 + 0.5 + 1 + 1 = 6 -> capped at 0.95
    assert signal.confidence == pytest.approx(0.95)


def test_weak_evidence_holds(fixed_random):
    snapshot = make_snapshot(rsi=50, histogram=0.1, short=101, long=100)
    signal = SignalEvaluator(fixed_random(0.0)).evaluate(BALANCED, snapshot)

    assert signal.direction == HOLD
    assert signal.reason == "No clear signal"


def test_threshold_depends_on_risk_tolerance(fixed_random):
    # net = 1 (RSI low) + 1.5 (MACD) - 0.5 (EMA below) = 2.0
    snapshot = make_snapshot(rsi=35, histogram=0.4, short=99, long=100)
    assert score_snapshot(snapshot).net == pytest.approx(2.0)

    assert SignalEvaluator(fixed_random(0.0)).evaluate(AGGRESSIVE, snapshot).direction == LONG
    assert SignalEvaluator(fixed_random(0.0)).evaluate(BALANCED, snapshot).direction == HOLD
    assert SignalEvaluator(fixed_random(0.0)).evaluate(CONSERVATIVE, snapshot).direction == HOLD


def test_volume_tie_goes_to_bears():
    snapshot = make_snapshot(rsi=50, short=100, long=100, volume_ratio=2.0)
    score = score_snapshot(snapshot)
    # ordering gives bear +0.5, then volume confirms the leader (bear)
    assert score.bull == 0
    assert score.bear == 1.5
    assert "Volume confirms" in score.reasons


def test_confidence_is_capped():
    snapshot = make_snapshot(rsi=10, histogram=1.5, crossover=GOLDEN, short=101, bb_position=5, volume_ratio=2.0)
    assert score_snapshot(snapshot).confidence == 0.95


def test_reason_keeps_first_three_tags(fixed_random):
    snapshot = make_snapshot(rsi=10, histogram=1.5, crossover=GOLDEN, short=101, bb_position=5, volume_ratio=2.0)
    signal = SignalEvaluator(fixed_random(0.0)).evaluate(AGGRESSIVE, snapshot)
    assert signal.reason.count(",") == 2
