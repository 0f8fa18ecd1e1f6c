from tradesim.bots import narration
from tradesim.bots.indicators import IndicatorSynthesizer
from tradesim.bots.profiles import STRATEGY_PROFILES
from tradesim.bots.signal_evaluator import LONG, Signal
from tradesim.core import RandomSource

BALANCED, CONSERVATIVE, AGGRESSIVE = STRATEGY_PROFILES


def snapshot(profile, seed=1):
    return IndicatorSynthesizer(RandomSource(seed)).synthesize(profile, 100.0)


def test_thinking_lines_are_distinct():
    rng = RandomSource(2)
    for _ in range(100):
        lines = narration.thinking_lines(rng, AGGRESSIVE, "SOL/USDT", 142.5)
        assert 1 <= len(lines) <= 3
        assert len(set(lines)) == len(lines)


def test_indicator_summary_follows_watched_indicators():
    balanced = narration.indicator_summary(BALANCED, snapshot(BALANCED))
    assert balanced.startswith("RSI: ")
    assert "MACD: " in balanced
    assert "BB:" not in balanced

    conservative = narration.indicator_summary(CONSERVATIVE, snapshot(CONSERVATIVE))
    assert conservative.startswith("BB: 50.0%")
    assert "x avg" in conservative
    assert "RSI" not in conservative

    aggressive = narration.indicator_summary(AGGRESSIVE, snapshot(AGGRESSIVE))
    assert "EMA: 100.0/100.0" in aggressive


def test_strategy_context():
    text = narration.strategy_context(AGGRESSIVE, Signal(LONG, 0.8, "x"), snapshot(AGGRESSIVE))
    assert text.startswith("[Aggressive Momentum] | Risk: aggressive")
    assert text.endswith("Confidence: HIGH")


def test_market_analysis_mentions_rsi():
    assert "RSI" in narration.market_analysis(snapshot(BALANCED), "BTC/USDT")
