"""Console narration: the human-readable lines a bot cycle prints."""
from typing import List

from ..core.random_source import RandomSource
from ..utils.helpers import format_price
from .indicators import GOLDEN, DEATH, NO_CROSS, IndicatorSnapshot
from .profiles import RISK_LABELS, StrategyProfile
from .signal_evaluator import Signal


def thinking_lines(rng: RandomSource, profile: StrategyProfile, pair: str, price: float) -> List[str]:
    """1-3 distinct 'reasoning' lines shown before the indicator summary."""
    base = pair.split('/')[0]
    templates = [
        f'Analyzing {base} market structure...',
        f"Checking {', '.join(profile.primary_indicators)} confluence...",
        f'Evaluating risk parameters for {profile.risk_tolerance} tolerance...',
        f'Scanning order book depth at ${format_price(price)}...',
        'Cross-referencing with historical patterns...',
        'Calculating optimal entry zone...',
        'Assessing market sentiment indicators...',
        f'Monitoring whale activity on {base}...',
        'Comparing momentum across timeframes...',
        'Validating support/resistance levels...',
    ]
    return rng.sample(templates, rng.integer(1, 3))


def indicator_summary(profile: StrategyProfile, snapshot: IndicatorSnapshot) -> str:
    """One line with the readings this personality watches."""
    watched = set(profile.primary_indicators)
    parts = []
    if watched & {'RSI', 'MACD'}:
        parts.append(f'RSI: {snapshot.rsi:.1f}')
        hist = snapshot.macd.histogram
        parts.append(f"MACD: {'+' if hist > 0 else ''}{hist:.3f}")
    if 'EMA' in watched:
        parts.append(f'EMA: {snapshot.ema.short:.1f}/{snapshot.ema.long:.1f}')
        if snapshot.ema.crossover != NO_CROSS:
            parts.append(f'[{snapshot.ema.crossover.upper()} CROSS]')
    if 'Bollinger' in watched:
        parts.append(f'BB: {snapshot.bollinger.position:.1f}% width={snapshot.bollinger.width:.2f}')
    if 'Volume' in watched:
        parts.append(f'Vol: {snapshot.volume.ratio:.2f}x avg')
    return ' | '.join(parts)


def market_analysis(snapshot: IndicatorSnapshot, pair: str) -> str:
    analyses = []

    rsi = snapshot.rsi
    if rsi > 70:
        analyses.append(f'RSI at {rsi:.1f} - overbought territory, watching for reversal')
    elif rsi < 30:
        analyses.append(f'RSI at {rsi:.1f} - oversold, potential bounce setup')
    elif rsi > 55:
        analyses.append(f'RSI trending bullish at {rsi:.1f}')
    else:
        analyses.append(f'RSI neutral at {rsi:.1f}, no clear direction')

    if snapshot.macd.histogram > 0.5:
        analyses.append('MACD histogram expanding positive - momentum building')
    elif snapshot.macd.histogram < -0.5:
        analyses.append('MACD histogram expanding negative - bearish pressure')

    if snapshot.ema.crossover == GOLDEN:
        analyses.append('EMA golden cross detected - strong bullish signal')
    elif snapshot.ema.crossover == DEATH:
        analyses.append('EMA death cross detected - bearish warning')

    position = snapshot.bollinger.position
    if position > 90:
        analyses.append(f'Price near upper Bollinger band ({position:.0f}%) - potential resistance')
    elif position < 10:
        analyses.append(f'Price near lower Bollinger band ({position:.0f}%) - potential support')

    if snapshot.volume.ratio > 1.8:
        analyses.append(f'Volume spike {snapshot.volume.ratio:.1f}x average - high activity')

    return ' | '.join(analyses) if analyses else f'{pair} consolidating - waiting for clearer setup'


def strategy_context(profile: StrategyProfile, signal: Signal, snapshot: IndicatorSnapshot) -> str:
    contexts = [f'[{profile.name}]', f'Risk: {RISK_LABELS[profile.risk_tolerance]}']

    if snapshot.rsi < 35 or snapshot.rsi > 65:
        zone = 'oversold' if snapshot.rsi < 35 else 'overbought'
        contexts.append(f'RSI {zone} ({snapshot.rsi:.1f})')
    if snapshot.ema.crossover != NO_CROSS:
        contexts.append(f'EMA {snapshot.ema.crossover} cross')
    if abs(snapshot.macd.histogram) > 0.3:
        contexts.append(f"MACD {'bullish' if snapshot.macd.histogram > 0 else 'bearish'} momentum")

    level = 'HIGH' if signal.confidence > 0.7 else 'MEDIUM' if signal.confidence > 0.5 else 'LOW'
    contexts.append(f'Confidence: {level}')
    return ' | '.join(contexts)
