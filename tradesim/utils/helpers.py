"""
Helper utilities for the simulation engines
"""

from datetime import datetime, timezone


BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]"""
    return max(low, min(high, value))


def format_signed(value: float, decimals: int = 2) -> str:
    """Format value with an explicit sign (+1.50 / -0.25)"""
    return f"{'+' if value >= 0 else ''}{value:.{decimals}f}"


def format_price(price: float) -> str:
    """
    Format a crypto quote with precision by magnitude

    Args:
        price: Quote in USDT

    Returns:
        2 decimals at/above 1000, 3 at/above 1, else 5
    """
    if price >= 1000:
        return f"{price:.2f}"
    if price >= 1:
        return f"{price:.3f}"
    return f"{price:.5f}"


def format_rate(price: float, pip_size: float) -> str:
    """Format an FX rate: 3 decimals for 0.01-pip pairs (JPY), else 5"""
    if pip_size >= 0.01:
        return f"{price:.3f}"
    return f"{price:.5f}"


def format_pips(pips: float) -> str:
    """Format pips value"""
    return f"{format_signed(pips, 1)} pips"


def to_base36(value: int) -> str:
    """Upper-case base-36 rendering of a non-negative integer"""
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def ms_to_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime"""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def format_clock(timestamp_ms: int) -> str:
    """HH:MM:SS of an epoch-ms timestamp (UTC), for console lines"""
    return ms_to_datetime(timestamp_ms).strftime("%H:%M:%S")
