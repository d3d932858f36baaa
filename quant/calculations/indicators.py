"""
Technical indicator calculations.

Implements the simple moving average, EMA and RSI (Wilder's smoothing) over
plain numeric sequences.

These functions take values that are already in chronological order, such
as the output of extract_values. They never sort. Handing them raw closes
from an unsorted series produces indicators over the wrong sequence.
"""

import numpy as np
import pandas as pd
from typing import Any, List, Optional

from quant.calculations.series import ensure_number


def _as_list(values: Any) -> Optional[list]:
    """Return values as a list, or None when the input is not array-like."""
    if isinstance(values, (list, tuple)):
        return list(values)
    if isinstance(values, (np.ndarray, pd.Series)):
        return values.tolist() if values.ndim == 1 else None
    return None


def moving_average(values: Any, window: int = 20) -> List[Optional[float]]:
    """
    Compute a simple moving average with a sliding sum.

    Args:
        values: Numeric sequence in chronological order
        window: Averaging window in bars

    Returns:
        List the same length as values. Entries before window - 1 bars of
        history are None, as are entries whose raw value is not numeric
        (those values are left out of the running sum). Empty list when
        window <= 0 or values is not array-like.

    Example:
        moving_average([1, 2, 3], 5) -> [None, None, None]
    """
    items = _as_list(values)
    if items is None or window <= 0:
        return []

    out: List[Optional[float]] = []
    running_sum = 0.0
    for i, raw in enumerate(items):
        value = ensure_number(raw)
        if value is None:
            out.append(None)
            continue

        running_sum += value
        if i >= window:
            drop = ensure_number(items[i - window])
            if drop is not None:
                running_sum -= drop

        out.append(running_sum / window if i >= window - 1 else None)

    return out


def exponential_moving_average(values: Any, window: int = 20) -> List[Optional[float]]:
    """
    Compute an exponential moving average seeded with the first value.

    Formula: EMA_t = k × x_t + (1 - k) × EMA_{t-1}, k = 2 / (window + 1)

    A non-numeric observation freezes the EMA: the previous value is
    repeated instead of propagating NaN.

    Returns:
        List the same length as values, or an empty list for empty or
        non-array input or window <= 0
    """
    items = _as_list(values)
    if not items or window <= 0:
        return []

    k = 2.0 / (window + 1)
    ema = ensure_number(items[0])
    out: List[Optional[float]] = [ema]

    for raw in items[1:]:
        value = ensure_number(raw)
        if value is None or ema is None:
            out.append(ema)
            continue
        ema = value * k + ema * (1 - k)
        out.append(ema)

    return out


def relative_strength_index(values: Any, period: int = 14) -> Optional[float]:
    """
    Compute the latest Relative Strength Index using Wilder's smoothing.

    1. Average gain and loss over the first `period` price changes
    2. For each later change: avg = (avg × (period - 1) + current) / period
    3. RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Changes that touch a non-numeric value are skipped.

    Args:
        values: Prices in chronological order
        period: RSI lookback period (default 14)

    Returns:
        RSI in [0, 100]; 100.0 when there are no losses; None when
        len(values) <= period
    """
    items = _as_list(values)
    if items is None or period <= 0 or len(items) <= period:
        return None

    prices = [ensure_number(v) for v in items]

    def change_at(i: int) -> Optional[float]:
        if prices[i] is None or prices[i - 1] is None:
            return None
        return prices[i] - prices[i - 1]

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = change_at(i)
        if change is None:
            continue
        if change >= 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    for i in range(period + 1, len(prices)):
        change = change_at(i)
        if change is None:
            continue
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)
