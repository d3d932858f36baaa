"""
Drawdown and recovery calculation utilities.
Pure functions for maximum drawdown analysis.

Unlike the returns helpers these functions do not sort: values are
processed in the order supplied, so callers pass closes that are already
chronological (e.g. the output of extract_values).
"""

import numpy as np
from typing import Any, Dict, List, Optional, Sequence

from quant.calculations.series import ensure_number


def _numeric_points(values: Sequence[Any]) -> List[tuple]:
    """Pair each numeric value with its position in the input."""
    points = []
    for index, value in enumerate(values):
        number = ensure_number(value)
        if number is not None:
            points.append((index, number))
    return points


def max_drawdown(values: Sequence[Any]) -> float:
    """
    Calculate the largest peak-to-trough decline.

    Tracks the running peak; drawdown at each point is (value - peak) / peak,
    counted only while the peak is positive. Non-numeric entries are skipped.

    Args:
        values: Prices in the order they should be evaluated

    Returns:
        Most negative drawdown as decimal (-0.25 = 25% decline), 0.0 when
        prices never decline

    Example:
        [100, 120, 90, 110] -> -0.25 (peak 120, trough 90)
    """
    points = _numeric_points(values)
    if not points:
        return 0.0

    prices_array = np.array([number for _, number in points], dtype=float)

    # Track running maximum (peak)
    running_max = np.maximum.accumulate(prices_array)

    positive_peak = running_max > 0
    drawdowns = np.zeros_like(prices_array)
    drawdowns[positive_peak] = (
        prices_array[positive_peak] - running_max[positive_peak]
    ) / running_max[positive_peak]

    return min(0.0, float(drawdowns.min()))


def drawdown_details(
    values: Sequence[Any],
    dates: Optional[Sequence[Any]] = None
) -> Dict[str, Any]:
    """
    Locate the peak, trough and recovery of the maximum drawdown.

    Args:
        values: Prices in chronological order
        dates: Optional labels parallel to values (dates, timestamps, ...)

    Returns:
        Dictionary with:
        - max_drawdown: Largest decline as decimal (negative or 0.0)
        - peak_index / peak_date: Position of the peak before the decline
        - trough_index / trough_date: Position of the lowest point
        - recovery_index / recovery_date: First point above the peak after
          the trough (None if the series never recovers)
        - drawdown_bars: Bars from peak to trough
        - recovery_bars: Bars from trough to recovery (None if no recovery)
        All entries are None when fewer than 2 numeric values are present.
    """
    empty = {
        'max_drawdown': None,
        'peak_index': None,
        'peak_date': None,
        'trough_index': None,
        'trough_date': None,
        'recovery_index': None,
        'recovery_date': None,
        'drawdown_bars': None,
        'recovery_bars': None
    }

    points = _numeric_points(values)
    if len(points) < 2:
        return empty

    if dates is not None and len(dates) != len(values):
        dates = None

    positions = [index for index, _ in points]
    prices_array = np.array([number for _, number in points], dtype=float)
    running_max = np.maximum.accumulate(prices_array)

    drawdowns = np.zeros_like(prices_array)
    positive_peak = running_max > 0
    drawdowns[positive_peak] = (
        prices_array[positive_peak] - running_max[positive_peak]
    ) / running_max[positive_peak]

    trough = int(np.argmin(drawdowns))
    max_dd = min(0.0, float(drawdowns[trough]))

    if max_dd == 0.0:
        # No decline: peak, trough and recovery collapse onto the first bar
        peak = trough = recovery = 0
    else:
        peak_value = running_max[trough]
        peak = int(np.argmax(prices_array[:trough + 1] == peak_value))
        recovery = None
        for i in range(trough + 1, len(prices_array)):
            if prices_array[i] > peak_value:
                recovery = i
                break

    def label(point: Optional[int]) -> Any:
        if point is None or dates is None:
            return None
        return dates[positions[point]]

    return {
        'max_drawdown': max_dd,
        'peak_index': positions[peak],
        'peak_date': label(peak),
        'trough_index': positions[trough],
        'trough_date': label(trough),
        'recovery_index': positions[recovery] if recovery is not None else None,
        'recovery_date': label(recovery),
        'drawdown_bars': positions[trough] - positions[peak],
        'recovery_bars': (positions[recovery] - positions[trough]) if recovery is not None else None
    }
