"""
Returns calculation utilities.
Pure functions for per-period returns and population moments.
"""

import numpy as np
from typing import Any, List, Optional, Sequence

from quant.calculations.series import FieldKey, extract_values


RETURN_MODES = ('log', 'simple')


class ReturnsError(ValueError):
    """Raised when returns are requested with an unknown mode."""
    pass


def compute_returns(
    series: Optional[Sequence[Any]],
    value_key: FieldKey = 'close',
    mode: str = 'log'
) -> List[float]:
    """
    Calculate per-period returns from price rows.

    Formula:
        log:    r_t = ln(P_t / P_{t-1})
        simple: r_t = (P_t / P_{t-1}) - 1

    Rows are sorted by date and non-numeric values dropped first, so a
    return may bridge a gap left by a dropped row. A pair where either
    price is exactly zero is skipped.

    Args:
        series: Price rows (PricePoint mappings) in any order
        value_key: Field name (or selector) holding the price
        mode: 'log' or 'simple'

    Returns:
        List of returns (empty when fewer than 2 valid prices)

    Example:
        closes [100, 110, 99] in simple mode -> [0.10, -0.10]

    Raises:
        ReturnsError: If mode is not 'log' or 'simple'
    """
    return returns_from_values(extract_values(series, value_key), mode)


def returns_from_values(values: Sequence[float], mode: str = 'log') -> List[float]:
    """Per-period returns over closes that are already chronological."""
    if mode not in RETURN_MODES:
        raise ReturnsError(f"Unknown return mode {mode!r}, expected one of {RETURN_MODES}")

    if len(values) < 2:
        return []

    prices = np.array(values, dtype=float)
    prev = prices[:-1]
    curr = prices[1:]

    mask = (prev != 0) & (curr != 0)
    ratios = curr[mask] / prev[mask]

    if mode == 'log':
        # ln is undefined for a sign change between prices
        ratios = ratios[ratios > 0]
        return np.log(ratios).tolist()

    return (ratios - 1).tolist()


def mean(values: Sequence[float]) -> Optional[float]:
    """Population mean, or None for an empty sequence."""
    if len(values) == 0:
        return None
    return float(np.mean(np.asarray(values, dtype=float)))


def standard_deviation(values: Sequence[float]) -> Optional[float]:
    """
    Population standard deviation (divides by N, not N-1).

    Returns:
        Standard deviation, or None for an empty sequence
    """
    if len(values) == 0:
        return None
    return float(np.std(np.asarray(values, dtype=float), ddof=0))


def compound_growth_rate(values: Sequence[float]) -> Optional[float]:
    """
    Per-period geometric growth rate between the first and last value.

    Formula: g = (P_last / P_first) ^ (1 / (n - 1)) - 1

    Args:
        values: Prices in chronological order

    Returns:
        Growth rate per period, or None when fewer than 2 values or the
        first value is not positive
    """
    if len(values) < 2:
        return None

    first = float(values[0])
    last = float(values[-1])
    if not np.isfinite(first) or not np.isfinite(last) or first <= 0:
        return None

    periods = len(values) - 1
    ratio = last / first
    if ratio < 0:
        return None
    return ratio ** (1 / periods) - 1
