"""
Return distribution diagnostics.

Skewness, excess kurtosis and quantiles used by the risk lab. These return
0.0 rather than None when the sample is too small or has no dispersion, so
a diagnostics panel always has a neutral figure to show.
"""

import math
import numpy as np
from typing import Dict, Optional, Sequence


def quantile(values: Sequence[float], q: float) -> float:
    """
    Quantile with linear interpolation between order statistics.

    Example:
        quantile([1, 2, 3, 4], 0.5) -> 2.5

    Returns:
        Interpolated value, 0.0 for an empty sequence
    """
    if len(values) == 0:
        return 0.0

    ordered = sorted(values)
    position = (len(ordered) - 1) * q
    base = math.floor(position)
    rest = position - base

    if base + 1 < len(ordered):
        return float(ordered[base] + rest * (ordered[base + 1] - ordered[base]))
    return float(ordered[base])


def skewness(returns: Sequence[float]) -> float:
    """
    Bias-corrected sample skewness.

    Formula: n / ((n-1)(n-2)) × Σ((x - mean) / s)^3, with s the sample
    standard deviation.

    Returns:
        Skewness, 0.0 when n < 3 or the returns are constant
    """
    n = len(returns)
    if n < 3:
        return 0.0

    values = np.asarray(returns, dtype=float)
    std = float(np.std(values, ddof=1))
    if std == 0:
        return 0.0

    standardized = (values - values.mean()) / std
    return float((n / ((n - 1) * (n - 2))) * np.sum(standardized ** 3))


def excess_kurtosis(returns: Sequence[float]) -> float:
    """
    Excess kurtosis with the population standard deviation.

    Formula: Σ((x - mean) / σ)^4 / n - 3

    Returns:
        Excess kurtosis, 0.0 when n < 4 or the returns are constant
    """
    n = len(returns)
    if n < 4:
        return 0.0

    values = np.asarray(returns, dtype=float)
    std = float(np.std(values, ddof=0))
    if std == 0:
        return 0.0

    standardized = (values - values.mean()) / std
    return float(np.sum(standardized ** 4) / n - 3)


def distribution_summary(returns: Sequence[float]) -> Optional[Dict[str, float]]:
    """
    Summarize the shape of a return series.

    Returns:
        Dictionary with mean, sample std, downside_capture (magnitude of the
        average losing period) and upside_capture (average winning period),
        or None for an empty series
    """
    n = len(returns)
    if n == 0:
        return None

    values = np.asarray(returns, dtype=float)
    avg = float(values.mean())
    variance = float(np.sum((values - avg) ** 2)) / (n - 1 or 1)

    downside = values[values < 0]
    upside = values[values > 0]

    return {
        'mean': avg,
        'std': math.sqrt(max(variance, 0.0)),
        'downside_capture': abs(float(downside.mean())) if downside.size else 0.0,
        'upside_capture': float(upside.mean()) if upside.size else 0.0,
    }
