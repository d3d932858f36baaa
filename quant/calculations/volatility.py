"""
Volatility and risk calculation utilities.
Pure functions for annualized volatility, Sharpe ratio and value-at-risk.
"""

import math
import numpy as np
from typing import List, Optional, Sequence

from quant.calculations.distribution import quantile
from quant.calculations.returns import mean, standard_deviation


TRADING_DAYS_PER_YEAR = 252
DEFAULT_RISK_FREE_RATE = 0.02
DEFAULT_CONFIDENCE = 0.95


def annualize_volatility(
    returns: Sequence[float],
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> Optional[float]:
    """
    Annualize the volatility of a return series.

    Formula: σ_annual = std(returns) × √periods_per_year

    Uses the population standard deviation.

    Args:
        returns: Per-period returns
        periods_per_year: Annualization factor (252 for daily bars)

    Returns:
        Annualized volatility as decimal (0.25 = 25%), or None when empty
    """
    if len(returns) == 0:
        return None

    period_std = standard_deviation(returns)
    if period_std is None:
        return None

    return period_std * math.sqrt(periods_per_year)


def sharpe_ratio(
    returns: Sequence[float],
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> Optional[float]:
    """
    Calculate the annualized Sharpe ratio.

    Formula: (mean(returns) × periods_per_year - risk_free_rate) / σ_annual

    Args:
        returns: Per-period returns
        periods_per_year: Annualization factor
        risk_free_rate: Annual risk-free rate as decimal

    Returns:
        Sharpe ratio, or None when returns are empty or volatility is zero
    """
    if len(returns) == 0:
        return None

    annual_return = mean(returns) * periods_per_year
    vol = annualize_volatility(returns, periods_per_year)
    if not vol:
        return None

    return (annual_return - risk_free_rate) / vol


def value_at_risk(
    returns: Sequence[float],
    confidence: float = DEFAULT_CONFIDENCE
) -> Optional[float]:
    """
    Historical value-at-risk as a return threshold.

    Sorts returns ascending and picks the observation at index
    floor((1 - confidence) × n), so at 95% confidence on 100 returns the
    sixth-worst return is reported. The result is a (usually negative)
    return, not a loss magnitude.

    Returns:
        Return at the VaR percentile, or None when empty
    """
    if len(returns) == 0:
        return None

    ordered = sorted(returns)
    index = math.floor((1 - confidence) * len(ordered))
    if index < 0 or index >= len(ordered):
        return None
    return float(ordered[index])


def historical_var(
    returns: Sequence[float],
    confidence: float = DEFAULT_CONFIDENCE
) -> float:
    """
    Historical VaR as a positive loss magnitude.

    Interpolated (1 - confidence) quantile of the losing periods only,
    reported as an absolute value. This is the figure scenario tools scale
    by position size.

    Returns:
        Loss magnitude as decimal, 0.0 when there are no losing periods
    """
    losses = [r for r in returns if r < 0]
    if not losses:
        return 0.0
    return abs(quantile(losses, 1 - confidence))


def rolling_volatility(
    returns: Sequence[float],
    window: int,
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> List[Optional[float]]:
    """
    Calculate annualized volatility over a trailing window.

    Args:
        returns: Per-period returns in chronological order
        window: Number of returns per window
        periods_per_year: Annualization factor

    Returns:
        List parallel to returns; None until a full window is available
    """
    if window <= 0:
        return []

    returns_array = np.asarray(returns, dtype=float)
    scale = math.sqrt(periods_per_year)

    rolling_vols: List[Optional[float]] = []
    for i in range(len(returns_array)):
        if i < window - 1:
            rolling_vols.append(None)
            continue
        window_returns = returns_array[i - window + 1:i + 1]
        rolling_vols.append(float(np.std(window_returns, ddof=0)) * scale)

    return rolling_vols
