"""
Risk lab panels - risk, trend and scenario analytics for a single symbol.
Composes the shared calculations into the figures a risk desk displays.
"""

from typing import Any, Dict, Optional, Sequence

from quant.calculations.distribution import excess_kurtosis, skewness
from quant.calculations.drawdown import max_drawdown
from quant.calculations.indicators import moving_average
from quant.calculations.returns import compound_growth_rate, mean, returns_from_values
from quant.calculations.series import FieldKey, extract_values
from quant.calculations.volatility import (
    DEFAULT_CONFIDENCE,
    TRADING_DAYS_PER_YEAR,
    annualize_volatility,
    historical_var,
)


def _last(values: list) -> Optional[float]:
    return values[-1] if values else None


def risk_metrics(
    series: Sequence[Any],
    *,
    price_key: FieldKey = 'close',
    date_key: FieldKey = 'date',
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
    confidence: float = DEFAULT_CONFIDENCE
) -> Optional[Dict[str, float]]:
    """
    Calculate the risk panel from simple daily returns.

    Returns:
        Dictionary with annualized_volatility, average_daily_return,
        growth_rate_per_period, max_drawdown, historical_var (positive loss
        magnitude), skewness and excess_kurtosis; None when fewer than 2
        usable closes
    """
    closes = extract_values(series, price_key, date_key)
    returns = returns_from_values(closes, mode='simple')
    if len(closes) < 2 or not returns:
        return None

    return {
        'annualized_volatility': annualize_volatility(returns, periods_per_year),
        'average_daily_return': mean(returns),
        'growth_rate_per_period': compound_growth_rate(closes),
        'max_drawdown': max_drawdown(closes),
        'historical_var': historical_var(returns, confidence),
        'skewness': skewness(returns),
        'excess_kurtosis': excess_kurtosis(returns),
    }


def trend_diagnostics(
    series: Sequence[Any],
    *,
    price_key: FieldKey = 'close',
    date_key: FieldKey = 'date'
) -> Dict[str, Any]:
    """
    Compare the latest price with its 20/50/200-bar moving averages.

    Returns:
        Dictionary with:
        - price_vs_20d: (last - ma20) / ma20
        - ma50_vs_200d: (ma50 - ma200) / ma200
        - level_200d: Latest 200-bar average
        - structure: 'bullish' when ma50 > ma200, 'bearish' otherwise
        Each entry is None when its averages lack history.
    """
    closes = extract_values(series, price_key, date_key)
    last = _last(closes)
    ma20 = _last(moving_average(closes, 20))
    ma50 = _last(moving_average(closes, 50))
    ma200 = _last(moving_average(closes, 200))

    price_vs_20d = (last - ma20) / ma20 if last and ma20 else None

    ma50_vs_200d = None
    structure = None
    if ma50 and ma200:
        ma50_vs_200d = (ma50 - ma200) / ma200
        structure = 'bullish' if ma50 > ma200 else 'bearish'

    return {
        'price_vs_20d': price_vs_20d,
        'ma50_vs_200d': ma50_vs_200d,
        'level_200d': ma200,
        'structure': structure,
    }


def scenario_analysis(
    series: Sequence[Any],
    *,
    position: float,
    move_percent: float = 0.0,
    vol_multiplier: float = 1.0,
    entry_price: Optional[float] = None,
    price_key: FieldKey = 'close',
    date_key: FieldKey = 'date',
    confidence: float = DEFAULT_CONFIDENCE
) -> Optional[Dict[str, float]]:
    """
    Simulate a price move on a position and size its historical VaR.

    Formula:
        scenario_price = last × (1 + move_percent / 100)
        pnl = (scenario_price - entry) × position
        var_value = entry × position × historical_var × vol_multiplier

    Args:
        series: Price rows for the symbol
        position: Units held (negative for short)
        move_percent: Hypothetical price move in percent (5 = +5%)
        vol_multiplier: Stress factor applied to the historical VaR
        entry_price: Cost basis; defaults to the latest close
        price_key: Field name (or selector) holding the price
        date_key: Field name (or selector) holding the date
        confidence: VaR confidence level

    Returns:
        Dictionary with last_price, entry_price, scenario_price, pnl,
        var_pct and var_value; None without a position or a latest close
    """
    closes = extract_values(series, price_key, date_key)
    last_price = _last(closes)
    if not position or not last_price:
        return None

    entry = entry_price or last_price
    scenario_price = last_price * (1 + move_percent / 100)

    returns = returns_from_values(closes, mode='simple')
    var_pct = historical_var(returns, confidence) * vol_multiplier

    return {
        'last_price': last_price,
        'entry_price': entry,
        'scenario_price': scenario_price,
        'pnl': (scenario_price - entry) * position,
        'var_pct': var_pct,
        'var_value': entry * position * var_pct,
    }
