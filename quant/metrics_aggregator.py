"""
Metrics aggregator - composes all calculations into analysis results.
analyse_series is the single call a chart or metrics panel needs; compose_metrics
wraps it with the risk lab panels and data-quality assessment for reports.
"""

import logging
import pandas as pd
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from quant import __version__
from quant.calculations.distribution import distribution_summary
from quant.calculations.drawdown import drawdown_details, max_drawdown
from quant.calculations.indicators import (
    exponential_moving_average,
    moving_average,
    relative_strength_index,
)
from quant.calculations.returns import mean, returns_from_values
from quant.calculations.series import (
    FieldKey,
    ensure_number,
    read_field,
    sort_by_date,
    to_timestamp,
)
from quant.calculations.volatility import (
    DEFAULT_RISK_FREE_RATE,
    TRADING_DAYS_PER_YEAR,
    annualize_volatility,
    sharpe_ratio,
)
from quant.config import AnalysisSettings, load_settings
from quant.guardrails import assess_series_quality
from quant.risk_lab import risk_metrics, trend_diagnostics

logger = logging.getLogger(__name__)

VOLUME_WINDOW = 30


def _numeric_field(rows: Sequence[Any], key: FieldKey) -> List[float]:
    values = []
    for row in rows:
        number = ensure_number(read_field(row, key))
        if number is not None:
            values.append(number)
    return values


def _last(values: list) -> Optional[float]:
    return values[-1] if values else None


def empty_analysis() -> Dict[str, Any]:
    """Analysis result for a series with no usable closes."""
    return {
        'closes': [],
        'returns': [],
        'volatility': None,
        'sharpe': None,
        'drawdown': None,
        'rsi': None,
        'sma20': None,
        'sma50': None,
        'ema21': None,
        'average_volume': None
    }


def analyse_series(
    series: Optional[Sequence[Any]],
    *,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
    volume_key: FieldKey = 'volume',
    price_key: FieldKey = 'close',
    date_key: FieldKey = 'date',
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    volume_window: int = VOLUME_WINDOW
) -> Dict[str, Any]:
    """
    Run the full statistics pipeline over raw price rows.

    Pipeline: sort by date -> extract closes -> log returns -> volatility,
    Sharpe, drawdown, RSI(14), SMA(20), SMA(50), EMA(21) and the trailing
    average volume. Each statistic degrades to None independently when the
    history is too short; malformed rows are dropped, never raised on.

    Args:
        series: Price rows (PricePoint mappings) in any order
        periods_per_year: Annualization factor for volatility and Sharpe
        volume_key: Field name (or selector) holding the volume
        price_key: Field name (or selector) holding the price
        date_key: Field name (or selector) holding the date
        risk_free_rate: Annual risk-free rate for the Sharpe ratio
        volume_window: Trailing bars in the average volume

    Returns:
        Dictionary with closes, returns, volatility, sharpe, drawdown, rsi,
        sma20, sma50, ema21 and average_volume
    """
    ordered = sort_by_date(series, date_key)
    closes = _numeric_field(ordered, price_key)

    if not closes:
        logger.debug("No usable closes in %d rows", len(ordered))
        return empty_analysis()

    returns = returns_from_values(closes, mode='log')
    volumes = _numeric_field(ordered, volume_key)

    return {
        'closes': closes,
        'returns': returns,
        'volatility': annualize_volatility(returns, periods_per_year),
        'sharpe': sharpe_ratio(returns, periods_per_year, risk_free_rate),
        'drawdown': max_drawdown(closes),
        'rsi': relative_strength_index(closes, 14),
        'sma20': _last(moving_average(closes, 20)),
        'sma50': _last(moving_average(closes, 50)),
        'ema21': _last(exponential_moving_average(closes, 21)),
        'average_volume': mean(volumes[-volume_window:]) if volumes else None
    }


def analyse_frame(frame: pd.DataFrame, **options: Any) -> Dict[str, Any]:
    """
    Run analyse_series over a price DataFrame.

    The frame may carry dates in a column (named by date_key, default
    'date') or as a DatetimeIndex.
    """
    if frame is None or frame.empty:
        return empty_analysis()

    date_key = options.get('date_key', 'date')
    if isinstance(date_key, str) and date_key not in frame.columns:
        if isinstance(frame.index, pd.DatetimeIndex):
            frame = frame.rename_axis(date_key).reset_index()

    # NaT and NaN become None so rows without a date are dropped, not sorted last
    frame = frame.astype(object).where(frame.notna(), None)
    return analyse_series(frame.to_dict('records'), **options)


def _data_period(ordered: Sequence[Any], date_key: FieldKey, observations: int) -> Dict[str, Any]:
    stamps = [to_timestamp(read_field(row, date_key)) for row in ordered]
    stamps = [stamp for stamp in stamps if stamp is not None]
    return {
        'start_date': stamps[0].date().isoformat() if stamps else None,
        'end_date': stamps[-1].date().isoformat() if stamps else None,
        'observations': observations
    }


def _drawdown_section(ordered: Sequence[Any], price_key: FieldKey, date_key: FieldKey) -> Dict[str, Any]:
    closes = []
    labels = []
    for row in ordered:
        close = ensure_number(read_field(row, price_key))
        if close is None:
            continue
        stamp = to_timestamp(read_field(row, date_key))
        closes.append(close)
        labels.append(stamp.date().isoformat() if stamp is not None else None)
    return drawdown_details(closes, labels)


def compose_metrics(
    series: Optional[Sequence[Any]],
    symbol: str,
    *,
    settings: Optional[AnalysisSettings] = None,
    price_key: FieldKey = 'close',
    volume_key: FieldKey = 'volume',
    date_key: FieldKey = 'date'
) -> Dict[str, Any]:
    """
    Compose the full metrics report for one symbol.

    Args:
        series: Price rows for the symbol
        symbol: Ticker the rows belong to
        settings: Analysis defaults (loaded from the environment when None)
        price_key: Field name (or selector) holding the price
        volume_key: Field name (or selector) holding the volume
        date_key: Field name (or selector) holding the date

    Returns:
        Dictionary with symbol, data_period, analysis (without the closes
        and returns lists), risk, trend, drawdown (peak, trough and recovery
        dates), distribution, data_quality and metadata
    """
    if settings is None:
        settings = load_settings()

    rows = list(series or [])
    data_quality = assess_series_quality(rows, price_key=price_key, date_key=date_key)

    analysis = analyse_series(
        rows,
        periods_per_year=settings.periods_per_year,
        volume_key=volume_key,
        price_key=price_key,
        date_key=date_key,
        risk_free_rate=settings.risk_free_rate,
        volume_window=settings.volume_window
    )
    closes = analysis.pop('closes')
    log_returns = analysis.pop('returns')

    risk = risk_metrics(
        rows,
        price_key=price_key,
        date_key=date_key,
        periods_per_year=settings.periods_per_year,
        confidence=settings.var_confidence
    )
    trend = trend_diagnostics(rows, price_key=price_key, date_key=date_key)
    ordered = sort_by_date(rows, date_key)

    logger.info(
        "Composed metrics for %s: %d closes, %d returns",
        symbol, len(closes), len(log_returns)
    )

    return {
        'symbol': symbol,
        'data_period': _data_period(ordered, date_key, len(closes)),
        'analysis': analysis,
        'risk': risk,
        'trend': trend,
        'drawdown': _drawdown_section(ordered, price_key, date_key),
        'distribution': distribution_summary(log_returns),
        'data_quality': data_quality,
        'metadata': {
            'calculated_at': datetime.now(timezone.utc).isoformat(),
            'calculation_version': __version__,
            'periods_per_year': settings.periods_per_year,
            'risk_free_rate': settings.risk_free_rate,
            'var_confidence': settings.var_confidence
        }
    }
