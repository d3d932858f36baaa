"""
Guardrails for the analysis engine - data quality checks on price series.
Assessment never raises; the strict check is opt-in for callers that want
to stop on thin history.
"""

import logging
import warnings
from typing import Any, Dict, List, Optional, Sequence

from quant.calculations.series import (
    FieldKey,
    ensure_number,
    extract_values,
    read_field,
    to_timestamp,
)

logger = logging.getLogger(__name__)

# Minimum usable closes before each metric has a value
MIN_HISTORY = {
    'returns': 2,
    'ema21': 1,
    'rsi14': 15,
    'sma20': 20,
    'sma50': 50,
    'sma200': 200,
}

UNUSABLE_ROW_WARNING_PCT = 10.0


class DataQualityError(Exception):
    """Raised when data quality issues require caller intervention."""
    pass


class DataQualityWarning(UserWarning):
    """Raised when data quality issues should be noted but don't block execution."""
    pass


def assess_series_quality(
    series: Optional[Sequence[Any]],
    *,
    price_key: FieldKey = 'close',
    date_key: FieldKey = 'date'
) -> Dict[str, Any]:
    """
    Count the rows a price series will lose during normalization.

    Args:
        series: Raw price rows
        price_key: Field name (or selector) holding the price
        date_key: Field name (or selector) holding the date

    Returns:
        Dictionary with:
        - total_rows: Rows supplied
        - missing_dates: Rows dropped for a missing date (or non-mapping rows)
        - invalid_dates: Rows whose date cannot be parsed (sorted last)
        - invalid_prices: Rows with a dated but non-numeric price
        - duplicate_dates: Extra rows sharing a parsed date
        - usable_points: Closes that reach the calculations
        - unusable_pct: Share of rows not reaching the calculations
        - insufficient_for: Metrics lacking enough history
    """
    rows = list(series or [])
    total_rows = len(rows)

    missing_dates = 0
    invalid_dates = 0
    invalid_prices = 0
    seen = set()
    duplicate_dates = 0

    for row in rows:
        raw_date = read_field(row, date_key)
        if raw_date is None:
            missing_dates += 1
            continue

        parsed = to_timestamp(raw_date)
        if parsed is None:
            invalid_dates += 1
        elif parsed in seen:
            duplicate_dates += 1
        else:
            seen.add(parsed)

        if ensure_number(read_field(row, price_key)) is None:
            invalid_prices += 1

    usable_points = len(extract_values(rows, price_key, date_key))
    unusable_pct = (
        (total_rows - usable_points) / total_rows * 100 if total_rows else 0.0
    )

    insufficient_for = missing_metrics(usable_points)

    if unusable_pct > UNUSABLE_ROW_WARNING_PCT:
        warnings.warn(
            f"{total_rows - usable_points} of {total_rows} price rows are unusable "
            f"({unusable_pct:.1f}%); metrics are computed on the remaining "
            f"{usable_points} points.",
            DataQualityWarning
        )

    logger.debug(
        "Series quality: %d rows, %d usable, %d missing dates, %d invalid prices",
        total_rows, usable_points, missing_dates, invalid_prices
    )

    return {
        'total_rows': total_rows,
        'missing_dates': missing_dates,
        'invalid_dates': invalid_dates,
        'invalid_prices': invalid_prices,
        'duplicate_dates': duplicate_dates,
        'usable_points': usable_points,
        'unusable_pct': unusable_pct,
        'insufficient_for': insufficient_for,
    }


def validate_sufficient_history(
    series: Optional[Sequence[Any]],
    required: int,
    *,
    price_key: FieldKey = 'close',
    date_key: FieldKey = 'date'
) -> int:
    """
    Stop-and-ask check for callers that need a minimum history.

    Args:
        series: Raw price rows
        required: Minimum usable closes
        price_key: Field name (or selector) holding the price
        date_key: Field name (or selector) holding the date

    Returns:
        Number of usable closes

    Raises:
        DataQualityError: If fewer than `required` closes are usable
    """
    usable = len(extract_values(series, price_key, date_key))
    if usable < required:
        raise DataQualityError(
            f"Insufficient history: have {usable} usable closes, need at least {required}. "
            f"Consider requesting a longer horizon from the price feed."
        )
    return usable


def missing_metrics(usable_points: int) -> List[str]:
    """Metric names that cannot be computed from `usable_points` closes."""
    return [name for name, required in MIN_HISTORY.items() if usable_points < required]
