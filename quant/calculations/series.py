"""
Series normalization utilities.
Pure functions that turn dirty, unsorted price rows into clean numeric series.
"""

import logging
import math
import numbers
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

FieldKey = Union[str, Callable[[Mapping], Any]]


def ensure_number(value: Any) -> Optional[float]:
    """
    Coerce a price-like value to a finite float.

    Args:
        value: Raw field value (number, numeric string, None, ...)

    Returns:
        Finite float, or None for missing, empty or non-numeric values
    """
    if value is None or value == '':
        return None

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    return number if math.isfinite(number) else None


def to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a date-like value to a UTC timestamp.

    Accepts ISO strings, date/datetime objects, pandas Timestamps and
    epoch milliseconds. Returns None when the value cannot be parsed.
    """
    if value is None or value == '' or isinstance(value, bool):
        return None

    try:
        if isinstance(value, numbers.Real):
            if not math.isfinite(value):
                return None
            parsed = pd.to_datetime(value, unit='ms', utc=True)
        elif isinstance(value, (datetime, date, pd.Timestamp, str)):
            parsed = pd.to_datetime(value, utc=True)
        else:
            return None
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    return parsed


def field_selector(*keys: str) -> Callable[[Mapping], Any]:
    """
    Build a reader that returns the first present field of a row.

    Provider payloads name the trade price differently (close, price, last).
    Passing field_selector('close', 'price', 'last') wherever a key is
    accepted reads whichever of those fields the row carries.
    """
    if not keys:
        raise ValueError("field_selector needs at least one key")

    def select(row: Mapping) -> Any:
        for key in keys:
            value = row.get(key)
            if value is not None:
                return value
        return None

    return select


def read_field(row: Any, key: FieldKey) -> Any:
    """Read a field from a row using a key name or a selector callable."""
    if not isinstance(row, Mapping):
        return None
    if callable(key):
        return key(row)
    return row.get(key)


def sort_by_date(series: Optional[Sequence[Any]], date_key: FieldKey = 'date') -> List[Mapping]:
    """
    Sort price rows ascending by date.

    Rows that are not mappings or have no date are dropped. Rows whose date
    cannot be parsed are kept but placed after every valid date, in their
    original relative order.

    Args:
        series: Price rows in any order
        date_key: Field name (or selector) holding the date

    Returns:
        New list of rows sorted chronologically
    """
    if not series:
        return []

    keyed = []
    unparsed = 0
    for row in series:
        raw_date = read_field(row, date_key)
        if raw_date is None:
            continue
        parsed = to_timestamp(raw_date)
        if parsed is None:
            unparsed += 1
        keyed.append((parsed, row))

    if unparsed:
        logger.debug("%d rows with unparseable dates sorted to the end", unparsed)

    # sorted() is stable, so unparseable rows keep their relative order
    keyed = sorted(
        keyed,
        key=lambda item: (1, 0) if item[0] is None else (0, item[0].value)
    )
    return [row for _, row in keyed]


def extract_values(
    series: Optional[Sequence[Any]],
    key: FieldKey = 'close',
    date_key: FieldKey = 'date'
) -> List[float]:
    """
    Extract one numeric field from price rows in chronological order.

    Example:
        [{'date': '2024-01-01', 'close': '100'},
         {'date': '2024-01-02', 'close': None},
         {'date': '2024-01-03', 'close': 102}]  ->  [100.0, 102.0]
    """
    values = []
    for row in sort_by_date(series, date_key):
        number = ensure_number(read_field(row, key))
        if number is not None:
            values.append(number)
    return values
