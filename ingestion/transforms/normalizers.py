"""
Normalizers for transforming provider price payloads to canonical PricePoint rows.
Pure functions - no IO, network, or side effects.
Minimal normalization - only field mapping and numeric coercion.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List

from quant.calculations.series import ensure_number, field_selector, to_timestamp

logger = logging.getLogger(__name__)

# Field fallbacks across Tiingo EOD, Tiingo IEX, Marketstack and synthetic rows
DATE_FIELD = field_selector('date', 'timestamp', 'lastSaleTimestamp', 'quoteTimestamp')
CLOSE_FIELD = field_selector('close', 'last', 'adjClose', 'tngoLast', 'price', 'lastPrice')
OPEN_FIELD = field_selector('open', 'adjOpen', 'openPrice', 'prevClose')
HIGH_FIELD = field_selector('high', 'adjHigh', 'highPrice')
LOW_FIELD = field_selector('low', 'adjLow', 'lowPrice')
VOLUME_FIELD = field_selector('volume', 'adjVolume', 'lastSize', 'tngoLastSize')


def unwrap_payload(payload: Any) -> List[Any]:
    """
    Return the row list from a price feed response.

    Accepts a bare list of rows or the proxy envelope {"data": [...]}.
    Anything else yields an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get('data'), list):
        return payload['data']
    return []


def normalize_price_rows(
    raw_rows: Any,
    *,
    source: str = 'tiingo'
) -> List[Dict[str, Any]]:
    """
    Transform provider-native price rows to canonical PricePoint shape.

    Minimal normalization:
    - Field name mapping (providers name close/last/adjClose differently)
    - Numeric coercion (strings to floats, junk to None)
    - Deduplication by date (keep last to handle corrections)

    Rows that are not mappings are skipped. Dates are passed through
    unchanged so sort_by_date decides what parses; rows without any date
    field are dropped.

    Args:
        raw_rows: Provider rows, or a {"data": [...]} envelope
        source: Data provider name stamped on every row

    Returns:
        List of canonical rows with date, open, high, low, close, volume
        and source
    """
    rows = unwrap_payload(raw_rows)
    if not rows:
        return []

    seen_dates = {}  # For deduplication
    skipped = 0

    for position, raw in enumerate(rows):
        if not isinstance(raw, Mapping):
            skipped += 1
            continue

        row_date = DATE_FIELD(raw)
        if row_date is None:
            skipped += 1
            continue

        canonical = {
            'date': row_date,
            'open': ensure_number(OPEN_FIELD(raw)),
            'high': ensure_number(HIGH_FIELD(raw)),
            'low': ensure_number(LOW_FIELD(raw)),
            'close': ensure_number(CLOSE_FIELD(raw)),
            'volume': ensure_number(VOLUME_FIELD(raw)),
            'source': source,
        }

        # Deduplication by parsed date; unparseable dates never collide
        parsed = to_timestamp(row_date)
        pk = parsed if parsed is not None else ('unparsed', position)
        seen_dates[pk] = canonical

    if skipped:
        logger.debug("Skipped %d %s rows without a usable date", skipped, source)

    return list(seen_dates.values())
