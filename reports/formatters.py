"""
Display formatters for analysis results.
Deterministic string formatting for percentages, large numbers and currency.
Unavailable values (None, NaN, non-numeric) render as an em dash placeholder.
"""

import math
import numbers
from typing import Any, Dict, List, Optional, Tuple

PLACEHOLDER = "—"


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _check_digits(digits: int) -> None:
    if not isinstance(digits, int) or digits < 0:
        raise FormatterError(f"Digits must be a non-negative integer, got {digits!r}")


def format_percent(value: Optional[float], digits: int = 2) -> str:
    """
    Format decimal as percentage with specified precision.

    Args:
        value: Decimal value (0.1234 = 12.34%)
        digits: Number of decimal places (default: 2)

    Returns:
        Formatted percentage string (e.g., "12.34%"), or "—" when unavailable
    """
    _check_digits(digits)
    number = _finite(value)
    if number is None:
        return PLACEHOLDER

    return f"{number * 100:.{digits}f}%"


def format_number(value: Optional[float], digits: int = 2) -> str:
    """
    Format a number with a T/B/M/K magnitude suffix.

    Args:
        value: Number to format
        digits: Number of decimal places (default: 2)

    Returns:
        Formatted string (e.g., "1.25M", "980.00"), or "—" when unavailable
    """
    _check_digits(digits)
    number = _finite(value)
    if number is None:
        return PLACEHOLDER

    abs_value = abs(number)
    if abs_value >= 1e12:
        return f"{number / 1e12:.{digits}f}T"
    elif abs_value >= 1e9:
        return f"{number / 1e9:.{digits}f}B"
    elif abs_value >= 1e6:
        return f"{number / 1e6:.{digits}f}M"
    elif abs_value >= 1e3:
        return f"{number / 1e3:.{digits}f}K"
    else:
        return f"{number:.{digits}f}"


def format_currency(value: Optional[float]) -> str:
    """
    Format a dollar amount; whole dollars from $100 up, cents below.

    Returns:
        Formatted currency string (e.g., "-$1,234", "$12.50"), or "—"
    """
    number = _finite(value)
    if number is None:
        return PLACEHOLDER

    sign = "-" if number < 0 else ""
    abs_value = abs(number)
    if abs_value >= 100:
        return f"{sign}${abs_value:,.0f}"
    return f"{sign}${abs_value:,.2f}"


def format_ratio(value: Optional[float], digits: int = 2) -> str:
    """Format a unitless ratio (Sharpe, RSI, skewness) to fixed decimals."""
    _check_digits(digits)
    number = _finite(value)
    if number is None:
        return PLACEHOLDER
    return f"{number:.{digits}f}"


def format_metrics_summary(report: Dict[str, Any]) -> List[Tuple[str, str]]:
    """
    Build display rows for a composed metrics report.

    Args:
        report: Output of compose_metrics

    Returns:
        List of (label, formatted value) pairs in panel order
    """
    analysis = report.get('analysis') or {}
    risk = report.get('risk') or {}
    trend = report.get('trend') or {}

    rows = [
        ('Annualised Volatility', format_percent(analysis.get('volatility'))),
        ('Sharpe Ratio', format_ratio(analysis.get('sharpe'))),
        ('Max Drawdown', format_percent(analysis.get('drawdown'))),
        ('RSI (14)', format_ratio(analysis.get('rsi'), 1)),
        ('SMA 20', format_number(analysis.get('sma20'))),
        ('SMA 50', format_number(analysis.get('sma50'))),
        ('EMA 21', format_number(analysis.get('ema21'))),
        ('Average Volume', format_number(analysis.get('average_volume'))),
        ('Historical VaR', format_percent(risk.get('historical_var'))),
        ('Skewness', format_ratio(risk.get('skewness'))),
        ('Excess Kurtosis', format_ratio(risk.get('excess_kurtosis'))),
        ('Price vs 20D', format_percent(trend.get('price_vs_20d'))),
        ('50D vs 200D', format_percent(trend.get('ma50_vs_200d'))),
    ]
    return rows
