"""
Analysis settings loaded from the environment.
Reads a local .env file so command line runs pick up desk-wide defaults.
"""

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

T = TypeVar('T')

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(ValueError):
    """Raised when an environment setting cannot be parsed."""
    pass


@dataclass(frozen=True)
class AnalysisSettings:
    """Defaults applied when a caller does not pass explicit options."""
    periods_per_year: int = 252
    risk_free_rate: float = 0.02
    var_confidence: float = 0.95
    volume_window: int = 30
    log_level: str = 'WARNING'


def _read(name: str, default: T, parse: Callable[[str], T]) -> T:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise ConfigError(f"{name}={raw!r} is not valid: {e}") from e


def load_settings() -> AnalysisSettings:
    """
    Build AnalysisSettings from QUANT_* environment variables.

    Variables:
        QUANT_PERIODS_PER_YEAR: Annualization factor (default 252)
        QUANT_RISK_FREE_RATE: Annual risk-free rate as decimal (default 0.02)
        QUANT_VAR_CONFIDENCE: VaR confidence level in (0, 1) (default 0.95)
        QUANT_VOLUME_WINDOW: Bars in the trailing volume average (default 30)
        QUANT_LOG_LEVEL: Logging level name (default WARNING)

    Raises:
        ConfigError: If a variable is set to an invalid value
    """
    defaults = AnalysisSettings()

    periods_per_year = _read('QUANT_PERIODS_PER_YEAR', defaults.periods_per_year, int)
    if periods_per_year <= 0:
        raise ConfigError(f"QUANT_PERIODS_PER_YEAR must be positive, got {periods_per_year}")

    risk_free_rate = _read('QUANT_RISK_FREE_RATE', defaults.risk_free_rate, float)

    var_confidence = _read('QUANT_VAR_CONFIDENCE', defaults.var_confidence, float)
    if not 0 < var_confidence < 1:
        raise ConfigError(f"QUANT_VAR_CONFIDENCE must be between 0 and 1, got {var_confidence}")

    volume_window = _read('QUANT_VOLUME_WINDOW', defaults.volume_window, int)
    if volume_window <= 0:
        raise ConfigError(f"QUANT_VOLUME_WINDOW must be positive, got {volume_window}")

    log_level = _read('QUANT_LOG_LEVEL', defaults.log_level, str.upper)
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"QUANT_LOG_LEVEL must be one of {LOG_LEVELS}, got {log_level!r}")

    return AnalysisSettings(
        periods_per_year=periods_per_year,
        risk_free_rate=risk_free_rate,
        var_confidence=var_confidence,
        volume_window=volume_window,
        log_level=log_level
    )
