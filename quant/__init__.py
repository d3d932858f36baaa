"""
Quant Analytics Module

Calculates time-series statistics from OHLCV price rows:
- Returns (log, simple) and population moments
- Volatility, Sharpe ratio, value-at-risk
- Maximum drawdown
- Moving averages, EMA, RSI
- Distribution diagnostics (skewness, kurtosis)
"""

__version__ = "0.1.0"
