"""
Data Ingestion Module

Adapts price feed payloads to canonical PricePoint rows:
- Tiingo EOD and IEX rows
- Marketstack EOD rows
- {"data": [...]} proxy envelopes
"""

__version__ = "0.1.0"
