#!/usr/bin/env python3
"""
CLI tool for analyzing a price series file.
Usage: quant-analyze PATH [options]
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ingestion.transforms.normalizers import normalize_price_rows, unwrap_payload
from quant.config import LOG_LEVELS, ConfigError, load_settings
from quant.guardrails import DataQualityError, validate_sufficient_history
from quant.metrics_aggregator import analyse_series, compose_metrics
from reports.formatters import format_metrics_summary

logger = logging.getLogger(__name__)


class SeriesLoadError(Exception):
    """Raised when a price file cannot be read."""
    pass


def load_series(path: Path) -> List[Dict[str, Any]]:
    """
    Load price rows from a JSON or CSV file.

    JSON files may hold a list of rows or a {"data": [...]} envelope.
    CSV files are read with pandas; empty cells become None.

    Raises:
        SeriesLoadError: If the file is missing or cannot be parsed
    """
    if not path.exists():
        raise SeriesLoadError(f"Price file not found: {path}")

    if path.suffix.lower() == '.csv':
        try:
            frame = pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise SeriesLoadError(f"Could not parse CSV {path}: {e}") from e
        frame = frame.astype(object).where(frame.notna(), None)
        return frame.to_dict('records')

    try:
        with open(path, 'r') as f:
            payload = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SeriesLoadError(f"Could not parse JSON {path}: {e}") from e

    rows = unwrap_payload(payload)
    if not rows and payload not in ([], {'data': []}):
        raise SeriesLoadError(f"{path} holds neither a list of rows nor a {{\"data\": [...]}} envelope")
    return rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Compute time-series analytics for a price file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quant-analyze prices.json
  quant-analyze aapl.csv --symbol AAPL --report --summary
  quant-analyze quotes.json --price-key price --periods-per-year 365
  quant-analyze iex.json --normalize --source tiingo-iex
        """
    )

    parser.add_argument('path', type=Path, help='JSON or CSV file of price rows')
    parser.add_argument('--symbol', default='UNKNOWN',
                        help='Ticker reported in --report output (default: UNKNOWN)')
    parser.add_argument('--price-key', default='close',
                        help='Field holding the price (default: close)')
    parser.add_argument('--volume-key', default='volume',
                        help='Field holding the volume (default: volume)')
    parser.add_argument('--date-key', default='date',
                        help='Field holding the date (default: date)')
    parser.add_argument('--periods-per-year', type=int,
                        help='Annualization factor (default: QUANT_PERIODS_PER_YEAR or 252)')
    parser.add_argument('--risk-free-rate', type=float,
                        help='Annual risk-free rate (default: QUANT_RISK_FREE_RATE or 0.02)')
    parser.add_argument('--normalize', action='store_true',
                        help='Map raw provider rows (Tiingo EOD/IEX, Marketstack) to canonical fields first')
    parser.add_argument('--source', default='tiingo',
                        help='Provider name stamped on normalized rows (default: tiingo)')
    parser.add_argument('--report', action='store_true',
                        help='Emit the full metrics report instead of the analysis result')
    parser.add_argument('--summary', action='store_true',
                        help='Print a formatted metrics panel (implies --report)')
    parser.add_argument('--strict', action='store_true',
                        help='Fail when fewer than --min-history usable closes exist')
    parser.add_argument('--min-history', type=int, default=50,
                        help='Usable closes required by --strict (default: 50)')
    parser.add_argument('--output', type=Path,
                        help='Write JSON to this file instead of stdout')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress status output')
    parser.add_argument('--log-level', choices=list(LOG_LEVELS),
                        help='Logging level (default: QUANT_LOG_LEVEL or WARNING)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    overrides = {}
    if args.periods_per_year is not None:
        overrides['periods_per_year'] = args.periods_per_year
    if args.risk_free_rate is not None:
        overrides['risk_free_rate'] = args.risk_free_rate
    if overrides:
        settings = replace(settings, **overrides)

    try:
        series = load_series(args.path)
    except SeriesLoadError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logger.info("Loaded %d rows from %s", len(series), args.path)

    if args.normalize:
        series = normalize_price_rows(series, source=args.source)
        logger.info("Normalized to %d %s rows", len(series), args.source)

    if args.strict:
        try:
            validate_sufficient_history(
                series, args.min_history, price_key=args.price_key, date_key=args.date_key
            )
        except DataQualityError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    if args.report or args.summary:
        result = compose_metrics(
            series,
            args.symbol,
            settings=settings,
            price_key=args.price_key,
            volume_key=args.volume_key,
            date_key=args.date_key
        )
    else:
        result = analyse_series(
            series,
            periods_per_year=settings.periods_per_year,
            volume_key=args.volume_key,
            price_key=args.price_key,
            date_key=args.date_key,
            risk_free_rate=settings.risk_free_rate,
            volume_window=settings.volume_window
        )

    payload = json.dumps(result, indent=2, default=str)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload)
        if not args.quiet:
            print(f"Results saved to: {args.output}")
    else:
        print(payload)

    if args.summary and not args.quiet:
        print()
        print(f"Summary for {args.symbol}:")
        for label, value in format_metrics_summary(result):
            print(f"   {label}: {value}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
