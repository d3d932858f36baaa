"""
Tests for the analyze_series CLI - files in a temp directory, main() called directly.
"""

import json
import os
import pytest
from datetime import date, timedelta
from unittest.mock import patch

from quant.analyze_series import SeriesLoadError, load_series, main


def price_rows(count):
    start = date(2024, 1, 1)
    return [
        {
            'date': (start + timedelta(days=i)).isoformat(),
            'close': 100.0 + (i % 7) - i * 0.1,
            'volume': 1000 + i,
        }
        for i in range(count)
    ]


@pytest.fixture(autouse=True)
def clean_environment():
    """Keep local QUANT_* settings out of the tests."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def json_file(tmp_path):
    path = tmp_path / 'prices.json'
    path.write_text(json.dumps(price_rows(60)))
    return path


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / 'prices.csv'
    lines = ['date,close,volume']
    lines += [f"{row['date']},{row['close']},{row['volume']}" for row in price_rows(30)]
    lines.append('2024-02-15,,500')
    path.write_text('\n'.join(lines) + '\n')
    return path


class TestLoadSeries:
    """Tests for price file loading."""

    def test_json_list(self, json_file):
        """A JSON list of rows loads as-is."""
        rows = load_series(json_file)
        assert len(rows) == 60
        assert rows[0]['date'] == '2024-01-01'

    def test_json_envelope(self, tmp_path):
        """A {"data": [...]} envelope is unwrapped."""
        path = tmp_path / 'envelope.json'
        path.write_text(json.dumps({'data': price_rows(3)}))
        assert len(load_series(path)) == 3

    def test_csv_blank_cells_become_none(self, csv_file):
        """Empty CSV cells come through as None, not NaN."""
        rows = load_series(csv_file)
        assert len(rows) == 31
        assert rows[-1]['close'] is None
        assert rows[-1]['volume'] == 500

    def test_missing_file(self, tmp_path):
        """A missing file raises SeriesLoadError."""
        with pytest.raises(SeriesLoadError, match="not found"):
            load_series(tmp_path / 'nope.json')

    def test_malformed_json(self, tmp_path):
        """Unparseable JSON raises SeriesLoadError."""
        path = tmp_path / 'bad.json'
        path.write_text('{"data": [')
        with pytest.raises(SeriesLoadError, match="Could not parse JSON"):
            load_series(path)

    def test_unexpected_shape(self, tmp_path):
        """An object without a data list is rejected."""
        path = tmp_path / 'object.json'
        path.write_text(json.dumps({'rows': []}))
        with pytest.raises(SeriesLoadError, match="neither a list"):
            load_series(path)

    def test_empty_list_is_valid(self, tmp_path):
        """An empty list is a valid, empty series."""
        path = tmp_path / 'empty.json'
        path.write_text('[]')
        assert load_series(path) == []


class TestMain:
    """Tests for the CLI entry point."""

    def test_analysis_to_stdout(self, json_file, capsys):
        """Default output is the analysis result as JSON."""
        assert main([str(json_file)]) == 0

        result = json.loads(capsys.readouterr().out)
        assert len(result['closes']) == 60
        assert result['volatility'] > 0
        assert 'average_volume' in result

    def test_csv_input(self, csv_file, capsys):
        """CSV files are analysed the same way; the blank close is dropped."""
        assert main([str(csv_file)]) == 0

        result = json.loads(capsys.readouterr().out)
        assert len(result['closes']) == 30

    def test_report(self, json_file, capsys):
        """--report emits the composed report."""
        assert main([str(json_file), '--report', '--symbol', 'AAPL']) == 0

        report = json.loads(capsys.readouterr().out)
        assert report['symbol'] == 'AAPL'
        assert report['data_period']['observations'] == 60
        assert report['metadata']['periods_per_year'] == 252

    def test_overrides(self, json_file, capsys):
        """Command line options override the environment settings."""
        argv = [str(json_file), '--report', '--periods-per-year', '365', '--risk-free-rate', '0.05']
        assert main(argv) == 0

        metadata = json.loads(capsys.readouterr().out)['metadata']
        assert metadata['periods_per_year'] == 365
        assert metadata['risk_free_rate'] == 0.05

    def test_output_file_and_summary(self, json_file, tmp_path, capsys):
        """--output writes JSON; --summary prints the formatted panel."""
        output = tmp_path / 'out' / 'report.json'
        assert main([str(json_file), '--summary', '--symbol', 'AAPL', '--output', str(output)]) == 0

        stdout = capsys.readouterr().out
        assert f"Results saved to: {output}" in stdout
        assert "Summary for AAPL:" in stdout
        assert "   Annualised Volatility: " in stdout
        assert json.loads(output.read_text())['symbol'] == 'AAPL'

    def test_quiet(self, json_file, tmp_path, capsys):
        """--quiet suppresses status lines."""
        output = tmp_path / 'report.json'
        assert main([str(json_file), '--summary', '--quiet', '--output', str(output)]) == 0
        assert capsys.readouterr().out == ''

    def test_normalize_iex_payload(self, tmp_path, capsys):
        """--normalize maps raw IEX quote fields before analysis."""
        quotes = [
            {'timestamp': f'2024-01-0{i + 1}T20:59:59.000Z', 'last': str(180 + i), 'lastSize': 100}
            for i in range(5)
        ]
        path = tmp_path / 'iex.json'
        path.write_text(json.dumps({'data': quotes}))

        assert main([str(path)]) == 0
        assert json.loads(capsys.readouterr().out)['closes'] == []

        assert main([str(path), '--normalize', '--source', 'tiingo-iex']) == 0
        result = json.loads(capsys.readouterr().out)
        assert result['closes'] == [180.0, 181.0, 182.0, 183.0, 184.0]
        assert result['average_volume'] == pytest.approx(100)

    def test_critical_log_level(self, json_file):
        """Every configurable log level is accepted on the command line."""
        assert main([str(json_file), '--log-level', 'CRITICAL', '--quiet']) == 0

    def test_strict_insufficient(self, tmp_path, capsys):
        """--strict fails on thin history."""
        path = tmp_path / 'short.json'
        path.write_text(json.dumps(price_rows(10)))

        assert main([str(path), '--strict']) == 1
        assert "Insufficient history" in capsys.readouterr().err

    def test_strict_sufficient(self, json_file):
        """--strict passes once the threshold is met."""
        assert main([str(json_file), '--strict', '--min-history', '60']) == 0

    def test_missing_file(self, tmp_path, capsys):
        """A missing file exits with status 1."""
        assert main([str(tmp_path / 'missing.json')]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_invalid_environment(self, json_file, capsys):
        """A bad QUANT_* variable exits with status 1."""
        with patch.dict(os.environ, {'QUANT_VAR_CONFIDENCE': '2'}):
            assert main([str(json_file)]) == 1
        assert "QUANT_VAR_CONFIDENCE" in capsys.readouterr().err
