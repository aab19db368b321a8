"""Tests for Besselian element lookup from the date-keyed table."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from eclipse_tools.catalog import (
    available_dates,
    find_elements,
    load_elements,
    load_elements_for,
)
from eclipse_tools.time_utils import delta_t

ROW_2017 = (
    '2017 08 21  0.4367 18.0  -0.129571  0.5406426 -2.940e-05 -8.10e-06   0.485416 -0.1416400 '
    '-9.050e-05  2.05e-06  11.86696 -0.013622 -2.0e-06  89.24543 15.003940  0.542093  0.0001241 '
    '-1.18e-05  -0.004025  0.0001234 -1.17e-05  0.0046222 0.0045992'
)


@pytest.fixture(autouse=True)
def _bundled_table(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv('ECLIPSE_ELEMENTS_PATH', raising=False)


def _write_table(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / 'elements.txt'
    path.write_text('\n'.join(('# test table', *lines)) + '\n', encoding='utf-8')
    return path


def test_bundled_table_dates() -> None:
    """The bundled table carries the 2017 and 2024 total eclipses."""
    dates = available_dates()
    assert (2017, 8, 21) in dates
    assert (2024, 4, 8) in dates
    assert dates == sorted(dates)


def test_exact_date() -> None:
    """Exact date returns the stored coefficients."""
    elements = find_elements(2017, 8, 21)
    assert elements is not None
    assert elements.date == (2017, 8, 21)
    assert elements.t0 == 18.0
    assert elements.gamma == pytest.approx(0.4367)
    assert elements.x == pytest.approx((-0.129571, 0.5406426, -2.940e-05, -8.10e-06))
    assert elements.mu == pytest.approx((89.24543, 15.003940))
    assert elements.tan_f2 == pytest.approx(0.0045992)
    assert elements.delta_t == pytest.approx(70.3)


@pytest.mark.parametrize('query', [(2017, 8, 22), (2017, 8, 20)])
def test_neighbouring_day_fallback(query: tuple[int, int, int], caplog: pytest.LogCaptureFixture) -> None:
    """A date one day off still finds the eclipse and logs the substitution."""
    with caplog.at_level(logging.INFO, logger='eclipse_tools.catalog'):
        elements = find_elements(*query)
    assert elements is not None
    assert elements.date == (2017, 8, 21)
    assert 'using entry for 2017-08-21' in caplog.text


def test_fallback_across_month_boundary(tmp_path: Path) -> None:
    """The day before 1 September is 31 August."""
    table = _write_table(tmp_path, '2016 09 01' + ROW_2017[10:])
    elements = find_elements(2016, 8, 31, path=table)
    assert elements is not None
    assert elements.date == (2016, 9, 1)


def test_not_found() -> None:
    """No eclipse within a day returns None, or LookupError from load_elements."""
    assert find_elements(2017, 8, 25) is None
    with pytest.raises(LookupError, match='Solar eclipse not found on date 2017-08-25'):
        load_elements(2017, 8, 25)


def test_delta_t_computed_when_missing(tmp_path: Path) -> None:
    """A 26-field record takes TT - UT1 from the date."""
    table = _write_table(tmp_path, ROW_2017)
    elements = load_elements(2017, 8, 21, path=table)
    assert elements.delta_t == pytest.approx(delta_t(2017, 8))


def test_malformed_matching_record(tmp_path: Path) -> None:
    """A record that matches the date but is malformed raises ValueError."""
    table = _write_table(tmp_path, '2017 08 21 0.4367 18.0 1 2 3')
    with pytest.raises(ValueError, match='expected 26 or 27 fields'):
        find_elements(2017, 8, 21, path=table)
    table = _write_table(tmp_path, ROW_2017.replace('0.4367', 'gamma'))
    with pytest.raises(ValueError, match='non-numeric'):
        find_elements(2017, 8, 21, path=table)


def test_unkeyable_lines_are_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Lines without a usable date are logged and the rest of the table still loads."""
    table = _write_table(tmp_path, 'garbage', 'xx 08 21 1 2 3', '', '! note', ROW_2017)
    with caplog.at_level(logging.ERROR, logger='eclipse_tools.catalog'):
        elements = find_elements(2017, 8, 21, path=table)
    assert elements is not None
    assert 'line 2' in caplog.text
    assert 'line 3' in caplog.text
    assert 'bad date' in caplog.text


def test_duplicate_dates_keep_first(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """A repeated date is ignored with a warning."""
    second = ROW_2017.replace('0.4367', '0.5000')
    table = _write_table(tmp_path, ROW_2017, second)
    with caplog.at_level(logging.WARNING, logger='eclipse_tools.catalog'):
        elements = load_elements(2017, 8, 21, path=table)
    assert elements.gamma == pytest.approx(0.4367)
    assert 'duplicate entry' in caplog.text


def test_environment_table(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """ECLIPSE_ELEMENTS_PATH replaces the bundled table."""
    table = _write_table(tmp_path, '2030 06 01' + ROW_2017[10:])
    monkeypatch.setenv('ECLIPSE_ELEMENTS_PATH', str(table))
    assert available_dates() == [(2030, 6, 1)]
    assert find_elements(2017, 8, 21) is None


def test_missing_table(tmp_path: Path) -> None:
    """A missing table is a configuration error."""
    with pytest.raises(ValueError, match='not found'):
        find_elements(2017, 8, 21, path=tmp_path / 'absent.txt')


def test_load_elements_for_date_string() -> None:
    """Date strings in ISO or table form select the same eclipse."""
    assert load_elements_for('2024-04-08').date == (2024, 4, 8)
    assert load_elements_for('2024 4 9').date == (2024, 4, 8)
    with pytest.raises(ValueError, match='Invalid date'):
        load_elements_for('someday')
    with pytest.raises(LookupError):
        load_elements_for('2024-05-01')
