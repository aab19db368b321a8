"""Besselian element lookup from a whitespace text table keyed by date.

Each data line holds, in order::

    year month day gamma t0 x0 x1 x2 x3 y0 y1 y2 y3 d0 d1 d2 mu0 mu1
    l1_0 l1_1 l1_2 l2_0 l2_1 l2_2 tan_f1 tan_f2 [delta_t]

Blank lines and lines starting with '#' or '!' are ignored. When delta_t is
omitted it is computed from the date.
"""

from __future__ import annotations

import logging
from pathlib import Path

from eclipse_tools.config import get_elements_path
from eclipse_tools.elements import BesselianElements
from eclipse_tools.time_utils import day_from_ymd, delta_t, parse_date, ymd_from_day

logger = logging.getLogger(__name__)

_FIELD_COUNT = 26

Date = tuple[int, int, int]


def _read_records(path: Path) -> dict[Date, tuple[int, list[str]]]:
    """Map each date key in the table to (line number, fields)."""
    records: dict[Date, tuple[int, list[str]]] = {}
    with path.open(encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith(('#', '!')):
                continue
            parts = line.split()
            if len(parts) < 3:
                logger.error(
                    '%s line %d: expected at least year month day, got %d fields: %r',
                    path.name,
                    line_no,
                    len(parts),
                    line,
                )
                continue
            try:
                key = (int(parts[0]), int(parts[1]), int(parts[2]))
            except ValueError as e:
                logger.error(
                    '%s line %d: bad date (year/month/day must be integers): %r - %s',
                    path.name,
                    line_no,
                    line,
                    e,
                )
                continue
            if key in records:
                logger.warning('%s line %d: duplicate entry for %s ignored', path.name, line_no, key)
                continue
            records[key] = (line_no, parts)
    return records


def _build(path: Path, line_no: int, parts: list[str]) -> BesselianElements:
    """Element set from one table line; a malformed record raises ValueError."""
    if len(parts) not in (_FIELD_COUNT, _FIELD_COUNT + 1):
        raise ValueError(
            f'{path.name} line {line_no}: expected {_FIELD_COUNT} or {_FIELD_COUNT + 1} fields, '
            f'got {len(parts)}'
        )
    try:
        values = [float(p) for p in parts[3:]]
    except ValueError as e:
        raise ValueError(f'{path.name} line {line_no}: non-numeric coefficient - {e}') from e
    year, month, day = (int(p) for p in parts[:3])
    dt = values[23] if len(values) > 23 else delta_t(year, month)
    return BesselianElements(
        date=(year, month, day),
        gamma=values[0],
        t0=values[1],
        x=tuple(values[2:6]),
        y=tuple(values[6:10]),
        d=tuple(values[10:13]),
        mu=tuple(values[13:15]),
        l1=tuple(values[15:18]),
        l2=tuple(values[18:21]),
        tan_f1=values[21],
        tan_f2=values[22],
        delta_t=dt,
    )


def _table_path(path: str | Path | None) -> Path:
    table = Path(path) if path is not None else Path(get_elements_path())
    if not table.is_file():
        raise ValueError(
            f'Besselian element table not found: {table}. '
            'Set ECLIPSE_ELEMENTS_PATH to a readable element table.'
        )
    return table


def available_dates(path: str | Path | None = None) -> list[Date]:
    """Dates with an entry in the element table, sorted."""
    return sorted(_read_records(_table_path(path)))


def find_elements(
    year: int, month: int, day: int, path: str | Path | None = None
) -> BesselianElements | None:
    """Look up the Besselian elements of the solar eclipse on a date.

    The exact date is tried first, then the day after and the day before.

    Parameters:
        year, month, day: Calendar date of the eclipse.
        path: Element table; ECLIPSE_ELEMENTS_PATH or the bundled table when None.

    Returns:
        BesselianElements, or None when no entry is within one day.

    Raises:
        ValueError: If the table is missing or the matching record is malformed.
    """
    table = _table_path(path)
    records = _read_records(table)
    base = day_from_ymd(year, month, day)
    for offset in (0, 1, -1):
        key = ymd_from_day(base + offset)
        if key not in records:
            continue
        if offset:
            logger.info(
                'No elements for %04d-%02d-%02d; using entry for %04d-%02d-%02d',
                year,
                month,
                day,
                *key,
            )
        line_no, parts = records[key]
        return _build(table, line_no, parts)
    return None


def load_elements(
    year: int, month: int, day: int, path: str | Path | None = None
) -> BesselianElements:
    """Like find_elements, but a missing eclipse raises LookupError."""
    elements = find_elements(year, month, day, path)
    if elements is None:
        raise LookupError(f'Solar eclipse not found on date {year:04d}-{month:02d}-{day:02d}')
    return elements


def load_elements_for(date_string: str, path: str | Path | None = None) -> BesselianElements:
    """Look up elements for a date string such as '2017-08-21' or '2017 8 21'.

    Raises:
        ValueError: If the string is not a date.
        LookupError: If no eclipse is within one day of it.
    """
    date = parse_date(date_string)
    if date is None:
        raise ValueError(f'Invalid date: {date_string!r}')
    return load_elements(*date, path=path)
