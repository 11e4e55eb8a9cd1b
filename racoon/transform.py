"""
CSV -> time series transformation
=================================

The JHU CSSE files are *wide*: one row per province/country, one column per
day. This module turns those rows into a tidy per-country time series.

Steps:
1) `parse_row` keeps only the columns whose header is a date and whose cell
   is an integer, in source column order.
2) `aggregate` groups rows by `Country/Region` and sums split countries
   (e.g. one row per Canadian province) element-wise by position.
3) `strip_zeros` trims the days before the first report (and any trailing
   zero run) from every country.

Nothing here raises on bad cells: a header that is not a date or a value
that is not an integer is simply left out of the series.
"""

from __future__ import annotations
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import logging
import re

import pandas as pd

from .models import CountryMetrics, CountryTimeSeriesMap, Record, Row, TimeSeries

logger = logging.getLogger(__name__)

COUNTRY_COLUMN = "Country/Region"
STATE_COLUMN = "Province/State"

# M/D/YYYY, no zero padding required; two-digit years are read as 20YY
_DATE_HEADER_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})$")
# leading whitespace, optional sign, digits; anything after the digits is ignored
_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_date_header(header: str) -> Optional[date]:
    """Parse a `M/D/YYYY` column header, returning None for anything else."""
    m = _DATE_HEADER_RE.match(str(header))
    if not m:
        return None
    month, day, year = (int(g) for g in m.groups())
    if len(m.group(3)) == 2:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date_header(d: date) -> str:
    """Inverse of `parse_date_header` (no zero padding)."""
    return f"{d.month}/{d.day}/{d.year}"


def parse_int(value) -> Optional[int]:
    """Convert a cell to int, returning None if it has no leading integer."""
    if value is None:
        return None
    m = _INT_RE.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def parse_row(row: Row) -> Tuple[str, TimeSeries]:
    """Split one CSV row into its country name and its date records."""
    records: List[Record] = []
    for key, raw in row.items():
        d = parse_date_header(key)
        if d is None:
            continue
        v = parse_int(raw)
        if v is None:
            continue
        records.append(Record(date=d, value=v))
    return row.get(COUNTRY_COLUMN, ""), tuple(records)


def strip_zeros(series: TimeSeries) -> TimeSeries:
    """Remove the leading and trailing runs of zero values (interior zeros stay)."""
    lo, hi = 0, len(series)
    while lo < hi and series[lo].value == 0:
        lo += 1
    while hi > lo and series[hi - 1].value == 0:
        hi -= 1
    return tuple(series[lo:hi])


def _normalize_name(name: str) -> str:
    return " ".join(str(name).split())


def _sum_by_position(country: str, acc: TimeSeries, new: TimeSeries) -> TimeSeries:
    if len(acc) != len(new):
        logger.warning(
            "Rows for %r carry %d and %d date values; summing by position anyway",
            country, len(acc), len(new),
        )
    return tuple(
        Record(date=r.date, value=r.value + (new[i].value if i < len(new) else 0))
        for i, r in enumerate(acc)
    )


def _sum_by_date(acc: TimeSeries, new: TimeSeries) -> TimeSeries:
    totals: Dict[date, int] = {r.date: r.value for r in acc}
    for r in new:
        totals[r.date] = totals.get(r.date, 0) + r.value
    return tuple(Record(date=d, value=v) for d, v in sorted(totals.items()))


def aggregate(
    rows: Iterable[Row],
    *,
    by_date: bool = False,
    normalize_names: bool = False,
) -> CountryTimeSeriesMap:
    """Group rows by country, sum split countries and zero-filter each series.

    The sum is positional: the Nth record of every row of a country is taken
    to be the same day as the Nth record of the first row. Pass
    `by_date=True` to key the sum by parsed date instead.
    """
    grouped: Dict[str, TimeSeries] = {}
    n_rows = 0
    for row in rows:
        n_rows += 1
        country, records = parse_row(row)
        if normalize_names:
            country = _normalize_name(country)
        acc = grouped.get(country)
        if acc is None:
            grouped[country] = records
        elif by_date:
            grouped[country] = _sum_by_date(acc, records)
        else:
            grouped[country] = _sum_by_position(country, acc, records)

    logger.debug("Aggregated %d rows into %d countries", n_rows, len(grouped))
    return {country: strip_zeros(series) for country, series in grouped.items()}


def combine_metrics(
    confirmed: Mapping[str, TimeSeries],
    deaths: Mapping[str, TimeSeries],
) -> Dict[str, CountryMetrics]:
    """Pair each confirmed series with the same country's death series.

    Keys come from `confirmed`; a country missing from `deaths` gets an
    empty death series.
    """
    return {
        country: CountryMetrics(confirmed_per_day=series, deaths_per_day=deaths.get(country, ()))
        for country, series in confirmed.items()
    }


def series_to_row(country: str, series: TimeSeries) -> Dict[str, str]:
    """Render a series back into a wide CSV row."""
    row: Dict[str, str] = {STATE_COLUMN: "", COUNTRY_COLUMN: country, "Lat": "", "Long": ""}
    for r in series:
        row[format_date_header(r.date)] = str(r.value)
    return row


def to_frame(series_map: Mapping[str, TimeSeries]) -> pd.DataFrame:
    """Long (tidy) DataFrame with columns country, date, value."""
    data = [
        {"country": country, "date": pd.Timestamp(r.date), "value": r.value}
        for country, series in series_map.items()
        for r in series
    ]
    df = pd.DataFrame(data, columns=["country", "date", "value"])
    return df.astype({"date": "datetime64[ns]", "value": "int64"})
