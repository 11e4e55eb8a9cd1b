"""
Data model (Record / CountryMetrics)
====================================

Every date cell of the JHU CSSE wide CSV becomes one `Record`.
A country's records, in source column order, form a `TimeSeries`.

Both types are immutable (`frozen=True` dataclasses, tuples for series) so
that the map built from one CSV load cannot be edited by the views that
read it.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Mapping, Tuple

# One CSV row: column name -> raw cell text
Row = Mapping[str, str]


@dataclass(frozen=True)
class Record:
    """Cumulative count reported for one country on one day."""
    date: date
    value: int


TimeSeries = Tuple[Record, ...]
CountryTimeSeriesMap = Dict[str, TimeSeries]


@dataclass(frozen=True)
class CountryMetrics:
    """Confirmed and death series of one country, side by side."""
    confirmed_per_day: TimeSeries
    deaths_per_day: TimeSeries
