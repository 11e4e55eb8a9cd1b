"""
Dataset loader (CSV resource -> rows)
=====================================

This module locates and reads the JHU CSSE global time-series CSV files and
converts them into plain row dicts (column name -> cell text).

Key ideas:
- The resource path is fixed; only the base prefix (PUBLIC_URL) varies.
- A base that starts with http:// or https:// is fetched with requests,
  anything else is read from the local filesystem.
- Every cell is kept as text (`dtype=str`) so the transformer decides what
  is a number; empty cells stay "" instead of NaN.
- Any failure to obtain the text is raised as `FetchFailure`.
"""

from __future__ import annotations
from typing import Dict, List, Optional
import io
import logging

import pandas as pd
import requests

logger = logging.getLogger(__name__)

METRICS = ("confirmed", "deaths")

_RESOURCE_PATH = (
    "COVID-19/csse_covid_19_data/csse_covid_19_time_series/"
    "time_series_covid19_{metric}_global.csv"
)


class FetchFailure(RuntimeError):
    """The CSV resource could not be retrieved."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Could not fetch {source}: {reason}")
        self.source = source


def data_source_url(base_url: str, metric: str) -> str:
    """Build the CSV location for one metric under a base prefix."""
    if metric not in METRICS:
        raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")
    base = (base_url or "").rstrip("/")
    path = _RESOURCE_PATH.format(metric=metric)
    return f"{base}/{path}" if base else path


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _skip_bad_line(fields: List[str]) -> None:
    logger.warning("Skipping malformed CSV row with %d fields: %s", len(fields), ",".join(fields[:4]))
    return None


def read_csv_rows(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into a list of row dicts, preserving column order.

    Rows with more fields than the header are logged and left out.
    """
    if not text.strip():
        return []
    df = pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        engine="python",
        on_bad_lines=_skip_bad_line,
    )
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df.to_dict(orient="records")


def fetch_csv_text(source: str, timeout: Optional[float] = None) -> str:
    """Return the raw CSV text from a URL or a local path."""
    if _is_url(source):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchFailure(source, str(e)) from e
        return response.text
    try:
        with open(source, "r", encoding="utf-8-sig") as f:
            return f.read()
    except OSError as e:
        raise FetchFailure(source, str(e)) from e


def load_csv_rows(source: str, timeout: Optional[float] = None) -> List[Dict[str, str]]:
    """Fetch one CSV resource and return its rows."""
    logger.info("Fetching %s", source)
    text = fetch_csv_text(source, timeout=timeout)
    try:
        rows = read_csv_rows(text)
    except pd.errors.ParserError as e:
        raise FetchFailure(source, f"unreadable CSV: {e}") from e
    logger.info("Loaded %d rows from %s", len(rows), source)
    return rows
