"""
Views: HTML table and line chart
================================

The two views of the original dashboard, fed with the selected series:

- `html_table`: one row per day, one column per selected country.
- `line_chart`: cumulative counts over time, one line per country.

matplotlib is imported lazily (like the report module) so the table and
exports work without it.
"""

from __future__ import annotations
from typing import Mapping, Optional, Sequence
import os

import pandas as pd

from .models import TimeSeries
from .transform import to_frame

# Size of the original SVG chart, in pixels
CHART_WIDTH = 800
CHART_HEIGHT = 400
_DPI = 100


def _pick(series_map: Mapping[str, TimeSeries], countries: Sequence[str]) -> dict:
    if not countries:
        raise ValueError("No countries selected.")
    missing = [c for c in countries if c not in series_map]
    if missing:
        raise KeyError(f"Unknown countries: {missing}")
    return {c: series_map[c] for c in countries}


def wide_table(series_map: Mapping[str, TimeSeries], countries: Sequence[str]) -> pd.DataFrame:
    """Pivot the selected series into a date x country table."""
    picked = _pick(series_map, countries)
    df = to_frame(picked)
    if df.empty:
        return pd.DataFrame(columns=list(countries), index=pd.Index([], name="date"), dtype="Int64")
    table = df.pivot(index="date", columns="country", values="value")
    table = table.reindex(columns=list(countries)).astype("Int64")
    table.index = table.index.strftime("%Y-%m-%d")
    table.index.name = "date"
    table.columns.name = None
    return table


def html_table(series_map: Mapping[str, TimeSeries], countries: Sequence[str]) -> str:
    return wide_table(series_map, countries).to_html(na_rep="", classes="racoon-table")


def line_chart(
    series_map: Mapping[str, TimeSeries],
    countries: Sequence[str],
    out_path: str,
    *,
    title: Optional[str] = None,
    ylabel: str = "Cumulative count",
) -> str:
    """Draw the selected series as lines and save the figure to `out_path`."""
    try:
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install it with: python -m pip install matplotlib"
        ) from e

    picked = _pick(series_map, countries)
    if not any(picked.values()):
        raise ValueError("Nothing to plot: every selected series is empty.")

    fig, ax = plt.subplots(figsize=(CHART_WIDTH / _DPI, CHART_HEIGHT / _DPI), dpi=_DPI)
    try:
        single = len(picked) == 1
        for country, series in picked.items():
            if not series:
                continue
            ax.plot(
                [r.date for r in series],
                [r.value for r in series],
                label=country,
                linewidth=1.5,
                color="steelblue" if single else None,
            )
        ax.set_ylim(bottom=0)
        ax.set_ylabel(ylabel)
        if title:
            ax.set_title(title)
        if not single:
            ax.legend()
        fig.autofmt_xdate()
        fig.tight_layout()
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        fig.savefig(out_path)
    finally:
        plt.close(fig)
    return out_path
