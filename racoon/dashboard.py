"""
Dashboard (the App)
===================

The dashboard is the in-memory side of the original browser App:

1) Fetch the CSV of each metric once (`load`)
2) Transform it into per-country series (racoon.transform)
3) Keep a *selection* of country names (what the country picker shows)
4) Hand the selected series to the views (table, chart, export, report)

Until a load succeeds the dashboard is `loading`. A failed fetch is logged
and leaves it loading; there is no retry. `close()` tears the dashboard
down, and a load that finishes afterwards is discarded.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import heapq
import json
import logging

from .indices import CountryIndex, build_country_index
from .loader import METRICS, FetchFailure, data_source_url, load_csv_rows
from .models import CountryMetrics, CountryTimeSeriesMap, Row, TimeSeries
from .transform import aggregate, combine_metrics, to_frame

logger = logging.getLogger(__name__)


@dataclass
class Dashboard:
    """COVID-19 dashboard state.

    The dashboard stores:
    - series: metric -> aggregated country map (read-only after load)
    - index: country lookups over the primary metric
    - selection: the countries currently displayed

    Selecting and deselecting only change `selection`; the data is never
    edited.
    """
    base_url: str = "."
    metrics: Tuple[str, ...] = METRICS
    timeout: Optional[float] = None
    # Stores CLI commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)

    series: Dict[str, CountryTimeSeriesMap] = field(default_factory=dict, init=False)
    combined: Optional[Dict[str, CountryMetrics]] = field(default=None, init=False)
    index: Optional[CountryIndex] = field(default=None, init=False)
    selection: List[str] = field(default_factory=list, init=False)

    # Stacks for undo/redo (store snapshots of the selection)
    _undo: List[List[str]] = field(default_factory=list, init=False)
    _redo: List[List[str]] = field(default_factory=list, init=False)
    _closed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if not self.metrics:
            raise ValueError("at least one metric is required")
        for m in self.metrics:
            if m not in METRICS:
                raise ValueError(f"metric must be one of {METRICS}, got {m!r}")

    # ---------------- Loading ----------------
    @property
    def loading(self) -> bool:
        return self.index is None

    @property
    def primary_metric(self) -> str:
        return self.metrics[0]

    def source_for(self, metric: str) -> str:
        return data_source_url(self.base_url, metric)

    def load(self) -> bool:
        """Fetch and transform every metric. Returns True once the data is in place."""
        rows_by_metric: Dict[str, List[Dict[str, str]]] = {}
        for metric in self.metrics:
            try:
                rows_by_metric[metric] = load_csv_rows(self.source_for(metric), timeout=self.timeout)
            except FetchFailure as e:
                logger.error("%s", e)
                return False
        return self.load_rows(rows_by_metric)

    def load_rows(self, rows_by_metric: Mapping[str, Iterable[Row]]) -> bool:
        """Transform already-fetched rows (metric -> rows) and publish the result."""
        loaded = {metric: aggregate(rows_by_metric[metric]) for metric in self.metrics}
        if self._closed:
            logger.info("Dashboard closed before loading finished; result discarded")
            return False
        self.series = loaded
        self.index = build_country_index(loaded[self.primary_metric])
        if "confirmed" in loaded and "deaths" in loaded:
            self.combined = combine_metrics(loaded["confirmed"], loaded["deaths"])
        logger.info("Dashboard ready: %d countries", len(self.index))
        return True

    def close(self) -> None:
        self._closed = True

    def _require_ready(self) -> CountryIndex:
        if self.index is None:
            raise RuntimeError("Loading")
        return self.index

    # ---------------- History (Stacks) ----------------
    def _push_history(self) -> None:
        self._undo.append(self.selection[:])
        self._redo.clear()

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.selection[:])
        self.selection = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.selection[:])
        self.selection = self._redo.pop()
        return True

    # ---------------- Selection ----------------
    def select(self, country: str) -> None:
        """Add a country to the selection."""
        idx = self._require_ready()
        if country not in idx:
            raise KeyError(f"Unknown country: {country}")
        if country in self.selection:
            return
        self._push_history()
        self.selection.append(country)

    def deselect(self, country: str) -> bool:
        if country not in self.selection:
            return False
        self._push_history()
        self.selection = [c for c in self.selection if c != country]
        return True

    def clear(self) -> None:
        self._push_history()
        self.selection = []

    # ---------------- Output operations ----------------
    def _metric(self, metric: Optional[str]) -> str:
        m = metric or self.primary_metric
        if m not in self.series:
            raise ValueError(f"metric not loaded: {m}")
        return m

    def selected_series(self, metric: Optional[str] = None) -> Dict[str, TimeSeries]:
        self._require_ready()
        m = self._metric(metric)
        return {c: self.series[m].get(c, ()) for c in self.selection}

    def topk(self, k: int, metric: Optional[str] = None) -> List[Tuple[str, int]]:
        """Countries with the highest latest cumulative value."""
        if k < 1:
            raise ValueError("k must be >= 1")
        self._require_ready()
        m = self._metric(metric)
        heap: List[Tuple[int, str]] = []
        for country, series in self.series[m].items():
            v = series[-1].value if series else 0
            if len(heap) < k:
                heapq.heappush(heap, (v, country))
            elif v > heap[0][0]:
                heapq.heapreplace(heap, (v, country))
        heap.sort(reverse=True)
        return [(country, v) for v, country in heap]

    def export_csv(self, path: str, metric: Optional[str] = None) -> None:
        """Export the selected series as tidy rows: country,date,value."""
        df = to_frame(self.selected_series(metric))
        df["date"] = df["date"].dt.strftime("%Y-%m-%d")
        df.to_csv(path, index=False)

    def export_json(self, path: str) -> None:
        """Export the selection with every loaded metric to a JSON file."""
        self._require_ready()
        payload = []
        for country in self.selection:
            entry: Dict[str, object] = {"country": country}
            for m in self.metrics:
                entry[m] = [
                    {"date": r.date.isoformat(), "value": r.value}
                    for r in self.series[m].get(country, ())
                ]
            payload.append(entry)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    def describe(self) -> Sequence[str]:
        """Short status lines for the `stats` command."""
        if self.loading:
            return ["Loading"]
        lines = [f"Countries: {len(self.index)} | Selected: {len(self.selection)}"]
        for m in self.metrics:
            dates = [r.date for s in self.series[m].values() for r in s]
            if dates:
                lines.append(f"{m}: {min(dates).isoformat()} to {max(dates).isoformat()}")
            else:
                lines.append(f"{m}: no data")
        return lines
